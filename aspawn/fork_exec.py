"""process creation with os.fork and os.execvpe

It only contains two functions, spawn() and wait()

>>> import os
>>> from tempfile import TemporaryDirectory
>>> with TemporaryDirectory() as dir:
...     with open(f'{dir}/file', 'wb') as file:
...         wait(spawn(['echo', 'hello world'], streams={1: file}))
...     with open(f'{dir}/file') as file:
...         print(file.read(), end='')
...
Termination(status=0, signal=None)
hello world

Errors raised in the child before exec() are sent back over a pipe and
raised again in the parent:
>>> try: spawn(['nonexistent-program'])
... except FileNotFoundError as e: e.errno
...
2
"""

__all__ = 'spawn', 'wait'

import os
import signal
from .posix_wait import wait
from .pipe import Pipe
from .spawn_util import redirections


def spawn(argv, env=None, streams=(), cwd=None):
    if env is None:
        env = os.environ
    dups, closes = redirections(streams)
    launch_pipe = Pipe()

    pid = os.fork()
    if pid:
        launch_pipe.write_fd.close()
        error = launch_pipe.read()
        if error:
            os.waitpid(pid, 0)
            from ast import literal_eval
            import builtins
            name, argstr = error.decode().split('\n', maxsplit=1)
            error = getattr(builtins, name, OSError)
            raise error(*literal_eval(argstr))
        return pid

    try:
        for name in 'SIGPIPE', 'SIGXFZ', 'SIGXFSZ':
            sig = getattr(signal, name, None)
            if sig is not None:
                signal.signal(sig, signal.SIG_DFL)

        for parent_fd, child_fd in dups:
            os.dup2(parent_fd, child_fd)
        for fd in closes:
            os.close(fd)

        if cwd is not None:
            os.chdir(cwd)
        launch_pipe.read_fd.close()
        os.execvpe(argv[0], argv, env)
    except BaseException as e:
        launch_pipe.write('\n'.join((
            type(e).__name__,
            repr(e.args),
        )).encode())
    finally:
        os._exit(127)
