"""process creation with os.posix_spawnp

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
"""

__all__ = 'spawn', 'wait'

import os
import signal
from .posix_wait import wait
from .spawn_util import redirections

RESET_SIGNALS = tuple(
    sig for sig in (
        getattr(signal, name, None)
        for name in ('SIGPIPE', 'SIGXFZ', 'SIGXFSZ')
    )
    if sig is not None
)


def spawn(argv, env=None, streams=(), cwd=None):
    """spawn a process and return its pid

    posix_spawn has no way to chdir in the child, so a cwd is applied to
    this process for the duration of the call, under the cwd() lock.

    >>> wait(spawn(['pwd'], cwd='/', streams={1: os.open(os.devnull, os.O_WRONLY)}))
    Termination(status=0, signal=None)
    """
    if env is None:
        env = os.environ

    dups, closes = redirections(streams)
    file_actions = [
        (os.POSIX_SPAWN_DUP2, parent_fd, child_fd)
        for parent_fd, child_fd in dups
    ] + [
        (os.POSIX_SPAWN_CLOSE, fd)
        for fd in closes
    ]

    def launch():
        return os.posix_spawnp(
            argv[0], argv, env,
            file_actions=file_actions,
            setsigdef=RESET_SIGNALS,
        )

    if cwd is None:
        return launch()

    from .util import cwd as working_directory
    with working_directory(cwd):
        return launch()
