__all__ = (
    'pwd', 'cd', 'cwd',
    'to', 'now', 'get', 'Arguments',
    'spawn', 'run',
)

import asyncio
import os

from contextlib import contextmanager
from funcpipes import Pipe, to, now, get, Arguments
from .task import spawn as spawn_
from threading import Lock


@Pipe
def pwd():
    """alias for os.getcwdb()

    >>> cd('/'); pwd()
    b'/'
    b'/'
    """
    return os.getcwdb()


@Pipe
def cd(path):
    """alias for os.chdir(), but returns the resultant directory

    >>> cd('/tmp')
    b'/tmp'
    >>> cd('..')
    b'/'
    """
    os.chdir(path)
    return pwd()


@contextmanager
def cwd(path, locked=True):
    """temporarily changes the working directory

    Threadsafe if locked is set (default). The effect is to simply wrap the
    context with an exclusive lock, so it is reasonable to keep the code
    inside the `with cwd(...):` block minimal. In the case of launching a
    child process, the working directory of the parent only matters until the
    child is created, which is how the posix_spawn backend honours cwd=.

    >>> cd('/')
    b'/'
    >>> with cwd('tmp') as dir: print(dir)
    ...
    b'/tmp'
    >>> pwd()
    b'/'
    """
    if locked:
        with cwd.lock:
            yield from cwd.__wrapped__(path, False)
    else:
        orig = pwd()
        try:
            yield cd(path)
        finally:
            cd(orig)
cwd.lock = Lock()  # noqa: E305


@Pipe
def spawn(*args, **kwargs):
    r"""creates a SpawnTask, see help(aspawn.task.spawn)"""
    return spawn_(*args, **kwargs)


@Pipe
def run(*args, **kwargs):
    r"""spawn and wait in a fresh event loop

    For synchronous code; inside a coroutine, await spawn() instead.

    >>> run('echo', ['abc']).stdout
    'abc\n'
    >>> ['abc'] | run.partial('echo') | get.stdout
    'abc\n'
    >>> run.sh('echo $((1 + 2))').stdout
    '3\n'
    """
    async def main():
        return await spawn_(*args, **kwargs)
    return asyncio.run(main())


for func in spawn, run:
    func.sh = func.partial(shell=True)
