"""process creation with subprocess.Popen

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

from subprocess import Popen
from threading import Lock
from .posix_wait import from_returncode
from .spawn_util import get_streams

spawned = {}
spawned_lock = Lock()


def spawn(argv, env=None, streams=(), cwd=None):
    streams = get_streams(streams, include_None=True, std_names=True)
    popen = Popen(argv, env=env, cwd=cwd, **dict(streams))
    with spawned_lock:
        spawned[popen.pid] = popen
    return popen.pid


def wait(pid):
    with spawned_lock:
        popen = spawned.get(pid)
    if popen is None:
        from .posix_wait import wait
        return wait(pid)
    returncode = popen.wait()
    with spawned_lock:
        spawned.pop(pid, None)
    return from_returncode(returncode)
