"""waiting on a child and classifying how it ended

A process either returns an exit status or is killed by a signal, never
both, so wait() returns a Termination with exactly one field set.

>>> decode(0)
Termination(status=0, signal=None)
>>> decode(1 << 8)
Termination(status=1, signal=None)
>>> decode(9)
Termination(status=None, signal='SIGKILL')
>>> from_returncode(-15)
Termination(status=None, signal='SIGTERM')
"""

__all__ = 'Termination', 'wait', 'decode', 'from_returncode', 'signal_name'

import os
from collections import namedtuple
from signal import Signals

Termination = namedtuple('Termination', 'status signal')


def signal_name(signum):
    """'SIGKILL' for 9; real-time signals have no name, so they get 'SIG<n>'"""
    try:
        return Signals(signum).name
    except ValueError:
        return f'SIG{signum}'


def decode(status):
    """turn a raw os.waitpid() status into a Termination"""
    if os.WIFSIGNALED(status):
        return Termination(None, signal_name(os.WTERMSIG(status)))
    if os.WIFEXITED(status):
        return Termination(os.WEXITSTATUS(status), None)
    raise RuntimeError(f'weird exit status: {hex(status)}')


def from_returncode(returncode):
    """turn a subprocess-style returncode (negative for signals) into a Termination"""
    if returncode < 0:
        return Termination(None, signal_name(-returncode))
    return Termination(returncode, None)


def wait(pid):
    """block until pid terminates

    >>> from aspawn.posix_spawn import spawn
    >>> wait(spawn(['sh', '-c', 'exit 3']))
    Termination(status=3, signal=None)
    """
    pid_, status = os.waitpid(pid, 0)
    if pid_ != pid:
        raise RuntimeError(f'pid is {pid_}, expected {pid}')
    return decode(status)
