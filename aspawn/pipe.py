__all__ = 'Pipe', 'InputPipe', 'OutputPipe'

from .thread import Thread
from .fd import FD
import os
import logging

logger = logging.getLogger(__name__)


class Pipe:
    """wrapper around os.pipe

    Both ends are non-inheritable, so a child only ever sees the end that
    gets dup2()'d onto one of its standard streams.

    >>> p = Pipe()
    >>> p.write(b'hello')
    5
    >>> p.read()
    b'hello'
    """
    def __init__(self):
        self.fds = tuple(
            FD(fd, f'{rw}b')
            for fd, rw in zip(os.pipe(), 'rw')
        )

    @property
    def read_fd(self):
        return self.fds[0]

    @property
    def write_fd(self):
        return self.fds[1]

    def close(self, invalid_ok=True):
        for fd in self.fds:
            fd.close(invalid_ok)

    def write(self, data):
        """open the write end, write all of data and close it"""
        with self.write_fd.open() as file:
            return file.write(data)

    def read(self):
        """open the read end, read until EOF and close it"""
        with self.read_fd.open() as file:
            return file.read()

    def __repr__(self):
        return f'{type(self).__name__}()<{self.read_fd}, {self.write_fd}>'


class InputPipe(Pipe):
    """Pipe used as the standard input of a process

    With data, a thread feeds it into the pipe, so there is no size limit
    and nothing blocks:
    >>> len(InputPipe(b'X' * 12345678).read())
    12345678

    Without data, the parent keeps the write end for itself:
    >>> p = InputPipe(); w = p.writer(); w.write(b'abc'); w.close(); p.read()
    3
    b'abc'
    """
    def __init__(self, data=None):
        super().__init__()
        self.thread = None
        if data is not None:
            self.thread = Thread(lambda: self._feed(data), name='stdin-feeder').start()

    def _feed(self, data):
        try:
            return self.write(data)
        except BrokenPipeError:
            logger.debug('child closed its stdin before reading %d bytes', len(data))
            return 0

    def writer(self):
        """the parent's end as an unbuffered binary file"""
        return self.write_fd.open(buffering=0)

    def close_local(self):
        self.read_fd.close()

    def fileno(self):
        return int(self.read_fd)

    def wait(self):
        return None if self.thread is None else self.thread.join()


class OutputPipe(Pipe):
    """Pipe used as the standard output or error of a process"""
    def fileno(self):
        return int(self.write_fd)

    def close_local(self):
        self.write_fd.close()
