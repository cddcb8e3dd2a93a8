__all__ = 'FD',

import os
from errno import EBADF


class FD:
    """file descriptor wrapper

    A glorified integer with close() and open() methods. Closing twice is
    fine, which matters because the parent hands its copy of a child's
    descriptor over and then forgets about it.

    Like io.FileIO, an FD closes its descriptor when it is garbage
    collected, unless closefd is False, which is how descriptors the
    caller passed in are wrapped.

    >>> from os import pipe
    >>> r, w = pipe()
    >>> rfd, wfd = FD(r, 'rb'), FD(w, 'wb')
    >>> with wfd.open() as file: file.write(b'test')
    ...
    4
    >>> rfd.read(4)
    b'test'
    >>> rfd.close(); rfd.closed
    True
    >>> rfd.close()
    """
    def __init__(self, fd, mode='rb', closefd=True):
        self.fd = int(fd)
        self.mode = mode
        self.closefd = closefd
        self._closed = False

    def fileno(self):
        return self.fd

    def open(self, buffering=-1):
        """wrap in a file object, which then owns the descriptor"""
        self._closed = True
        return open(self.fd, self.mode, buffering=buffering, closefd=self.closefd)

    def read(self, size):
        """one os.read() call; b'' means end of file"""
        return os.read(self.fd, size)

    def close(self, invalid_ok=True):
        if self._closed:
            return
        self._closed = True
        if not self.closefd:
            return
        try:
            os.close(self.fd)
        except OSError as e:
            if not invalid_ok or e.errno != EBADF:
                raise

    def __del__(self):
        self.close()

    @property
    def closed(self):
        return self._closed

    def __repr__(self):
        return f'{type(self).__name__}({self.fd}, {repr(self.mode)})'

    def __int__(self):
        return self.fd
