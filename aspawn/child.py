"""the live handle of a spawned process

A ChildProcess is created synchronously: by the time the constructor
returns, the process is running (or has failed to launch) and pid and
the stdio streams are set. Everything else is reported as events on the
asyncio loop that was running when it was created, never from inside the
constructor, so listeners attached right after construction see every
event.

Events:
    'spawn'                  the process started
    'exit'  (status, signal) the process terminated
    'close' (status, signal) the process terminated and every flowing
                             stdio stream reached end of file
    'error' (exc)            the process could not be launched

Blocking work (reading output, waiting on the pid) happens in daemon
threads that hand their results over with loop.call_soon_threadsafe().
"""

__all__ = 'PIPE', 'ChildProcess', 'ReadStream', 'change_default_backend', 'get_signal'

import asyncio
import logging
import os
from shlex import join, split
from signal import Signals, SIGTERM
from sys import platform
from threading import Lock

from .events import EventEmitter
from .fd import FD
from .pipe import InputPipe, OutputPipe
from .thread import Thread

logger = logging.getLogger(__name__)

PIPE = -1
CHUNK_SIZE = 1 << 16


def get_signal(sig: Signals | int | str) -> Signals:
    """normalize a signal given as a number, a Signals or a name

    >>> get_signal('kill'), get_signal('SIGTERM'), get_signal(2)
    (<Signals.SIGKILL: 9>, <Signals.SIGTERM: 15>, <Signals.SIGINT: 2>)
    """
    if isinstance(sig, str):
        sig = sig.upper()
        try:
            return Signals[sig if sig.startswith('SIG') else f'SIG{sig}']
        except KeyError:
            raise ValueError(f'unknown signal: {sig}') from None
    return Signals(sig)


def get_backend(name=None):
    if name == 'subprocess':
        from . import subprocess as backend
        return backend
    if name == 'posix_spawn':
        from . import posix_spawn as backend
        return backend
    if name == 'fork_exec':
        from . import fork_exec as backend
        return backend
    if name == 'default':
        return get_backend.default
    raise ValueError(f'unknown backend: {name}')


if 'ASPAWN_BACKEND' in os.environ:
    get_backend.default = get_backend(os.environ['ASPAWN_BACKEND'])
elif platform == 'win32':
    get_backend.default = get_backend('subprocess')
elif hasattr(os, 'posix_spawnp'):
    get_backend.default = get_backend('posix_spawn')
else:
    get_backend.default = get_backend('fork_exec')


def change_default_backend(name_or_namespace):
    """switch the backend used when none is given

    Accepts a backend name or anything with spawn() and wait().
    """
    if isinstance(name_or_namespace, str):
        get_backend.default = get_backend(name_or_namespace)
    else:
        name_or_namespace.spawn
        name_or_namespace.wait
        get_backend.default = name_or_namespace
    return get_backend.default


def post(loop, callback, *args):
    """call_soon_threadsafe() that tolerates a loop which has gone away"""
    try:
        loop.call_soon_threadsafe(callback, *args)
    except RuntimeError:
        logger.debug('event loop closed, dropping %s%r', getattr(callback, '__name__', callback), args)


class ReadStream(EventEmitter):
    """the parent's end of a child's stdout or stderr

    Emits 'data' (bytes) for every chunk read and 'end' once at end of
    file. Nothing is read until the stream flows: the first 'data'
    listener, pipe() or resume() starts a reader thread. A stream that
    never flows can still be read directly or handed to another process
    through fileno().
    """
    def __init__(self, fd, loop, name):
        super().__init__()
        self.fd = fd
        self.loop = loop
        self.name = name
        self.flowing = False
        self.ended = False
        self.thread = None

    def fileno(self):
        return self.fd.fileno()

    def on(self, event, listener):
        super().on(event, listener)
        if event == 'data':
            self.resume()

    def once(self, event, listener):
        super().once(event, listener)
        if event == 'data':
            self.resume()

    def resume(self):
        """start reading in a background thread"""
        if self.flowing or self.fd.closed:
            return
        self.flowing = True
        self.thread = Thread(self._read_loop, name=f'{self.name}-reader').start()

    def pipe(self, destination):
        """write every chunk to destination, a binary file or anything with write()"""
        self.on('data', destination.write)
        if hasattr(destination, 'flush'):
            self.on('end', destination.flush)
        return destination

    def read(self):
        """read everything left, blocking; only for streams that are not flowing"""
        if self.flowing:
            raise ValueError(f'{self.name} is being read by a reader thread')
        chunks = []
        while chunk := self.fd.read(CHUNK_SIZE):
            chunks.append(chunk)
        self.close()
        return b''.join(chunks)

    def close(self):
        self.fd.close()

    def _read_loop(self):
        try:
            while chunk := self.fd.read(CHUNK_SIZE):
                post(self.loop, self.emit, 'data', chunk)
        except OSError as e:
            logger.debug('%s: read failed: %s', self.name, e)
        finally:
            self.fd.close()
            post(self.loop, self._end)

    def _end(self):
        self.ended = True
        self.emit('end')

    def __repr__(self):
        return f'{type(self).__name__}({self.name}, {self.fd})'


def get_input(stream):
    """turn a stdin argument into something a backend can dup2()"""
    if stream is None or isinstance(stream, FD):
        return stream
    if stream == PIPE:
        return InputPipe()
    if isinstance(stream, int):
        return FD(stream, 'rb', closefd=False)
    if isinstance(stream, ChildProcess):
        if stream.stdout is None:
            raise ValueError(f'{stream!r} does not have a piped stdout')
        return stream.stdout
    if hasattr(stream, 'child'):
        return get_input(stream.child)
    if hasattr(stream, 'fileno'):
        return stream
    try:
        data = memoryview(stream)
    except TypeError:
        pass
    else:
        return InputPipe(data)
    raise ValueError(f'not sure how to use {repr(stream)} of type {type(stream)} as stdin')


def get_output(stream):
    """turn a stdout/stderr argument into something a backend can dup2()"""
    if stream is None:
        return None
    if stream == PIPE:
        return OutputPipe()
    if isinstance(stream, int):
        return FD(stream, 'wb', closefd=False)
    if hasattr(stream, 'fileno'):
        return stream
    raise ValueError(f'not sure how to use {repr(stream)} of type {type(stream)} as output')


def get_argv(command, args, shell):
    """build the argv to execute

    >>> get_argv('echo', ['a b'], False)
    ['echo', 'a b']
    >>> get_argv('echo $HOME', (), True)
    ['sh', '-c', 'echo $HOME']
    >>> get_argv('echo', ['a b'], 'bash')
    ['bash', '-c', "echo 'a b'"]
    """
    argv = [command, *args]
    if not shell:
        return argv
    if shell is True:
        shell = 'sh -c'
    if isinstance(shell, str):
        shell = split(shell)
        if len(shell) == 1:
            shell.append('-c')
    line = command if not args else join(argv)
    return [*shell, line]


class ChildProcess(EventEmitter):
    """spawns a process and exposes it as an event emitter

    command: the program to run, looked up on PATH
    args:    its arguments
    cwd:     working directory of the child; None keeps ours
    env:     full environment of the child; None inherits os.environ
    stdin:   PIPE (default) for a writable .stdin, bytes-like to feed that
             data, None to inherit, an fd or something with fileno(), or a
             ChildProcess/SpawnTask/ReadStream to read its stdout
    stdout:  PIPE (default) for a ReadStream, None to inherit, or an fd or
             something with fileno()
    stderr:  same as stdout
    shell:   run through a shell: True for 'sh -c', or a shell name
    backend: 'default', 'posix_spawn', 'fork_exec', 'subprocess' or a
             namespace with spawn() and wait()

    Must be created while an asyncio loop is running; events are emitted
    on that loop.
    """
    def __init__(
        self,
        command, args=(),
        *,
        cwd=None, env=None, stdin=PIPE, stdout=PIPE, stderr=PIPE,
        shell=False, backend='default',
    ):
        super().__init__()
        self.loop = asyncio.get_running_loop()
        self.command = command
        self.args = tuple(args)
        self.argv = get_argv(command, self.args, shell)
        self.backend = get_backend(backend) if isinstance(backend, str) else backend

        self.pid = None
        self.exit_code = None
        self.signal_code = None
        self.exited = False
        self.closed = False
        self.reaped = False
        self.reap_lock = Lock()
        self.waiter = None
        self.stdin = self.stdout = self.stderr = None

        self.streams = get_input(stdin), get_output(stdout), get_output(stderr)
        try:
            self.pid = self.backend.spawn(self.argv, env, self.streams, cwd)
        except OSError as e:
            logger.debug('failed to launch %s: %s', self.argv, e)
            self._close_local(launched=False)
            self.loop.call_soon(self.emit, 'error', e)
            return

        logger.debug('spawned %s as pid %d', self.argv, self.pid)
        self._close_local(launched=True)
        self.loop.call_soon(self.emit, 'spawn')
        self.waiter = Thread(self._wait, name=f'wait-{self.pid}').start()

    def _close_local(self, launched):
        """drop our copies of the child's ends; wrap the ends we keep"""
        stdin, stdout, stderr = self.streams
        for stream in self.streams:
            if isinstance(stream, (InputPipe, OutputPipe)):
                stream.close_local()
        # like a shell, keep no copy of an upstream stdout we handed over
        if launched and isinstance(stdin, ReadStream) and not stdin.flowing:
            stdin.close()
        if not launched:
            # a feeder thread notices the closed read end by itself
            if isinstance(stdin, InputPipe) and stdin.thread is None:
                stdin.write_fd.close()
            for stream in stdout, stderr:
                if isinstance(stream, OutputPipe):
                    stream.read_fd.close()
            return
        if isinstance(stdin, InputPipe) and stdin.thread is None:
            self.stdin = stdin.writer()
        if isinstance(stdout, OutputPipe):
            self.stdout = ReadStream(stdout.read_fd, self.loop, f'{self.pid}-stdout')
        if isinstance(stderr, OutputPipe):
            self.stderr = ReadStream(stderr.read_fd, self.loop, f'{self.pid}-stderr')
        for stream in self.stdout, self.stderr:
            if stream is not None:
                stream.once('end', self._maybe_close)

    def _wait(self):
        try:
            termination = self.backend.wait(self.pid)
        except ChildProcessError as e:
            logger.warning('lost track of pid %d: %s', self.pid, e)
            post(self.loop, self.emit, 'error', e)
            return
        with self.reap_lock:
            self.reaped = True
        post(self.loop, self._on_exit, *termination)

    def _on_exit(self, status, signal):
        self.exit_code = status
        self.signal_code = signal
        self.exited = True
        logger.debug('pid %d exited: status=%s signal=%s', self.pid, status, signal)
        self.emit('exit', status, signal)
        self._maybe_close()

    def _maybe_close(self):
        if self.closed or not self.exited:
            return
        if any(s is not None and s.flowing and not s.ended for s in (self.stdout, self.stderr)):
            return
        self.closed = True
        if self.stdin is not None and not self.stdin.closed:
            self.stdin.close()
        logger.debug('pid %d closed', self.pid)
        self.emit('close', self.exit_code, self.signal_code)

    def kill(self, sig: Signals | int | str = SIGTERM) -> bool:
        r"""send a signal to the process

        sig can be an integer or the signal name, case insensitive, with or
        without the 'SIG' prefix

        NOTE: this follows POSIX kill semantics, not those of `subprocess`; the
        default is to send SIGTERM, not SIGKILL.

        Returns True if the signal was delivered. A process that exited but
        has not been reaped yet still accepts signals, so that is True too.
        Once the exit waiter has reaped the pid, this returns False without
        signalling, even before 'exit' is emitted.
        """
        sig = get_signal(sig)
        if self.pid is None:
            return False
        with self.reap_lock:
            if self.reaped:
                return False
            try:
                os.kill(self.pid, sig)
            except ProcessLookupError:
                return False
        return True

    terminate = kill

    def __repr__(self):
        return f'{type(self).__name__}({repr(self.argv)}, pid={self.pid})'
