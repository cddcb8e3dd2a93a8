__all__ = (
    'spawn', 'SpawnTask',
    'SpawnResult', 'SpawnError', 'LaunchError', 'AbnormalExit', 'SignalTermination',
)

import asyncio
import codecs
import logging
import traceback
from errno import errorcode

from .child import ChildProcess

logger = logging.getLogger(__name__)

MARKER = '    ...\n'


class SpawnResult:
    """what a process left behind

    output is (stdout, stderr); exactly one of status and signal is set
    for a process that ran.

    >>> r = SpawnResult(123, 'hi\\n', '', 0, None)
    >>> r
    SpawnResult(pid=123, stdout='hi\\n', stderr='', status=0, signal=None)
    >>> r.output == (r.stdout, r.stderr)
    True
    """
    FIELDS = 'pid', 'stdout', 'stderr', 'status', 'signal'

    def __init__(self, pid, stdout='', stderr='', status=None, signal=None):
        self.pid = pid
        self.stdout = stdout
        self.stderr = stderr
        self.status = status
        self.signal = signal

    @property
    def output(self):
        return self.stdout, self.stderr

    def __repr__(self):
        param_str = ', '.join(f'{n}={repr(getattr(self, n))}' for n in self.FIELDS)
        return f'{type(self).__name__}({param_str})'

    def __iter__(self):
        return (getattr(self, n) for n in self.FIELDS)


class SpawnError(SpawnResult, Exception):
    """the result as an error

    code:  errno name such as 'ENOENT' when the process could not be started
    stack: the traceback text, with the frames that called spawn() after a
           '    ...' line
    """
    def __init__(self, message, pid=None, stdout='', stderr='', status=None, signal=None, code=None):
        SpawnResult.__init__(self, pid, stdout, stderr, status, signal)
        Exception.__init__(self, message)
        self.message = message
        self.code = code
        self.stack = None

    def __str__(self):
        return self.message

    def stitch(self, call_site):
        """make the error read as if raised where spawn() was called"""
        origin = ''.join(traceback.format_list(call_site))
        completion = ''.join(traceback.format_stack()[:-1])
        self.stack = f'{type(self).__name__}: {self.message}\n{completion}{MARKER}{origin}'
        self.add_note(f'{MARKER}{origin}'.rstrip('\n'))
        return self


class LaunchError(SpawnError):
    """the process never started"""


class AbnormalExit(SpawnError):
    """the process exited with a non-zero status"""


class SignalTermination(SpawnError):
    """the process was killed by a signal"""


def describe(command, args):
    return ' '.join((command, *args))


def classify(child, stdout, stderr):
    """the result, or the error to raise, for a child that has terminated"""
    status, signal = child.exit_code, child.signal_code
    fields = dict(pid=child.pid, stdout=stdout, stderr=stderr, status=status, signal=signal)
    if signal is not None:
        message = f'{describe(child.command, child.args)} exited with signal: {signal}'
        return SignalTermination(message, **fields)
    if status != 0:
        message = f'{describe(child.command, child.args)} exited with non-zero code: {status}'
        return AbnormalExit(message, **fields)
    return SpawnResult(**fields)


class Accumulator:
    """collects decoded chunks of one output stream in arrival order"""
    def __init__(self, encoding):
        self.decoder = codecs.getincrementaldecoder(encoding)(errors='replace')
        self.parts = []

    def __call__(self, chunk):
        self.parts.append(self.decoder.decode(chunk))

    @property
    def text(self):
        return ''.join(self.parts) + self.decoder.decode(b'', final=True)


class SpawnTask:
    """a spawned process: the handle now, the result later

    child is usable right away. Awaiting the task gives a SpawnResult or
    raises a SpawnError once the process is done. Awaiting again gives the
    same outcome, and cancelling one of the awaiting coroutines leaves the
    task itself alone.
    """
    def __init__(self, child, future):
        self.child = child
        self.future = future

    def __await__(self):
        return asyncio.shield(self.future).__await__()

    def done(self):
        return self.future.done()

    def result(self):
        return self.future.result()

    def exception(self):
        return self.future.exception()

    def add_done_callback(self, callback):
        self.future.add_done_callback(lambda future: callback(self))

    def __repr__(self):
        state = 'done' if self.done() else 'pending'
        return f'<{type(self).__name__} {state} {self.child!r}>'


def spawn(command, args=(), *, ignore_stdio=False, encoding='utf-8', **options):
    r"""start command and return a SpawnTask for it

    command:      the program to run
    args:         its arguments
    ignore_stdio: do not collect stdout and stderr, and settle as soon as
                  the process exits even if its output is still open.
                  The output is still piped, just not read: a process
                  that writes more than a pipe buffer blocks and never
                  exits. Pass an os.devnull file as stdout and stderr to
                  really throw it away, or None to inherit ours.
    encoding:     used to decode the collected output
    options:      passed on to ChildProcess: cwd, env, stdin, stdout,
                  stderr, shell, backend

    Must be called with an asyncio loop running.

    >>> async def main():
    ...     task = spawn('echo', ['hi'])
    ...     print(task.child.pid is not None)
    ...     return await task
    >>> r = asyncio.run(main())
    True
    >>> r.stdout, r.status, r.signal
    ('hi\n', 0, None)
    """
    call_site = traceback.extract_stack()
    if isinstance(args, (str, bytes)):
        raise TypeError(f'args must be a sequence of arguments, not {type(args).__name__}')
    args = tuple(args)
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    child = ChildProcess(command, args, **options)
    stdout, stderr = Accumulator(encoding), Accumulator(encoding)

    def settle(outcome):
        if future.done():
            return
        if isinstance(outcome, SpawnError):
            logger.debug('%s failed: %s', describe(command, args), outcome)
            future.set_exception(outcome.stitch(call_site))
        else:
            logger.debug('%s finished: %r', describe(command, args), outcome)
            future.set_result(outcome)

    completion_event = 'exit' if ignore_stdio else 'close'

    def on_completion(status, signal):
        child.off('error', on_error)
        settle(classify(child, stdout.text, stderr.text))

    def on_error(error):
        child.off(completion_event, on_completion)
        error_type = LaunchError if child.pid is None else SpawnError
        outcome = error_type(
            str(error),
            pid=child.pid, stdout=stdout.text, stderr=stderr.text,
            code=errorcode.get(getattr(error, 'errno', None)),
        )
        outcome.__cause__ = error
        settle(outcome)

    if not ignore_stdio:
        for stream, accumulator in (child.stdout, stdout), (child.stderr, stderr):
            if stream is not None:
                stream.on('data', accumulator)

    child.once(completion_event, on_completion)
    child.once('error', on_error)
    return SpawnTask(child, future)
