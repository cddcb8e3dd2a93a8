"""Tests for ChildProcess, the live handle, and its ReadStreams."""

import asyncio
from signal import Signals

import pytest

from aspawn import PIPE, ChildProcess, ReadStream, get_signal
from aspawn.child import get_argv, get_input, get_output
from aspawn.pipe import InputPipe, OutputPipe


def wait_for_event(emitter, event):
    future = asyncio.get_running_loop().create_future()
    emitter.once(event, lambda *args: future.done() or future.set_result(args))
    return asyncio.wait_for(future, 5)


@pytest.mark.asyncio
async def test_events_arrive_in_lifecycle_order(backend):
    child = ChildProcess('echo', ['hi'], backend=backend)
    events = []
    for name in 'spawn', 'exit', 'close', 'error':
        child.on(name, lambda *args, name=name: events.append(name))
    closed = wait_for_event(child, 'close')
    child.stdout.resume()
    child.stderr.resume()

    assert await closed == (0, None)
    assert events == ['spawn', 'exit', 'close']
    assert child.exit_code == 0
    assert child.signal_code is None


@pytest.mark.asyncio
async def test_events_are_not_emitted_from_the_constructor():
    child = ChildProcess('nonexistent-program')
    errors = []
    child.on('error', errors.append)
    assert errors == []
    await asyncio.sleep(0)
    assert len(errors) == 1
    assert child.pid is None
    assert child.stdin is child.stdout is child.stderr is None


@pytest.mark.asyncio
async def test_close_waits_for_flowing_streams_only():
    child = ChildProcess('sh', ['-c', '(sleep 0.2; echo late) & echo early'])
    chunks = []
    child.stdout.on('data', chunks.append)
    await wait_for_event(child, 'exit')
    assert not child.closed

    await wait_for_event(child, 'close')
    assert child.stdout.ended
    assert b''.join(chunks) == b'early\nlate\n'


@pytest.mark.asyncio
async def test_close_follows_exit_when_nothing_flows():
    child = ChildProcess('echo', ['hi'])
    await wait_for_event(child, 'close')
    assert child.exited
    assert not child.stdout.flowing
    assert child.stdout.read() == b'hi\n'


@pytest.mark.asyncio
async def test_kill_reports_whether_a_signal_was_sent():
    child = ChildProcess('sleep', ['10'])
    exited = wait_for_event(child, 'exit')
    assert child.kill(Signals.SIGUSR1) is True
    assert await exited == (None, 'SIGUSR1')
    assert child.kill() is False


@pytest.mark.asyncio
async def test_kill_is_refused_once_the_pid_is_reaped():
    child = ChildProcess('true')
    child.waiter.join()
    # reaped, but 'exit' is still queued on the loop
    assert not child.exited
    assert child.kill() is False
    await wait_for_event(child, 'exit')


@pytest.mark.asyncio
async def test_close_releases_the_stdin_writer():
    child = ChildProcess('true')
    assert not child.stdin.closed
    await wait_for_event(child, 'close')
    assert child.stdin.closed


@pytest.mark.asyncio
async def test_handing_stdout_to_another_process_drops_our_copy():
    upstream = ChildProcess('echo', ['hi'])
    downstream = ChildProcess('cat', stdin=upstream)
    assert upstream.stdout.fd.closed
    chunks = []
    downstream.stdout.on('data', chunks.append)
    await wait_for_event(downstream, 'close')
    assert b''.join(chunks) == b'hi\n'


@pytest.mark.asyncio
async def test_kill_after_launch_failure_is_a_no_op():
    child = ChildProcess('nonexistent-program')
    assert child.kill() is False
    await wait_for_event(child, 'error')


@pytest.mark.asyncio
async def test_read_refuses_a_flowing_stream():
    child = ChildProcess('echo', ['hi'])
    child.stdout.resume()
    with pytest.raises(ValueError):
        child.stdout.read()
    await wait_for_event(child, 'close')


@pytest.mark.asyncio
async def test_unknown_option_is_a_type_error():
    with pytest.raises(TypeError):
        ChildProcess('echo', ['hi'], shel=True)


@pytest.mark.asyncio
async def test_unknown_backend_is_a_value_error():
    with pytest.raises(ValueError):
        ChildProcess('echo', ['hi'], backend='vfork')


@pytest.mark.asyncio
async def test_repr_mentions_argv_and_pid():
    child = ChildProcess('true')
    assert repr(child) == f"ChildProcess(['true'], pid={child.pid})"
    assert isinstance(child.stdout, ReadStream)
    await wait_for_event(child, 'exit')


def test_get_signal_accepts_names_and_numbers():
    assert get_signal('term') is Signals.SIGTERM
    assert get_signal('SIGKILL') is Signals.SIGKILL
    assert get_signal(9) is Signals.SIGKILL
    assert get_signal(Signals.SIGHUP) is Signals.SIGHUP
    with pytest.raises(ValueError):
        get_signal('nope')


def test_get_argv_with_and_without_a_shell():
    assert get_argv('ls', ('-l',), False) == ['ls', '-l']
    assert get_argv('ls -l | wc', (), True) == ['sh', '-c', 'ls -l | wc']
    assert get_argv('ls', ('a dir',), 'bash -c') == ['bash', '-c', "ls 'a dir'"]


def test_stream_arguments_are_normalized():
    stdin = get_input(PIPE)
    stdout = get_output(PIPE)
    try:
        assert isinstance(stdin, InputPipe)
        assert isinstance(stdout, OutputPipe)
    finally:
        stdin.close()
        stdout.close()
    assert get_input(None) is None
    assert get_output(None) is None
    assert get_input(0).fileno() == 0
    assert get_output(2).fileno() == 2
    with pytest.raises(ValueError):
        get_input(object())
    with pytest.raises(ValueError):
        get_output('stdout')
