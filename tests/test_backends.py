"""Tests for the synchronous process-creation backends."""

import os

import pytest

from aspawn.child import change_default_backend, get_backend
from aspawn.posix_wait import Termination, decode, from_returncode, signal_name
from aspawn.spawn_util import get_streams, redirections


@pytest.fixture
def spawner(backend):
    return get_backend(backend)


def test_exit_status(spawner, tmp_path):
    with open(tmp_path / 'out', 'wb') as file:
        pid = spawner.spawn(['sh', '-c', 'echo $0; exit 4', 'named'], streams={1: file})
        assert spawner.wait(pid) == Termination(4, None)
    assert (tmp_path / 'out').read_text() == 'named\n'


def test_signal(spawner):
    pid = spawner.spawn(['sh', '-c', 'kill -TERM $$'])
    assert spawner.wait(pid) == Termination(None, 'SIGTERM')


def test_missing_program(spawner):
    with pytest.raises(FileNotFoundError) as info:
        spawner.spawn(['nonexistent-program'])
    assert info.value.errno == 2


def test_cwd(spawner, tmp_path, restore_cwd):
    with open(tmp_path / 'out', 'wb') as file:
        pid = spawner.spawn(['pwd'], streams={1: file}, cwd=tmp_path)
        assert spawner.wait(pid) == Termination(0, None)
    assert (tmp_path / 'out').read_text() == os.path.realpath(tmp_path) + '\n'
    assert os.getcwd() == restore_cwd


def test_env(spawner, tmp_path):
    env = {'ASPAWN_TEST': 'value', 'PATH': os.environ['PATH']}
    with open(tmp_path / 'out', 'wb') as file:
        pid = spawner.spawn(['sh', '-c', 'echo $ASPAWN_TEST'], env=env, streams={1: file})
        spawner.wait(pid)
    assert (tmp_path / 'out').read_text() == 'value\n'


def test_same_descriptor_for_stdout_and_stderr(spawner, tmp_path):
    with open(tmp_path / 'out', 'wb') as file:
        pid = spawner.spawn(['sh', '-c', 'echo out; echo err >&2'], streams={1: file, 2: file})
        spawner.wait(pid)
    assert (tmp_path / 'out').read_text() == 'out\nerr\n'


def test_change_default_backend():
    original = get_backend('default')
    try:
        assert change_default_backend('fork_exec') is get_backend('fork_exec')
        assert get_backend('default') is get_backend('fork_exec')

        class Custom:
            spawn = staticmethod(lambda argv, env=None, streams=(), cwd=None: 0)
            wait = staticmethod(lambda pid: Termination(0, None))

        assert change_default_backend(Custom) is Custom
        with pytest.raises(AttributeError):
            change_default_backend(object())
    finally:
        change_default_backend(original)


def test_termination_decoding():
    assert decode(0) == Termination(0, None)
    assert decode(7 << 8) == Termination(7, None)
    assert decode(15) == Termination(None, 'SIGTERM')
    assert from_returncode(3) == Termination(3, None)
    assert from_returncode(-9) == Termination(None, 'SIGKILL')
    assert signal_name(9) == 'SIGKILL'


def test_redirections_skip_descriptors_already_in_place():
    assert redirections({0: 0, 1: 8}) == ([(8, 1)], [8])
    assert redirections((None, 8, 8)) == ([(8, 1), (8, 2)], [8])
    assert list(get_streams((None, 8), include_None=True)) == [(0, None), (1, 8), (2, None)]
