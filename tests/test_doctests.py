"""Runs the examples in the module docstrings, as `python -m aspawn` does."""

import doctest

import pytest

import aspawn
from aspawn import child, events, fd, fork_exec, pipe, posix_spawn, posix_wait
from aspawn import spawn_util, subprocess, task, thread, util

MODULES = (
    fd, thread, pipe, events, spawn_util, posix_wait,
    posix_spawn, fork_exec, subprocess, child, task, util, aspawn,
)


@pytest.mark.parametrize('module', MODULES, ids=lambda module: module.__name__)
def test_docstring_examples(module, restore_cwd):
    result = doctest.testmod(module)
    assert result.failed == 0
