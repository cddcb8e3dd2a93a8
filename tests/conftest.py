import os

import pytest

BACKENDS = 'posix_spawn', 'fork_exec', 'subprocess'


@pytest.fixture(params=BACKENDS)
def backend(request):
    """every process-creation backend in turn"""
    return request.param


@pytest.fixture
def restore_cwd():
    home = os.getcwd()
    yield home
    os.chdir(home)
