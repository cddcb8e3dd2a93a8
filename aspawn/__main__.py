import os
from doctest import testmod
from . import fd, thread, pipe, events, spawn_util, posix_wait, posix_spawn, fork_exec, subprocess
from . import child, task, util
import aspawn

from .child import change_default_backend, get_backend

failed = 0
home = os.getcwd()

print('checking backends...')
for mod in posix_wait, spawn_util, posix_spawn, fork_exec, subprocess:
    print(f'\t{mod.__name__}...')
    failed += testmod(mod).failed
print()

for backend in 'posix_spawn', 'fork_exec', 'subprocess':
    change_default_backend(backend)
    print(f'with backend {get_backend.default.__name__}...')
    for mod in fd, thread, pipe, events, child, task, util, aspawn:
        print(f'\t{mod.__name__}...')
        failed += testmod(mod).failed
        os.chdir(home)
    print()

raise SystemExit(1 if failed else 0)
