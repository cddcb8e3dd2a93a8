r"""aspawn - spawn a process, get a handle now and a result later

spawn() starts a process right away and returns a SpawnTask. The task's
.child is the live process, usable immediately; awaiting the task gives
the collected output and how the process ended:

>>> import asyncio
>>> async def main():
...     task = spawn('echo', ['hi'])
...     task.child.on('exit', lambda status, signal: print('exit', status, signal))
...     return await task
...
>>> result = asyncio.run(main())
exit 0 None
>>> result.stdout, result.stderr, result.status, result.signal
('hi\n', '', 0, None)
>>> result.output == (result.stdout, result.stderr)
True

Anything but a clean exit raises, and the error still carries the result:

>>> async def fails(*argv):
...     try:
...         await spawn(*argv)
...     except SpawnError as e:
...         return type(e).__name__, e.status, e.signal, e.code
...
>>> asyncio.run(fails('false'))
('AbnormalExit', 1, None, None)
>>> asyncio.run(fails('sh', ['-c', 'kill -KILL $$']))
('SignalTermination', None, 'SIGKILL', None)
>>> asyncio.run(fails('nonexistent-program'))
('LaunchError', None, None, 'ENOENT')

The child can be killed, or listened to, without ever awaiting the task:

>>> async def killed():
...     task = spawn('sleep', ['10'])
...     task.child.kill()
...     try:
...         await task
...     except SignalTermination as e:
...         return e.signal
...
>>> asyncio.run(killed())
'SIGTERM'

With ignore_stdio=True, output is not collected and the task settles as
soon as the process exits, even if something else still holds its
stdout open:

>>> async def quiet():
...     return await spawn('sh', ['-c', 'sleep 5 & echo started'], ignore_stdio=True)
...
>>> asyncio.run(quiet()).output
('', '')

Processes can be chained by giving one as the stdin of the next:

>>> async def chained():
...     upstream = spawn('echo', ['abc'], ignore_stdio=True)
...     downstream = spawn('tr', ['a-z', 'A-Z'], stdin=upstream)
...     await upstream
...     return (await downstream).stdout
...
>>> asyncio.run(chained())
'ABC\n'

For synchronous code there is run(), which also works as a pipe from the
funcpipes module (https://github.com/misho88/funcpipes):

>>> run('echo', ['abc']).stdout
'abc\n'
>>> ['abc'] | run.partial('echo') | get.stdout | to.upper
'ABC\n'
"""

from .fd import FD  # noqa: F401
from .pipe import Pipe, InputPipe, OutputPipe  # noqa: F401
from .child import *  # noqa: F401 F403
from .task import *  # noqa: F401 F403
from .util import *  # noqa: F401 F403

from funcpipes import Pipe as _Pipe, to, now, get, Arguments  # noqa: F401
