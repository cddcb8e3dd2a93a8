__all__ = 'EventEmitter',

import logging

logger = logging.getLogger(__name__)


class EventEmitter:
    """multi-subscriber event registry

    Listeners run in registration order. Each one is independent: a
    one-shot listener being removed, or a listener raising, does not keep
    the others from running.

    >>> e = EventEmitter()
    >>> e.on('x', lambda v: print('first', v))
    >>> e.once('x', lambda v: print('once', v))
    >>> e.on('x', lambda v: print('last', v))
    >>> e.emit('x', 1)
    first 1
    once 1
    last 1
    True
    >>> e.emit('x', 2)
    first 2
    last 2
    True
    >>> e.listener_count('x'), e.emit('y')
    (2, False)
    """
    def __init__(self):
        self._listeners = {}

    def on(self, event, listener):
        """call listener every time event is emitted"""
        self._listeners.setdefault(event, []).append((listener, False))

    def once(self, event, listener):
        """call listener the next time event is emitted, then forget it"""
        self._listeners.setdefault(event, []).append((listener, True))

    def off(self, event, listener):
        """remove the first registration of listener; no-op if there is none"""
        entries = self._listeners.get(event, [])
        for i, (registered, _) in enumerate(entries):
            if registered is listener or registered == listener:
                del entries[i]
                return

    def listener_count(self, event):
        return len(self._listeners.get(event, ()))

    def listeners(self, event):
        return [listener for listener, _ in self._listeners.get(event, ())]

    def emit(self, event, *args):
        """call every listener of event with args

        returns whether there were any listeners
        """
        entries = self._listeners.get(event)
        if not entries:
            return False
        snapshot = list(entries)
        entries[:] = [entry for entry in entries if not entry[1]]
        for listener, _ in snapshot:
            try:
                listener(*args)
            except Exception:
                logger.warning('%r listener %r raised', event, listener, exc_info=True)
        return True
