__all__ = 'Thread',

import threading


class Thread(threading.Thread):
    """daemon thread with a return value

    The workers behind a child process (output readers, the exit waiter,
    stdin feeders) must never keep the interpreter alive, so these are
    daemon threads.

    >>> Thread(lambda: 1 + 2).start().join()
    3
    >>> Thread(lambda: 1 + 2, name='adder').name
    'adder'
    >>> with Thread(lambda: print('hello')) as thread: pass
    ...
    hello
    """
    def __init__(self, target, name=None):
        """initialize the thread

        target: callable which takes no arguments
        name:   thread name; derived from target if None
        """
        self.result = None

        def closure():
            self.result = target()

        super().__init__(
            target=closure,
            name=Thread.get_name(target) if name is None else name,
            daemon=True,
        )

    def start(self):
        """start the thread"""
        super().start()
        return self

    def join(self, timeout=None):
        """join the thread"""
        super().join(timeout)
        return self.result

    @staticmethod
    def get_name(func):
        """give a decent name to the thread"""
        if hasattr(func, 'func') and func.func is not func:
            return Thread.get_name(func.func)
        return getattr(func, '__qualname__', repr(func))

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.join()
