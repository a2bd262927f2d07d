import asyncio
from typing import Callable, Optional

class DeferredCall:
    """
    Cancelable handle for a callback scheduled on the running event loop.
    The callback runs at most once; cancel() after it ran is a no-op.
    """

    def __init__(self, delay: float, callback: Callable[[], None],
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._callback = callback
        self._handle = self._loop.call_later(max(delay, 0), self._fire)

    def _fire(self):
        self._handle = None
        self._callback()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True
