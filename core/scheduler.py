import asyncio
import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class SettlementScheduler:
    """
    Delayed callbacks on the running event loop, at most one per key.

    Scheduling a key that already has a pending callback replaces it.
    Callbacks run on the loop thread, so they never race request handlers.
    """

    def __init__(self):
        self._pending: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, delay: float, callback: Callable[[], None]):
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._pending[key] = loop.call_later(delay, self._fire, key, callback)

    def cancel(self, key: str) -> bool:
        handle = self._pending.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def cancel_all(self):
        for key in list(self._pending):
            self.cancel(key)

    def _fire(self, key: str, callback: Callable[[], None]):
        self._pending.pop(key, None)
        try:
            callback()
        except Exception:
            logger.exception(f"Settlement callback for {key} failed")
