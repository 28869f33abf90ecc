"""
Debouncer for follow-up searches.

Coalesces rapid filter edits into a single delayed callback.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set


logger = logging.getLogger(__name__)


class Debouncer:
    """
    Runs an async callback once after a quiet period.

    Scheduling again while a callback is still waiting cancels the waiting
    one, so a burst of calls results in exactly one invocation. A callback
    that has already started is never cancelled.

    Attributes:
        delay_seconds: Quiet period before the callback fires
    """

    def __init__(self, delay_ms: int = 100):
        """
        Initialize debouncer.

        Args:
            delay_ms: Quiet period in milliseconds (default: 100)
        """
        self.delay_seconds = max(0, delay_ms) / 1000
        self._pending: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a scheduled callback is waiting to fire."""
        return self._pending is not None and not self._pending.done()

    def schedule(self, callback: Callable[[], Awaitable[None]]) -> None:
        """
        Schedule ``callback`` after the quiet period.

        Must be called from a running event loop.
        """
        if self.cancel():
            logger.debug("Coalesced pending callback into the new one")

        task = asyncio.get_running_loop().create_task(self._fire(callback))
        self._pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> bool:
        """
        Cancel the waiting callback, if any.

        Returns:
            True if a waiting callback was cancelled
        """
        if self.pending:
            self._pending.cancel()
            self._pending = None
            return True
        return False

    async def wait_idle(self) -> None:
        """Wait until every scheduled callback has fired or been cancelled."""
        while True:
            live = [task for task in self._tasks if not task.done()]
            if not live:
                return
            await asyncio.gather(*live, return_exceptions=True)

    async def _fire(self, callback: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay_seconds)
        # Past this point the callback runs to completion
        if self._pending is asyncio.current_task():
            self._pending = None
        await callback()
