"""
Dispatch Clock
Fires a callback at randomized intervals while armed
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 30_000
DEFAULT_MAX_INTERVAL_MS = 60_000


class DispatchClock:
    """
    Self-rescheduling timer backed by a single asyncio task.

    Each cycle sleeps for a freshly drawn delay in ``[min_ms, max_ms)`` and
    then runs the callback. At most one task is outstanding. ``disarm``
    cancels it, and a fire from a cancelled cycle never reaches the
    callback because the task checks that it is still the current one
    before firing.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.next_delay_ms: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self._task is not None

    def arm(
        self,
        min_ms: float = DEFAULT_MIN_INTERVAL_MS,
        max_ms: float = DEFAULT_MAX_INTERVAL_MS,
        callback: Callable[[], None] = None,
    ) -> None:
        """Start firing ``callback``; any previous cycle is cancelled first."""
        if callback is None:
            raise ValueError("callback is required")
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"Invalid interval range [{min_ms}, {max_ms})")

        self.disarm()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(min_ms, max_ms, callback))
        logger.debug(f"Dispatch clock armed: [{min_ms}, {max_ms}) ms")

    def disarm(self) -> None:
        """Cancel any pending fire. Safe to call when not armed."""
        task, self._task = self._task, None
        self.next_delay_ms = None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Dispatch clock disarmed")

    def _draw_delay_ms(self, min_ms: float, max_ms: float) -> float:
        if max_ms == min_ms:
            return min_ms
        return min_ms + self._rng.random() * (max_ms - min_ms)

    async def _run(self, min_ms: float, max_ms: float, callback: Callable[[], None]):
        me = asyncio.current_task()
        while self._task is me:
            self.next_delay_ms = self._draw_delay_ms(min_ms, max_ms)
            try:
                await self._sleep(self.next_delay_ms / 1000)
            except asyncio.CancelledError:
                break

            if self._task is not me:
                break

            try:
                callback()
            except Exception as e:
                logger.error(
                    f"Dispatch clock callback error: {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )
