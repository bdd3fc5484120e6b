import asyncio
from typing import List


async def settle(rounds: int = 3) -> None:
    """Let scheduled tasks run up to their next await."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualSleep:
    """
    Stand-in for asyncio.sleep that only returns when the test says so.

    Every call records the requested delay and parks on a future; ``fire``
    wakes the oldest parked sleeper.
    """

    def __init__(self):
        self.delays: List[float] = []
        self._waiters: List[asyncio.Future] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def pending(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def release(self) -> None:
        """Wake the oldest sleeper without yielding to the loop."""
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(None)
                return
        raise AssertionError("no pending sleep to release")

    async def fire(self) -> None:
        await settle()
        self.release()
        await settle()
