"""Debounced flush scheduling.

A :class:`Coalescer` is either ``IDLE`` or ``PENDING`` with a deadline on the
event loop's monotonic clock. The first request of a burst arms a timer;
later requests inside the window are absorbed by it. When the deadline
passes the action runs once.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class FlushState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class Coalescer:
    def __init__(
        self,
        name: str,
        action: Callable[[], Awaitable[None]],
        delay: float,
    ):
        self.name = name
        self.delay = delay
        self._action = action
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline: Optional[float] = None
        self._running: set[asyncio.Task] = set()
        self.runs = 0

    @property
    def state(self) -> FlushState:
        return FlushState.PENDING if self._handle is not None else FlushState.IDLE

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def request(self) -> None:
        """Ask for a flush; a no-op while one is already pending."""
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.delay
        self._handle = loop.call_at(self._deadline, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._deadline = None

    def _fire(self) -> None:
        self._handle = None
        self._deadline = None
        task = asyncio.ensure_future(self._run())
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self) -> None:
        try:
            await self._action()
            self.runs += 1
        except Exception:
            # The next request schedules a fresh attempt
            logger.exception("%s flush failed", self.name)

    async def flush(self) -> None:
        """Run a pending action now and wait for in-flight ones."""
        if self._handle is not None:
            self.cancel()
            await self._run()
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)
