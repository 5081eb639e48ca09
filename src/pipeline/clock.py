"""
Display clocks.

The loop asks the clock for one tick at a time after each render, the way
a browser's animation-frame request works. Ticks nobody asked for are
dropped, so frames never queue up behind a slow cycle.
"""

from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from typing import Optional


class DisplayClock(ABC):
    @abstractmethod
    async def next_tick(self) -> float:
        """Wait for the next display refresh; returns the tick timestamp."""


class RefreshClock(DisplayClock):
    """
    Resolves each request on the next refresh boundary of a display
    running at refresh_hz.

    Boundaries are computed on request, so nothing runs between requests.
    """

    def __init__(self, refresh_hz: float = 60.0):
        if refresh_hz <= 0:
            raise ValueError(f"refresh_hz must be positive, got {refresh_hz}")
        self.refresh_hz = refresh_hz
        self.period = 1.0 / refresh_hz

    async def next_tick(self) -> float:
        loop = asyncio.get_running_loop()
        now = loop.time()
        boundary = math.floor(now / self.period + 1) * self.period
        await asyncio.sleep(boundary - now)
        return loop.time()


class ManualClock(DisplayClock):
    """
    Clock driven by explicit tick() calls (external vsync hooks, tests).

    tick() only wakes a pending request; a tick with no requester is dropped
    and counted in dropped_ticks.
    """

    def __init__(self):
        self._waiter: Optional[asyncio.Future] = None
        self._tick_count = 0
        self.delivered_ticks = 0
        self.dropped_ticks = 0

    @property
    def waiting(self) -> bool:
        return self._waiter is not None and not self._waiter.done()

    async def next_tick(self) -> float:
        if self.waiting:
            raise RuntimeError("A tick is already pending")
        self._waiter = asyncio.get_running_loop().create_future()
        try:
            return await self._waiter
        finally:
            self._waiter = None

    def tick(self) -> bool:
        """Deliver a tick; returns False when nobody was waiting for it."""
        self._tick_count += 1
        if not self.waiting:
            self.dropped_ticks += 1
            return False
        self._waiter.set_result(float(self._tick_count))
        self.delivered_ticks += 1
        return True
