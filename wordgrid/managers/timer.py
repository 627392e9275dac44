from __future__ import annotations
import asyncio
import math
import time
from typing import Awaitable, Callable, Optional
from dataclasses import dataclass

from ..config import Config

TICK_INTERVAL = 1.0  # seconds

@dataclass
class Countdown:
    seconds: int
    started_at: float

    def remaining(self, now: float) -> int:
        elapsed = max(0.0, now - self.started_at)
        return max(0, self.seconds - math.floor(elapsed))

class TurnCountdown:
    """Per-turn countdown whose remaining whole seconds are the time bonus.

    Re-armed whenever our turn starts, cancelled whenever the turn moves on.
    ``on_tick`` (optional) is awaited once a second while the clock runs.
    """

    def __init__(self, seconds: int = Config.TURN_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 on_tick: Optional[Callable[[int], Awaitable[None]]] = None):
        self.seconds = seconds
        self._clock = clock
        self._on_tick = on_tick
        self._countdown: Optional[Countdown] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._countdown is not None

    @property
    def remaining(self) -> int:
        if not self._countdown:
            return 0
        return self._countdown.remaining(self._clock())

    def arm(self):
        self.cancel()
        self._countdown = Countdown(seconds=self.seconds, started_at=self._clock())
        if self._on_tick:
            try:
                self._task = asyncio.get_running_loop().create_task(self._run())
            except RuntimeError:
                # no loop running; the countdown still works on demand
                self._task = None

    def cancel(self):
        self._countdown = None
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self):
        try:
            while self.running:
                await asyncio.sleep(TICK_INTERVAL)
                left = self.remaining
                await self._on_tick(left)
                if left <= 0:
                    break
        except asyncio.CancelledError:
            return
