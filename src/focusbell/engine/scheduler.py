"""One-shot timer primitive used to advance session phases."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus one-shot callback scheduling, both in milliseconds."""

    def now_ms(self) -> float: ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class PhaseTimer:
    """A scheduled phase expiry that knows whether it already fired.

    ``cancel()`` returns False once the callback has started, so callers can
    tell a successful cancellation from a lost race.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: float, callback: Callable[["PhaseTimer"], None]):
        self.deadline = scheduler.now_ms() + delay_ms
        self.fired = False
        self.cancelled = False
        self._callback = callback
        self._handle = scheduler.call_later(delay_ms, self._fire)

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def cancel(self) -> bool:
        if self.fired:
            return False
        if not self.cancelled:
            self.cancelled = True
            self._handle.cancel()
        return True

    def _fire(self) -> None:
        if self.cancelled:
            return
        self.fired = True
        self._callback(self)


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000, callback)
