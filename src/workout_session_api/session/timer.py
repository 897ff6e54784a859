"""Countdown primitive shared by rest periods and timed intervals.

Time never advances on its own here: a ``Ticker`` calls ``Countdown.tick`` once
per second. ``AsyncioTicker`` does that on the running event loop; tests drive
a manual ticker instead.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from workout_session_api.utils import format_time

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0
DEFAULT_CUE_WINDOW = 5


class TickHandle(ABC):
    """A repeating schedule that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        ...


class Ticker(ABC):
    """Schedules repeating callbacks."""

    @abstractmethod
    def every(self, seconds: float, callback: Callable[[], None]) -> TickHandle:
        ...


class _LoopHandle(TickHandle):
    def __init__(self, loop: asyncio.AbstractEventLoop, seconds: float, callback: Callable[[], None]):
        self._loop = loop
        self._seconds = seconds
        self._callback = callback
        self._cancelled = False
        self._timer: Optional[asyncio.TimerHandle] = loop.call_later(seconds, self._fire)

    def _fire(self) -> None:
        self._timer = None
        try:
            self._callback()
        except Exception:
            logger.exception("Tick callback failed")
        if not self._cancelled:
            self._timer = self._loop.call_later(self._seconds, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioTicker(Ticker):
    """Ticker backed by ``loop.call_later``. Must be used from inside the loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def every(self, seconds: float, callback: Callable[[], None]) -> TickHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _LoopHandle(loop, seconds, callback)


class Countdown:
    """Rest timer / interval clock.

    ``start`` counts down from a duration once per tick. While the remaining
    value is inside the cue window a cue fires before each decrement, so a
    countdown of five seconds or more produces exactly five cues. Reaching zero
    stops the countdown and calls ``on_zero`` once. ``skip`` stops without
    calling ``on_zero``; ``restart`` starts again from the last duration.
    """

    def __init__(
        self,
        ticker: Ticker,
        on_cue: Optional[Callable[[], None]] = None,
        on_zero: Optional[Callable[[], None]] = None,
        cue_window: int = DEFAULT_CUE_WINDOW,
    ):
        self._ticker = ticker
        self._on_cue = on_cue
        self._on_zero = on_zero
        self._cue_window = cue_window
        self._duration = 0
        self._remaining = 0
        self._handle: Optional[TickHandle] = None

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def display(self) -> str:
        return format_time(self._remaining)

    def start(self, duration: int) -> None:
        self._cancel_handle()
        self._duration = max(0, int(duration))
        self._remaining = self._duration
        if self._remaining == 0:
            self._reach_zero()
            return
        self._handle = self._ticker.every(TICK_SECONDS, self.tick)

    def tick(self) -> None:
        if not self.running:
            return
        if self._remaining <= self._cue_window and self._on_cue:
            self._on_cue()
        self._remaining -= 1
        if self._remaining <= 0:
            self._remaining = 0
            self._reach_zero()

    def pause(self) -> None:
        self._cancel_handle()

    def resume(self) -> None:
        if self.running or self._remaining <= 0:
            return
        self._handle = self._ticker.every(TICK_SECONDS, self.tick)

    def skip(self) -> None:
        self._cancel_handle()
        self._remaining = 0

    def restart(self) -> None:
        self.start(self._duration)

    def cancel(self) -> None:
        """Stop ticking and keep the remaining value (runner teardown)."""
        self._cancel_handle()

    def snapshot(self) -> dict:
        return {
            "duration": self._duration,
            "remaining": self._remaining,
            "running": self.running,
            "display": self.display,
        }

    def _reach_zero(self) -> None:
        self._cancel_handle()
        if self._on_zero:
            self._on_zero()

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
