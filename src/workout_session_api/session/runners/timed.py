"""Runner for timed interval blocks."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import BlockOutcome, Interval, TimedBlock
from workout_session_api.session.xp import interval_xp
from .base import BlockRunner
from . import register_runner

logger = logging.getLogger(__name__)


class TimedRunner(BlockRunner):
    """Walks the intervals in order.

    Countdown intervals advance when they reach zero or on ``next``; cards wait
    for ``next``. Each finished countdown is paid and reported before the
    pointer moves, so XP earned before a skip is kept. The block completes by
    itself after the last interval; there is no manual completion.
    """

    ACTIONS = {
        "next": "next_interval",
        "continue": "next_interval",
        "timer_pause": "pause",
        "timer_resume": "resume",
        "timer_restart": "restart",
    }

    block: TimedBlock

    def __init__(self, block: TimedBlock, context, on_finish):
        super().__init__(block, context, on_finish)
        self.index = 0
        self.earned_xp = 0
        self.clock = self._make_countdown(on_zero=self._interval_finished)

    @staticmethod
    def block_type() -> str:
        return "timed"

    @property
    def can_complete(self) -> bool:
        return False

    @property
    def current(self) -> Optional[Interval]:
        if 0 <= self.index < len(self.block.intervals):
            return self.block.intervals[self.index]
        return None

    def timers(self):
        return [self.clock]

    def start(self) -> None:
        if not self.block.intervals:
            logger.warning("Timed block %r has no intervals; completing with no award", self.block.name)
            self._complete_block()
            return
        self._mount(0)

    def next_interval(self) -> None:
        self._interval_finished()

    def pause(self) -> None:
        self._require_countdown("pause")
        self.clock.pause()

    def resume(self) -> None:
        self._require_countdown("resume")
        self.clock.resume()

    def restart(self) -> None:
        self._require_countdown("restart")
        self.clock.restart()

    def view(self) -> Dict[str, Any]:
        data = self._base_view()
        current = self.current
        intervals = self.block.intervals
        upcoming = intervals[self.index + 1] if self.index + 1 < len(intervals) else None
        data.update({
            "interval_index": self.index,
            "interval_count": len(intervals),
            "interval": current.model_dump() if current is not None else None,
            "timer": self.clock.snapshot() if current is not None and current.is_countdown else None,
            "up_next": (upcoming.raw_text or upcoming.text or upcoming.label()) if upcoming else "Block Complete",
            "block_position": f"Block {self.context.block_index + 1} / {self.context.total_blocks}",
            "earned_xp": self.earned_xp,
        })
        return data

    def _mount(self, index: int) -> None:
        self.index = index
        interval = self.block.intervals[index]
        if interval.is_countdown:
            self.clock.start(interval.seconds)
        else:
            self.clock.cancel()

    def _interval_finished(self) -> None:
        if self._finished:
            return
        interval = self.current
        if interval is None:
            return
        if interval.is_countdown:
            xp = interval_xp(interval)
            self.earned_xp += xp
            self.context.report_interval(interval, xp)
        if self.index < len(self.block.intervals) - 1:
            self._mount(self.index + 1)
        else:
            self._complete_block()

    def _complete_block(self) -> None:
        self._finish(BlockOutcome(skipped=False))

    def _require_countdown(self, action: str) -> None:
        current = self.current
        if current is None or not current.is_countdown:
            raise InvalidIntentError(f"Cannot {action} an instruction card")


register_runner(TimedRunner)
