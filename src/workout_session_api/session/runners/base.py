"""Base classes for block runners."""
from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import BlockOutcome, Interval
from workout_session_api.session.timer import Countdown, Ticker, DEFAULT_CUE_WINDOW

logger = logging.getLogger(__name__)


@dataclass
class RunnerContext:
    """Everything a runner needs from the session besides its block."""
    ticker: Ticker
    block_index: int = 0
    total_blocks: int = 1
    play_cue: Callable[[], None] = lambda: None
    report_interval: Callable[[Interval, int], None] = lambda interval, xp: None
    catalog: List[Dict[str, Any]] = field(default_factory=list)
    default_rest_seconds: int = 90
    superset_rest_seconds: int = 90
    cue_window: int = DEFAULT_CUE_WINDOW

    def catalog_item(self, exercise_name: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive catalog match used for the history drill-down."""
        if not self.catalog:
            return None
        wanted = exercise_name.lower()
        for item in self.catalog:
            if str(item.get("name", "")).lower() == wanted:
                return item
        return None


class BlockRunner(ABC):
    """Drives one block to a terminal outcome.

    Subclasses declare the intents they accept in ``ACTIONS`` (intent name to
    method name). ``complete`` and ``skip`` are always available; completion
    may still be refused while ``can_complete`` is false.
    """

    ACTIONS: Dict[str, str] = {}

    def __init__(self, block, context: RunnerContext, on_finish: Callable[[BlockOutcome], None]):
        self.block = block
        self.context = context
        self._on_finish = on_finish
        self._finished = False

    @staticmethod
    @abstractmethod
    def block_type() -> str:
        """Return the block type tag this runner drives (e.g. 'exercise')."""
        ...

    @abstractmethod
    def view(self) -> Dict[str, Any]:
        """JSON-ready view model for the host UI."""
        ...

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def can_complete(self) -> bool:
        return True

    def timers(self) -> List[Countdown]:
        return []

    def handle(self, action: str, **params: Any) -> None:
        if self._finished:
            raise InvalidIntentError("Block is already finished")
        if action == "complete":
            self.complete()
            return
        if action == "skip":
            self.skip()
            return
        method = self.ACTIONS.get(action)
        if method is None:
            raise InvalidIntentError(
                f"Action '{action}' is not available for {self.block_type()} blocks"
            )
        fn = getattr(self, method)
        try:
            inspect.signature(fn).bind(**params)
        except TypeError as e:
            raise InvalidIntentError(f"Bad parameters for '{action}': {e}") from e
        fn(**params)

    def start(self) -> None:
        """Called once the controller has installed this runner."""

    def complete(self) -> None:
        if not self.can_complete:
            raise InvalidIntentError(f"{self.block.name} is not finished yet")
        self._finish(BlockOutcome(skipped=False, payload=self.build_payload()))

    def skip(self) -> None:
        self._finish(BlockOutcome(skipped=True))

    def build_payload(self) -> list:
        return []

    def close(self) -> None:
        """Cancel every timer this runner owns."""
        for timer in self.timers():
            timer.cancel()

    def _finish(self, outcome: BlockOutcome) -> None:
        if self._finished:
            return
        self._finished = True
        self.close()
        logger.debug(
            "Runner finished block %s (%s) skipped=%s",
            self.context.block_index, self.block.name, outcome.skipped,
        )
        self._on_finish(outcome)

    def _base_view(self) -> Dict[str, Any]:
        return {
            "type": self.block_type(),
            "name": self.block.name,
            "section": self.block.section_name,
            "xp_value": self.block.xp_value,
            "block_index": self.context.block_index,
            "total_blocks": self.context.total_blocks,
            "can_complete": self.can_complete,
        }

    def _make_countdown(self, on_zero: Optional[Callable[[], None]] = None) -> Countdown:
        return Countdown(
            self.context.ticker,
            on_cue=self.context.play_cue,
            on_zero=on_zero,
            cue_window=self.context.cue_window,
        )


class RestPeriodMixin:
    """Rest countdown shared by set-based runners."""

    REST_ACTIONS = {
        "rest_pause": "pause_rest",
        "rest_resume": "resume_rest",
        "rest_skip": "skip_rest",
        "rest_restart": "restart_rest",
    }

    rest: Countdown

    def pause_rest(self) -> None:
        self.rest.pause()

    def resume_rest(self) -> None:
        self.rest.resume()

    def skip_rest(self) -> None:
        self.rest.skip()

    def restart_rest(self) -> None:
        if self.rest.duration == 0:
            raise InvalidIntentError("No rest period has been started")
        self.rest.restart()

    def _rest_view(self) -> Dict[str, Any]:
        snapshot = self.rest.snapshot()
        snapshot["resting"] = self.rest.remaining > 0
        return snapshot
