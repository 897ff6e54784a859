"""Session state machine.

States: EMPTY (nothing to run), HUB, RUNNING(current_index) and the terminal
ALL_COMPLETE. Only one runner exists at a time and it is torn down on every
exit path (completion, skip, back to hub, discard).

Bookkeeping keeps ``completed`` and ``skipped`` disjoint; "done" is their
union. After a block finishes the session moves to the next index only when
that block carries the same section label, otherwise it returns to the hub,
even if the label shows up again later in the list.
"""
from __future__ import annotations

import logging
import uuid
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

from workout_session_api.config import settings as default_settings
from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import BlockOutcome, Interval
from workout_session_api.services.recording import CompletionRecord, RecordingDispatcher
from workout_session_api.session.runners import BlockRunner, RunnerContext, create_runner
from workout_session_api.session.sections import build_sections, distinct_section_names, summarize_sections
from workout_session_api.session.timer import Ticker
from workout_session_api.session.xp import award_details, is_lump_reward, lump_xp, reward_category

logger = logging.getLogger(__name__)

MAX_NOTICES = 20


class SessionState(str, Enum):
    EMPTY = "EMPTY"
    HUB = "HUB"
    RUNNING = "RUNNING"
    ALL_COMPLETE = "ALL_COMPLETE"


class SessionController:
    """Owns one workout session from protocol load to exit."""

    def __init__(
        self,
        blocks: Sequence,
        user_id: str,
        ticker: Ticker,
        dispatcher: RecordingDispatcher,
        play_cue: Optional[Callable[[], None]] = None,
        catalog: Optional[List[Dict[str, Any]]] = None,
        settings=None,
        session_id: Optional[str] = None,
        label: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.user_id = user_id
        self.label = label
        self.blocks = tuple(blocks)
        self.completed: set = set()
        self.skipped: set = set()
        self.current_index = 0
        self.xp_reported = 0
        self.cues = 0
        self.notices: Deque[str] = deque(maxlen=MAX_NOTICES)
        self.runner: Optional[BlockRunner] = None

        self._ticker = ticker
        self._dispatcher = dispatcher
        self._play_cue = play_cue
        self._catalog = catalog or []
        self._settings = settings or default_settings

        self.state = SessionState.HUB
        if not self.blocks:
            self.state = SessionState.EMPTY
        elif len(distinct_section_names(self.blocks)) == 1:
            self._run(0)

    # ---- Read-only projections ----

    @property
    def done(self) -> set:
        return self.completed | self.skipped

    @property
    def progress(self) -> int:
        if not self.blocks:
            return 0
        return round(len(self.done) / len(self.blocks) * 100)

    @property
    def current_block(self):
        if self.state != SessionState.RUNNING:
            return None
        return self.blocks[self.current_index]

    def sections(self) -> List[dict]:
        return summarize_sections(self.blocks, self.completed, self.skipped)

    def view(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "label": self.label,
            "state": self.state.value,
            "current_index": self.current_index if self.state == SessionState.RUNNING else None,
            "total_blocks": len(self.blocks),
            "completed": sorted(self.completed),
            "skipped": sorted(self.skipped),
            "progress": self.progress,
            "xp_reported": self.xp_reported,
            "sections": self.sections() if self.state == SessionState.HUB else [],
            "runner": self.runner.view() if self.runner is not None else None,
            "notices": list(self.notices),
            "cues": self.cues,
        }

    # ---- User intents ----

    def select_section(self, name: str) -> None:
        if self.state != SessionState.HUB:
            raise InvalidIntentError(f"Cannot select a section while {self.state.value}")
        for section in build_sections(self.blocks, self.done):
            if section.name == name:
                target = section.entry_index(self.done)
                logger.info("Session %s: entering section %r at block %s", self.session_id, name, target)
                self._run(target)
                return
        raise InvalidIntentError(f"Unknown section '{name}'")

    def back_to_hub(self) -> None:
        if self.state == SessionState.HUB:
            return
        if self.state != SessionState.RUNNING:
            raise InvalidIntentError(f"Cannot return to hub while {self.state.value}")
        self._teardown_runner()
        self.state = SessionState.HUB

    def intent(self, action: str, **params: Any) -> None:
        if self.state != SessionState.RUNNING or self.runner is None:
            raise InvalidIntentError(f"No block is running (state {self.state.value})")
        self.runner.handle(action, **params)

    def close(self) -> None:
        """Release the active runner's timers; the session is being discarded."""
        self._teardown_runner()

    # ---- Transitions ----

    def _run(self, index: int) -> None:
        self._teardown_runner()
        self.state = SessionState.RUNNING
        self.current_index = index
        block = self.blocks[index]
        context = RunnerContext(
            ticker=self._ticker,
            block_index=index,
            total_blocks=len(self.blocks),
            play_cue=self._cue,
            report_interval=lambda interval, xp: self._report_interval(index, interval, xp),
            catalog=self._catalog,
            default_rest_seconds=self._settings.DEFAULT_REST_SECONDS,
            superset_rest_seconds=self._settings.SUPERSET_REST_SECONDS,
            cue_window=self._settings.CUE_WINDOW_SECONDS,
        )

        def on_finish(outcome: BlockOutcome) -> None:
            self._block_finished(index, runner, outcome)

        runner = create_runner(block, context, on_finish)
        self.runner = runner
        runner.start()

    def _block_finished(self, index: int, runner: BlockRunner, outcome: BlockOutcome) -> None:
        if runner is not self.runner:
            logger.warning("Session %s: ignoring outcome from a stale runner (block %s)", self.session_id, index)
            return
        self.runner = None
        block = self.blocks[index]

        if outcome.skipped:
            if index in self.completed:
                logger.info("Session %s: block %s already completed; skip keeps it completed", self.session_id, index)
            else:
                self.skipped.add(index)
                logger.info("Session %s: block %s (%s) skipped, no XP", self.session_id, index, block.name)
        else:
            first_completion = index not in self.completed
            self.skipped.discard(index)
            self.completed.add(index)
            if first_completion and is_lump_reward(block):
                self._report_lump(block, outcome)

        if len(self.done) == len(self.blocks):
            self.state = SessionState.ALL_COMPLETE
            logger.info("Session %s: all %s blocks done", self.session_id, len(self.blocks))
            return

        nxt = index + 1
        if nxt < len(self.blocks) and self.blocks[nxt].section_name == block.section_name:
            self._run(nxt)
        else:
            self.state = SessionState.HUB

    def _teardown_runner(self) -> None:
        if self.runner is not None:
            self.runner.close()
            self.runner = None

    # ---- Collaborators ----

    def _report_lump(self, block, outcome: BlockOutcome) -> None:
        xp = lump_xp(block)
        if xp <= 0:
            return
        self.xp_reported += xp
        logger.info("Session %s: awarding %s XP for %r", self.session_id, xp, block.name)
        self._submit(CompletionRecord(
            user_id=self.user_id,
            label=block.name,
            details=award_details(block),
            xp=xp,
            category=reward_category(block),
            payload=[log.model_dump() for log in outcome.payload],
        ))

    def _report_interval(self, index: int, interval: Interval, xp: int) -> None:
        self.xp_reported += xp
        logger.info("Session %s: interval %r of block %s earned %s XP", self.session_id, interval.zone_or_text, index, xp)
        self._submit(CompletionRecord(
            user_id=self.user_id,
            label=f"{self.blocks[index].name} - {interval.zone or 'Interval'}",
            details=interval.text or interval.raw_text or "Interval",
            xp=xp,
            category="Cardio",
        ))

    def _submit(self, record: CompletionRecord) -> None:
        try:
            self._dispatcher.submit(record, on_failure=self._record_failed)
        except Exception as e:
            logger.error("Session %s: could not dispatch %r: %s", self.session_id, record.label, e)
            self._record_failed(record)

    def _record_failed(self, record: CompletionRecord) -> None:
        self.notices.append(f"Could not save {record.xp} XP for {record.label}")

    def _cue(self) -> None:
        self.cues += 1
        if self._play_cue is None:
            return
        try:
            self._play_cue()
        except Exception as e:
            logger.warning("Audio cue failed: %s", e)
