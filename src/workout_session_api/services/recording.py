"""Fire-and-forget delivery of XP/history records.

The session updates its own bookkeeping first and hands the record to a
dispatcher; the sink's outcome never feeds back into navigation, only into
a non-blocking notice.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="history-sink")

Sink = Callable[..., bool]


@dataclass
class CompletionRecord:
    """One XP event: a finished lump-reward block or a finished interval."""
    user_id: str
    label: str
    details: str
    xp: int
    category: str
    payload: Optional[List[Dict[str, Any]]] = None


class RecordingDispatcher:
    """Submits records to a sink, synchronously or on an executor."""

    def __init__(self, sink: Sink, executor: Optional[Executor] = None):
        self._sink = sink
        self._executor = executor

    def submit(
        self,
        record: CompletionRecord,
        on_failure: Optional[Callable[[CompletionRecord], None]] = None,
    ) -> None:
        if self._executor is None:
            self._deliver(record, on_failure)
            return
        try:
            self._executor.submit(self._deliver, record, on_failure)
        except RuntimeError as e:
            # Executor shut down (process exiting)
            logger.error("Could not queue history record %r: %s", record.label, e)
            self._notify(record, on_failure)

    def _deliver(
        self,
        record: CompletionRecord,
        on_failure: Optional[Callable[[CompletionRecord], None]],
    ) -> bool:
        try:
            ok = self._sink(
                record.user_id,
                record.label,
                record.details,
                record.xp,
                record.category,
                record.payload,
            )
        except Exception as e:
            logger.error("History sink raised for %r: %s", record.label, e)
            ok = False
        if ok:
            logger.info("Recorded %s XP for %r (%s)", record.xp, record.label, record.user_id)
        else:
            logger.warning("History sink rejected %r (%s XP)", record.label, record.xp)
            self._notify(record, on_failure)
        return bool(ok)

    @staticmethod
    def _notify(record, on_failure) -> None:
        if on_failure is None:
            return
        try:
            on_failure(record)
        except Exception:
            logger.exception("Failure callback raised for %r", record.label)


def default_dispatcher() -> RecordingDispatcher:
    """Dispatcher backed by the Supabase history table on the shared executor."""
    from workout_session_api.services.history_service import HistoryService
    return RecordingDispatcher(HistoryService.record_completion, executor=_executor)
