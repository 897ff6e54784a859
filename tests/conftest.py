"""
Test fixtures for workout-session-api.

Provides a manual ticker, a recording sink spy and sample protocols so the
session engine can be driven deterministically and offline.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

# Repo root: .../workout-session-api
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import workout_session_api...`
for p in {ROOT, SRC}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from workout_session_api.models import BlockEnvelope
from workout_session_api.services.recording import RecordingDispatcher
from workout_session_api.session.runners import RunnerContext
from workout_session_api.session.timer import TickHandle, Ticker


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class _ManualHandle(TickHandle):
    def __init__(self, ticker: "ManualTicker", callback: Callable[[], None]):
        self.ticker = ticker
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTicker(Ticker):
    """Ticker whose seconds only pass when a test calls ``advance``."""

    def __init__(self):
        self.handles: List[_ManualHandle] = []

    def every(self, seconds: float, callback: Callable[[], None]) -> TickHandle:
        handle = _ManualHandle(self, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> List[_ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: int = 1) -> None:
        for _ in range(seconds):
            for handle in list(self.active):
                if not handle.cancelled:
                    handle.callback()


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


# ---------------------------------------------------------------------------
# History sink
# ---------------------------------------------------------------------------


class SinkSpy:
    """Stands in for HistoryService.record_completion."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, user_id, label, details, xp, category, payload=None) -> bool:
        self.calls.append({
            "user_id": user_id,
            "label": label,
            "details": details,
            "xp": xp,
            "category": category,
            "payload": payload,
        })
        return self.result

    @property
    def xp(self) -> List[int]:
        return [c["xp"] for c in self.calls]

    def labels(self) -> List[str]:
        return [c["label"] for c in self.calls]


@pytest.fixture
def sink() -> SinkSpy:
    return SinkSpy()


@pytest.fixture
def rejecting_sink() -> SinkSpy:
    return SinkSpy(result=False)


@pytest.fixture
def dispatcher(sink) -> RecordingDispatcher:
    """Synchronous dispatcher so records are visible as soon as the intent returns."""
    return RecordingDispatcher(sink)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def make_block(**raw):
    """Validate one raw block dict into its typed model."""
    return BlockEnvelope(block=raw).block


@pytest.fixture
def block_factory():
    return make_block


@pytest.fixture
def context_factory(ticker):
    def _make(cues: Optional[List[int]] = None, reported: Optional[list] = None, **overrides) -> RunnerContext:
        kwargs: Dict[str, Any] = {"ticker": ticker}
        if cues is not None:
            kwargs["play_cue"] = lambda: cues.append(1)
        if reported is not None:
            kwargs["report_interval"] = lambda interval, xp: reported.append((interval, xp))
        kwargs.update(overrides)
        return RunnerContext(**kwargs)
    return _make


@pytest.fixture
def sample_protocol_raw() -> List[Dict[str, Any]]:
    """A day with a warm-up section, a strength section and a conditioning section."""
    return [
        {
            "type": "list",
            "name": "Today's Protocol",
            "section": "Warm-Up",
            "xp_value": 10,
            "items": [
                {"type": "header", "text": "Mobility"},
                "Hip circles",
                {"type": "item", "text": "Band pull-aparts", "details": ["2 x 15", "Slow"]},
            ],
        },
        {
            "type": "checklist_exercise",
            "name": "Bench Press",
            "section": "Strength",
            "sets": 3,
            "reps_per_set": 8,
            "rest_seconds": 120,
            "xp_value": 50,
        },
        {
            "type": "superset",
            "name": "2. Superset (Row + Curl)",
            "section": "Strength",
            "sets": 2,
            "xp_value": 40,
            "exercises": [{"name": "Row", "reps": 10}, {"name": "Curl", "reps": "8-12"}],
        },
        {
            "type": "timer",
            "name": "Treadmill Intervals",
            "section": "Engine",
            "intervals": [
                {"type": "interval", "seconds": 30, "zone": "Push Pace"},
                {"type": "card", "text": "Walk it off"},
                {"type": "interval", "seconds": 60, "zone": "Base"},
            ],
        },
    ]


@pytest.fixture
def sample_blocks(sample_protocol_raw):
    from workout_session_api.services.protocol_service import parse_blocks
    return parse_blocks(sample_protocol_raw)


# ---------------------------------------------------------------------------
# Environment Variables
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Keep tests away from a real Supabase project."""
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
