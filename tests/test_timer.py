"""Unit tests for the countdown primitive."""
import asyncio

import pytest

from workout_session_api.session.timer import AsyncioTicker, Countdown


@pytest.fixture
def events():
    return {"cues": 0, "zero": 0}


@pytest.fixture
def countdown(ticker, events):
    def on_cue():
        events["cues"] += 1

    def on_zero():
        events["zero"] += 1

    return Countdown(ticker, on_cue=on_cue, on_zero=on_zero)


class TestCountdown:
    """Ticking, cues and the zero transition."""

    def test_counts_down_once_per_tick(self, ticker, countdown):
        countdown.start(90)
        ticker.advance(10)
        assert countdown.remaining == 80
        assert countdown.running
        assert countdown.display == "01:20"

    def test_final_five_seconds_cue(self, ticker, countdown, events):
        countdown.start(10)
        ticker.advance(5)
        assert events["cues"] == 0
        ticker.advance(5)
        assert events["cues"] == 5

    def test_reaches_zero_exactly_once(self, ticker, countdown, events):
        countdown.start(3)
        ticker.advance(10)
        assert countdown.remaining == 0
        assert not countdown.running
        assert events["zero"] == 1
        assert ticker.active == []

    def test_zero_duration_finishes_immediately(self, ticker, countdown, events):
        countdown.start(0)
        assert events["zero"] == 1
        assert not countdown.running
        ticker.advance(3)
        assert events["zero"] == 1

    def test_skip_stops_without_zero_callback(self, ticker, countdown, events):
        countdown.start(30)
        ticker.advance(2)
        countdown.skip()
        assert countdown.remaining == 0
        assert not countdown.running
        assert events["zero"] == 0

    def test_pause_and_resume(self, ticker, countdown):
        countdown.start(30)
        ticker.advance(5)
        countdown.pause()
        ticker.advance(5)
        assert countdown.remaining == 25
        countdown.resume()
        ticker.advance(5)
        assert countdown.remaining == 20

    def test_resume_after_zero_does_nothing(self, ticker, countdown):
        countdown.start(1)
        ticker.advance(1)
        countdown.resume()
        assert not countdown.running

    def test_restart_uses_last_duration(self, ticker, countdown):
        countdown.start(45)
        ticker.advance(20)
        countdown.restart()
        assert countdown.remaining == 45
        assert countdown.running
        assert len(ticker.active) == 1

    def test_cancel_keeps_remaining(self, ticker, countdown):
        countdown.start(30)
        ticker.advance(4)
        countdown.cancel()
        ticker.advance(4)
        assert countdown.remaining == 26
        assert ticker.active == []

    def test_restarting_replaces_schedule(self, ticker, countdown):
        countdown.start(30)
        countdown.start(60)
        assert len(ticker.active) == 1
        ticker.advance(1)
        assert countdown.remaining == 59

    def test_snapshot(self, countdown):
        countdown.start(75)
        assert countdown.snapshot() == {
            "duration": 75,
            "remaining": 75,
            "running": True,
            "display": "01:15",
        }


class TestAsyncioTicker:
    """The event-loop ticker fires repeatedly until cancelled."""

    def test_ticks_on_running_loop(self):
        async def scenario():
            calls = []
            handle = AsyncioTicker().every(0.01, lambda: calls.append(1))
            await asyncio.sleep(0.055)
            handle.cancel()
            seen = len(calls)
            await asyncio.sleep(0.03)
            return seen, len(calls)

        seen, after_cancel = asyncio.run(scenario())
        assert seen >= 2
        assert after_cancel == seen

    def test_callback_errors_do_not_stop_ticking(self):
        async def scenario():
            calls = []

            def flaky():
                calls.append(1)
                raise ValueError("boom")

            handle = AsyncioTicker().every(0.01, flaky)
            await asyncio.sleep(0.045)
            handle.cancel()
            return len(calls)

        assert asyncio.run(scenario()) >= 2
