"""Tests for the in-memory session registry."""
import pytest

from workout_session_api.errors import SessionNotFoundError
from workout_session_api.services.session_store import SessionStore
from workout_session_api.session.controller import SessionController


@pytest.fixture
def session(block_factory, ticker, dispatcher):
    blocks = [block_factory(type="exercise", name="Squat", sets=2)]
    return SessionController(blocks, "user-1", ticker, dispatcher, session_id="abc")


class TestSessionStore:
    def test_add_and_get(self, session):
        store = SessionStore()
        store.add(session)
        assert store.get("abc") is session

    def test_get_unknown(self):
        with pytest.raises(SessionNotFoundError):
            SessionStore().get("missing")

    def test_not_found_is_a_key_error(self):
        with pytest.raises(KeyError):
            SessionStore().get("missing")

    def test_discard_cancels_timers(self, session, ticker):
        store = SessionStore()
        store.add(session)
        session.intent("toggle_set", index=0)
        assert ticker.active
        store.discard("abc")
        assert ticker.active == []
        assert store.ids() == []

    def test_discard_unknown(self):
        with pytest.raises(SessionNotFoundError):
            SessionStore().discard("missing")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestEviction:
    """Finished sessions are dropped once they sit idle past the TTL."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    def _session(self, blocks, ticker, dispatcher, sid):
        return SessionController(blocks, "user-1", ticker, dispatcher, session_id=sid)

    def test_finished_session_evicted_after_ttl(self, block_factory, ticker, dispatcher, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        done = self._session([block_factory(type="exercise", name="Squat", sets=1)], ticker, dispatcher, "done")
        store.add(done)
        done.intent("skip")
        assert done.state.value == "ALL_COMPLETE"

        clock.now = 61
        store.add(self._session([], ticker, dispatcher, "fresh"))
        assert store.ids() == ["fresh"]
        with pytest.raises(SessionNotFoundError):
            store.get("done")

    def test_empty_session_evicted(self, ticker, dispatcher, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        store.add(self._session([], ticker, dispatcher, "empty"))
        clock.now = 60
        assert store.evict_expired() == ["empty"]
        assert store.ids() == []

    def test_running_session_kept(self, block_factory, ticker, dispatcher, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        store.add(self._session([block_factory(type="exercise", name="Squat", sets=2)], ticker, dispatcher, "live"))
        clock.now = 10_000
        assert store.evict_expired() == []
        assert store.ids() == ["live"]

    def test_get_refreshes_idle_time(self, ticker, dispatcher, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        store.add(self._session([], ticker, dispatcher, "empty"))
        clock.now = 50
        store.get("empty")
        clock.now = 100
        assert store.evict_expired() == []
        clock.now = 110
        assert store.evict_expired() == ["empty"]
