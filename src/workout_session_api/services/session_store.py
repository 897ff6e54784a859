"""In-process registry of live sessions."""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from workout_session_api.config import settings
from workout_session_api.errors import SessionNotFoundError
from workout_session_api.session.controller import SessionController, SessionState

logger = logging.getLogger(__name__)

TERMINAL_STATES = (SessionState.EMPTY, SessionState.ALL_COMPLETE)


class SessionStore:
    """Sessions live in memory for as long as the user keeps them open.

    A session that is EMPTY or ALL_COMPLETE and has not been requested for
    ``ttl_seconds`` is evicted the next time a session is added. Sessions still
    in HUB or RUNNING are only removed by ``discard``.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: Dict[str, SessionController] = {}
        self._touched: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._ttl = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock

    def add(self, session: SessionController) -> SessionController:
        self.evict_expired()
        with self._lock:
            self._sessions[session.session_id] = session
            self._touched[session.session_id] = self._clock()
        logger.info("Session %s opened for %s (%s blocks)", session.session_id, session.user_id, len(session.blocks))
        return session

    def get(self, session_id: str) -> SessionController:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._touched[session_id] = self._clock()
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._touched.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        session.close()
        logger.info("Session %s discarded", session_id)

    def evict_expired(self) -> List[str]:
        """Drop finished sessions idle for longer than the TTL; returns their ids."""
        now = self._clock()
        with self._lock:
            expired = [
                sid for sid, session in self._sessions.items()
                if session.state in TERMINAL_STATES and now - self._touched.get(sid, now) >= self._ttl
            ]
            sessions = [self._sessions.pop(sid) for sid in expired]
            for sid in expired:
                self._touched.pop(sid, None)
        for session in sessions:
            session.close()
        if expired:
            logger.info("Evicted %s finished session(s): %s", len(expired), ", ".join(expired))
        return expired

    def ids(self) -> List[str]:
        return list(self._sessions)

    def clear(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._touched.clear()
        for session in sessions:
            session.close()


session_store = SessionStore()
