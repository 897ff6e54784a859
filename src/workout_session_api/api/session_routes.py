"""Session routes: create a session, drive it with intents, read its state.

Handlers are ``async`` so countdowns are scheduled on the server's event loop
and every state change happens on that one thread.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from workout_session_api.api.dependencies import (
    get_catalog_loader,
    get_dispatcher,
    get_protocol_service,
    get_session_store,
    get_ticker,
)
from workout_session_api.errors import InvalidIntentError, SessionNotFoundError
from workout_session_api.services.protocol_service import ProtocolService, resolve_day
from workout_session_api.services.recording import RecordingDispatcher
from workout_session_api.services.session_store import SessionStore
from workout_session_api.session.controller import SessionController
from workout_session_api.session.timer import Ticker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    day: Optional[str] = None  # Weekday name or ISO date; today when omitted


class SelectSectionRequest(BaseModel):
    name: str


class IntentRequest(BaseModel):
    action: str
    index: Optional[int] = None
    exercise: Optional[int] = None
    round_index: Optional[int] = None
    weight: Optional[Union[str, float]] = None

    class Config:
        extra = "forbid"

    def params(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"action"}, exclude_none=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _lookup(store: SessionStore, session_id: str) -> SessionController:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _apply(session: SessionController, change: Callable[[], None]) -> Dict[str, Any]:
    try:
        change()
    except InvalidIntentError as e:
        logger.info("Session %s rejected intent: %s", session.session_id, e)
        raise HTTPException(status_code=409, detail=str(e))
    return session.view()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("", status_code=201)
async def create_session(
    request: CreateSessionRequest,
    store: SessionStore = Depends(get_session_store),
    protocols: ProtocolService = Depends(get_protocol_service),
    ticker: Ticker = Depends(get_ticker),
    dispatcher: RecordingDispatcher = Depends(get_dispatcher),
    load_catalog=Depends(get_catalog_loader),
):
    """Load the day's protocol and open a session on it.

    An empty day still opens a session, in state EMPTY, so the UI can show
    the library instead of a runner.
    """
    weekday = resolve_day(request.day)
    blocks = await run_in_threadpool(protocols.load_protocol, weekday)
    catalog = await run_in_threadpool(load_catalog) if blocks else []
    session = SessionController(
        blocks,
        user_id=request.user_id,
        ticker=ticker,
        dispatcher=dispatcher,
        catalog=catalog,
        label=weekday,
    )
    store.add(session)
    return session.view()


@router.get("/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    return _lookup(store, session_id).view()


@router.get("/{session_id}/sections")
async def get_sections(session_id: str, store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    session = _lookup(store, session_id)
    sections: List[dict] = session.sections()
    return {"progress": session.progress, "sections": sections}


@router.post("/{session_id}/sections/select")
async def select_section(
    session_id: str,
    request: SelectSectionRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = _lookup(store, session_id)
    return _apply(session, lambda: session.select_section(request.name))


@router.post("/{session_id}/hub")
async def back_to_hub(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _lookup(store, session_id)
    return _apply(session, session.back_to_hub)


@router.post("/{session_id}/intents")
async def send_intent(
    session_id: str,
    request: IntentRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = _lookup(store, session_id)
    return _apply(session, lambda: session.intent(request.action, **request.params()))


@router.delete("/{session_id}", status_code=204)
async def discard_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        store.discard(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
