"""Health, protocol library and history routes."""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from workout_session_api.api.dependencies import get_protocol_service
from workout_session_api.services.catalog_service import CatalogService
from workout_session_api.services.protocol_service import ProtocolService
from workout_session_api.utils import snake_label

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


@router.get("/protocols/schedule")
def protocol_schedule(protocols: ProtocolService = Depends(get_protocol_service)):
    """Weekly library: one entry per weekday, Monday first."""
    return protocols.weekly_schedule()


@router.get("/protocols/briefing")
def protocol_briefing(
    day: Optional[str] = Query(None, description="Weekday name or ISO date; defaults to today"),
    protocols: ProtocolService = Depends(get_protocol_service),
):
    return protocols.briefing(day)


def _matches_exercise(row: Dict[str, Any], exercise: str) -> bool:
    wanted = exercise.lower()
    if row.get("exercise_id") == f"block_{snake_label(exercise)}":
        return True
    for logged in row.get("details") or []:
        if isinstance(logged, dict) and str(logged.get("name", "")).lower() == wanted:
            return True
    return False


@router.get("/history/{user_id}")
async def user_history(
    user_id: str,
    exercise: Optional[str] = Query(None, description="Only rows that logged this exercise"),
) -> List[Dict[str, Any]]:
    """Past logs for the exercise drill-down. Empty when history is unavailable."""
    rows = await run_in_threadpool(CatalogService.get_history, user_id)
    if exercise:
        rows = [r for r in rows if _matches_exercise(r, exercise)]
    return rows
