"""XP/history sink backed by the Supabase ``history`` table."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from workout_session_api.config import settings
from workout_session_api.services.retry import retry_sync_call
from workout_session_api.services.supabase_client import get_supabase_client
from workout_session_api.utils import snake_label

logger = logging.getLogger(__name__)


def build_history_row(
    user_id: str,
    label: str,
    details: str,
    xp: int,
    category: str,
    payload: Optional[List[Dict[str, Any]]] = None,
    now: Optional[float] = None,
) -> Dict[str, Any]:
    """Row shape shared with the profile and trends pages."""
    ts = int(now if now is not None else time.time())
    return {
        "user_id": user_id,
        "exercise_id": f"block_{snake_label(label)}",
        "timestamp": ts,
        "date": datetime.fromtimestamp(ts, tz=timezone.utc).date().isoformat(),
        "value": details,
        "raw_value": xp,
        "details": payload or [],
        "level": 1,
        "xp": xp,
        "rank_name": category,
    }


class HistoryService:
    """Static methods for writing completion records."""

    @staticmethod
    def record_completion(
        user_id: str,
        label: str,
        details: str,
        xp: int,
        category: str = "Strength",
        payload: Optional[List[Dict[str, Any]]] = None,
    ) -> bool:
        """Insert one completion row. Returns True on success, False otherwise."""
        client = get_supabase_client()
        if not client:
            return False

        row = build_history_row(user_id, label, details, xp, category, payload)

        def _insert():
            return client.table(settings.HISTORY_TABLE).insert(row).execute()

        try:
            retry_sync_call(_insert, max_attempts=settings.RECORD_MAX_ATTEMPTS)
            logger.debug("History row saved: %s (%s XP)", row["exercise_id"], xp)
            return True
        except Exception as e:
            logger.error("History save error for %s/%s: %s", user_id, row["exercise_id"], e)
            return False
