"""Read-only reference data: exercise catalog and past logs."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from workout_session_api.config import settings
from workout_session_api.services.retry import create_retry_decorator
from workout_session_api.services.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

_read_retry = create_retry_decorator(max_attempts=2)


@_read_retry
def _select(client, table: str, **filters: Any) -> List[Dict[str, Any]]:
    query = client.table(table).select("*")
    for column, value in filters.items():
        query = query.eq(column, value)
    result = query.execute()
    return list(result.data or [])


class CatalogService:
    """Everything here degrades to an empty list; the UI then hides the drill-down."""

    @staticmethod
    def get_catalog() -> List[Dict[str, Any]]:
        client = get_supabase_client()
        if not client:
            return []
        try:
            return _select(client, settings.CATALOG_TABLE)
        except Exception as e:
            logger.error("Catalog read error: %s", e)
            return []

    @staticmethod
    def get_history(user_id: str) -> List[Dict[str, Any]]:
        """All history rows for one user, oldest first."""
        client = get_supabase_client()
        if not client:
            return []
        try:
            rows = _select(client, settings.HISTORY_TABLE, user_id=user_id)
        except Exception as e:
            logger.error("History read error for %s: %s", user_id, e)
            return []
        return sorted(rows, key=lambda r: r.get("timestamp") or 0)
