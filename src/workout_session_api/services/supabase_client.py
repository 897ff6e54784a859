"""Shared Supabase client for the history sink and the exercise catalog."""
import logging
from typing import Optional

from supabase import Client, create_client

from workout_session_api.config import settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def get_supabase_client() -> Optional[Client]:
    """Get Supabase client instance, or None when Supabase is not configured."""
    global _client
    if _client is not None:
        return _client

    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("Supabase credentials not configured. XP history will not be saved.")
        return None

    try:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None
    return _client


def reset_supabase_client() -> None:
    """Drop the cached client (settings changed, or between tests)."""
    global _client
    _client = None
