"""Shared collaborators for the routers, overridable in tests via ``app.dependency_overrides``."""
from workout_session_api.services.catalog_service import CatalogService
from workout_session_api.services.protocol_service import ProtocolService
from workout_session_api.services.recording import RecordingDispatcher, default_dispatcher
from workout_session_api.services.session_store import SessionStore, session_store
from workout_session_api.session.timer import AsyncioTicker, Ticker

_ticker = AsyncioTicker()
_dispatcher = None


def get_session_store() -> SessionStore:
    return session_store


def get_protocol_service() -> ProtocolService:
    return ProtocolService()


def get_ticker() -> Ticker:
    return _ticker


def get_dispatcher() -> RecordingDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = default_dispatcher()
    return _dispatcher


def get_catalog_loader():
    return CatalogService.get_catalog
