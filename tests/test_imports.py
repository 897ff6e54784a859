"""Verify all modules can be imported without errors."""


def test_core_module_imports():
    """Import core modules to catch bad import paths."""
    import workout_session_api.main
    import workout_session_api.models
    import workout_session_api.config
    import workout_session_api.errors
    import workout_session_api.utils


def test_session_imports():
    import workout_session_api.session.timer
    import workout_session_api.session.xp
    import workout_session_api.session.sections
    import workout_session_api.session.controller
    import workout_session_api.session.runners


def test_api_imports():
    """Import API route modules."""
    import workout_session_api.api.routes
    import workout_session_api.api.session_routes
    import workout_session_api.api.dependencies


def test_service_imports():
    """Import service modules."""
    import workout_session_api.services.supabase_client
    import workout_session_api.services.retry
    import workout_session_api.services.history_service
    import workout_session_api.services.catalog_service
    import workout_session_api.services.protocol_service
    import workout_session_api.services.recording
    import workout_session_api.services.session_store
