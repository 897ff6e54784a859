"""Domain errors raised by the session engine and its collaborators."""


class SessionError(RuntimeError):
    """Base class for session engine errors."""


class InvalidIntentError(SessionError):
    """Raised when a user intent is not valid for the current state or runner."""


class SessionNotFoundError(SessionError, KeyError):
    """Raised when a session id is unknown to the store."""


class ProtocolLoadError(SessionError):
    """Raised when a protocol file exists but cannot be read or decoded."""
