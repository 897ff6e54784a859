"""Configuration settings for the workout session API."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"

    # Supabase (history sink + catalog)
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    HISTORY_TABLE: str = "history"
    CATALOG_TABLE: str = "catalog"
    RECORD_MAX_ATTEMPTS: int = 3

    # Protocol source
    PROTOCOL_DIR: str = "protocols/weekly"

    # Session timing
    DEFAULT_REST_SECONDS: int = 90
    SUPERSET_REST_SECONDS: int = 90
    CUE_WINDOW_SECONDS: int = 5

    # Finished or empty sessions are dropped after this long without a request
    SESSION_TTL_SECONDS: int = 3600

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
        self.HISTORY_TABLE = os.getenv("HISTORY_TABLE", "history")
        self.CATALOG_TABLE = os.getenv("CATALOG_TABLE", "catalog")
        self.RECORD_MAX_ATTEMPTS = max(1, _int_env("RECORD_MAX_ATTEMPTS", 3))

        self.PROTOCOL_DIR = os.getenv("PROTOCOL_DIR", "protocols/weekly")

        self.DEFAULT_REST_SECONDS = _int_env("DEFAULT_REST_SECONDS", 90)
        self.SUPERSET_REST_SECONDS = _int_env("SUPERSET_REST_SECONDS", 90)
        self.CUE_WINDOW_SECONDS = _int_env("CUE_WINDOW_SECONDS", 5)
        self.SESSION_TTL_SECONDS = max(0, _int_env("SESSION_TTL_SECONDS", 3600))

        origins = os.getenv("CORS_ORIGINS", "")
        if origins.strip():
            self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]


settings = Settings()
