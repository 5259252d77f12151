"""
periodwatch.settings
====================

Configuration settings for periodwatch.

Module-level constants cover process wiring (database file, API bind
address).  The :class:`Settings` model holds the tunables read by the
library and the HTTP layer; every field can be overridden with a
``PERIODWATCH_``-prefixed environment variable or a ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("PERIODWATCH_DB_FILE", str(BASE_DIR / "periodwatch.db"))
DB_URL = f"sqlite:///{DB_FILE}"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("PERIODWATCH_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("PERIODWATCH_API_PORT", "8000"))
API_DEBUG = os.environ.get("PERIODWATCH_API_DEBUG", "False").lower() == "true"


class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PERIODWATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    db_url: str = Field(DB_URL, description="SQLAlchemy URL of the compliance store")
    db_echo: bool = Field(False, description="Echo SQL statements")

    summary_limit: int = Field(5, ge=1, description="Max due/completed items per summary")
    recent_completed_months: int = Field(
        3, ge=0, description="Trailing calendar months of completed work to surface"
    )

    test_mode_allowed: bool = Field(
        True, description="Wire the simulated clock instead of the real one"
    )
    log_level: str = Field("INFO", description="Root log level for the CLI and API")

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Origins allowed by the API's CORS middleware",
    )


# Initialize settings
settings = Settings()
