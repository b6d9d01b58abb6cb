"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Every field except ``database_url`` has a
default; the database location is the one value the service cannot
run without, and ``require_database_url`` turns its absence into a
``ConfigurationError`` before the application starts serving.
"""

import os
from dataclasses import dataclass, field
from typing import List

from .errors import ConfigurationError


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Values are read when an instance is created, so tests may set
    environment variables and build a fresh ``Settings()``.
    """

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Billing Analytics API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", "false"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))

    # Path or ``sqlite:///`` URL of the bill store.  No default: a
    # missing value is fatal at startup.
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))

    api_prefix: str = field(default_factory=lambda: os.getenv("API_PREFIX", "/api"))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8080")))

    # When true a numeric 0 for totalAmount/unitsConsumed is reported as
    # a missing field on insert.  Set BILLS_ZERO_IS_MISSING=false to
    # accept zero readings.
    zero_is_missing: bool = field(default_factory=lambda: _env_flag("BILLS_ZERO_IS_MISSING", "true"))

    def require_database_url(self) -> str:
        """Return ``database_url`` or raise ``ConfigurationError`` if unset."""
        if not self.database_url.strip():
            raise ConfigurationError("DATABASE_URL is not set; refusing to start without a bill store.")
        return self.database_url


# Module level instance for the default application.  Environment
# variables should be set before importing this module.
settings = Settings()
