"""Environment driven configuration for the runes API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

from sqlalchemy.engine import URL

LOGGER = logging.getLogger(__name__)


def _int_env(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s=%r, using %d", key, raw, default)
        return default


def _bool_env(key: str, default: bool) -> bool:
    raw = (os.getenv(key) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved once at application start-up."""

    database_url: str
    pool_size: int = 10
    pool_timeout: int = 30
    max_lifetime: int = 60
    statement_timeout_ms: int = 60_000
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    metrics_enabled: bool = True
    log_level: str = "INFO"


def _database_url_from_env() -> str:
    explicit = (os.getenv("RUNES_DATABASE_URL") or "").strip()
    if explicit:
        return explicit

    url = URL.create(
        "postgresql+psycopg",
        username=os.getenv("PGUSER") or "postgres",
        password=os.getenv("PGPASSWORD") or None,
        host=os.getenv("PGHOST") or "localhost",
        port=_int_env("PGPORT", 5432),
        database=os.getenv("PGDATABASE") or "postgres",
    )
    return url.render_as_string(hide_password=False)


def load_settings() -> Settings:
    """Load configuration from environment variables if present."""

    settings = Settings(
        database_url=_database_url_from_env(),
        pool_size=_int_env("PG_CONNECTION_POOL_MAX", 10),
        pool_timeout=_int_env("PG_POOL_TIMEOUT", 30),
        max_lifetime=_int_env("PG_MAX_LIFETIME", 60),
        statement_timeout_ms=_int_env("PG_STATEMENT_TIMEOUT", 60_000),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=_int_env("API_PORT", 3000),
        metrics_enabled=_bool_env("RUNES_METRICS_ENABLED", True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )
    if settings.pool_size < 1:
        LOGGER.warning("PG_CONNECTION_POOL_MAX must be positive – using 1")
        settings = replace(settings, pool_size=1)
    return settings


__all__ = ["Settings", "load_settings"]
