"""Connection pool setup and per-request read snapshots."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from runes_api.config import Settings
from runes_api.runes.errors import StoreError

LOGGER = logging.getLogger(__name__)


def create_store_engine(settings: Settings) -> Engine:
    """Build the process-wide pooled engine described by ``settings``."""

    url = make_url(settings.database_url)
    kwargs: Dict[str, Any] = {"pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        # Handlers run in the threadpool; each still owns its connection.
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.pool_size,
            max_overflow=0,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.max_lifetime,
            isolation_level="REPEATABLE READ",
            connect_args={"options": f"-c statement_timeout={settings.statement_timeout_ms}"},
        )

    engine = create_engine(url, **kwargs)
    LOGGER.info(
        "Store engine created",
        extra={"backend": url.get_backend_name(), "database": url.database},
    )
    return engine


@contextmanager
def read_snapshot(engine: Engine) -> Iterator[Connection]:
    """Check out one pooled connection inside a single read transaction.

    The connection goes back to the pool on every exit path.
    """

    try:
        with engine.connect() as connection:
            with connection.begin():
                yield connection
    except SQLAlchemyError as exc:
        raise StoreError("Store connection failed") from exc


__all__ = ["create_store_engine", "read_snapshot"]
