"""Shared helpers for structured request logging."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Dict, Generator

from fastapi import HTTPException, Request

from runes_api.metrics import record_err, record_ok
from runes_api.runes.errors import NotFoundError


def _duration_ms(start: float) -> float:
    return round((perf_counter() - start) * 1000, 3)


def _request_context(request: Request | None) -> Dict[str, object]:
    """Extract a minimal structured context from an HTTP request."""

    if request is None:
        return {}

    client_host = getattr(request.client, "host", None)

    context: Dict[str, object] = {
        "path": request.url.path,
        "method": request.method,
    }
    if client_host:
        context["client"] = client_host

    user_agent = request.headers.get("user-agent")
    if user_agent:
        context["user_agent"] = user_agent

    request_id = request.headers.get("x-request-id") or request.headers.get(
        "x-correlation-id"
    )
    if request_id:
        context["request_id"] = request_id

    return context


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation: str,
    request: Request | None = None,
    **context: object,
) -> Generator[Dict[str, object], None, None]:
    """Emit structured logs and metrics around an operation.

    Parameters
    ----------
    logger:
        Logger to emit records to.
    operation:
        Identifier for the operation (e.g. ``"rune_activity"``).
    request:
        Optional request object to capture HTTP context.
    context:
        Additional key/value pairs to include in the log context. The yielded
        mapping can be mutated to add dynamic values before completion.
    """

    start = perf_counter()
    base: Dict[str, object] = {"operation": operation, **_request_context(request), **context}

    try:
        yield base
    except NotFoundError as exc:
        # Expected outcome for unknown identifiers, not an error.
        logger.info(
            "%s not found",
            operation,
            extra={
                **base,
                "status": "not_found",
                "duration_ms": _duration_ms(start),
                "error": exc.message,
            },
        )
        record_err(operation, "not_found")
        raise
    except HTTPException as exc:
        logger.warning(
            "%s failed",
            operation,
            extra={
                **base,
                "status": "error",
                "status_code": exc.status_code,
                "duration_ms": _duration_ms(start),
                "error": exc.detail,
            },
        )
        record_err(operation, str(exc.status_code))
        raise
    except Exception as exc:
        logger.exception(
            "%s failed",
            operation,
            extra={
                **base,
                "status": "error",
                "duration_ms": _duration_ms(start),
                "error": str(exc),
            },
        )
        record_err(operation, "error")
        raise
    else:
        duration_ms = _duration_ms(start)
        logger.info(
            "%s completed",
            operation,
            extra={**base, "status": "success", "duration_ms": duration_ms},
        )
        record_ok(operation, duration_ms / 1000)
