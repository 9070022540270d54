"""Prometheus metrics for the runes API."""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram
from sqlalchemy.engine import Engine

from runes_api.runes.store import RuneQueryStore, read_snapshot

OPERATION_LABELS = ("operation",)

BLOCK_HEIGHT = Gauge(
    "runes_api_block_height",
    "The most recent Bitcoin block height ingested by the API",
)

REQUEST_COUNTER = Counter(
    "runes_api_requests_total",
    "Total API operations handled",
    OPERATION_LABELS + ("status",),
)

REQUEST_DURATION = Histogram(
    "runes_api_request_seconds",
    "API operation latency buckets",
    OPERATION_LABELS,
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)


def record_ok(operation: str, duration_seconds: float) -> None:
    """Record a successful operation."""
    REQUEST_COUNTER.labels(operation=operation, status="success").inc()
    REQUEST_DURATION.labels(operation=operation).observe(duration_seconds)


def record_err(operation: str, status: str) -> None:
    """Record a failed operation with the given status."""
    REQUEST_COUNTER.labels(operation=operation, status=status).inc()


def chain_tip_height(engine: Engine) -> float:
    """Read the newest indexed block height; ``0`` for an empty ledger."""

    with read_snapshot(engine) as connection:
        chain_tip = RuneQueryStore(connection).get_chain_tip()
    return float(chain_tip.block_height) if chain_tip is not None else 0.0


def track_chain_tip(engine: Engine) -> None:
    """Make every scrape read the block height from ``engine``."""

    BLOCK_HEIGHT.set_function(lambda: chain_tip_height(engine))


__all__ = [
    "chain_tip_height",
    "record_err",
    "record_ok",
    "track_chain_tip",
]
