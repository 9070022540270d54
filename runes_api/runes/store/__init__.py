"""Relational storage access for indexed rune state."""

from .engine import create_store_engine, read_snapshot
from .query_store import MAX_LIMIT, RuneQueryStore, compile_filter
from .tables import balance_changes, ledger, metadata, runes, supply_changes

__all__ = [
    "MAX_LIMIT",
    "RuneQueryStore",
    "balance_changes",
    "compile_filter",
    "create_store_engine",
    "ledger",
    "metadata",
    "read_snapshot",
    "runes",
    "supply_changes",
]
