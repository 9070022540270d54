import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from sqlalchemy.engine import Engine
from starlette.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from runes_api.config import load_settings  # noqa: E402  (import after sys.path tweak)
from runes_api.main import app as real_app  # noqa: E402
from runes_api.runes.store import (  # noqa: E402
    balance_changes,
    create_store_engine,
    ledger,
    metadata,
    runes,
    supply_changes,
)

SAMPLE_RUNE_ID = "1:1"
SAMPLE_ADDRESS = "bc1q7jd477wc5s88hsvenr0ddtatsw282hfjzg59wz"


def block_hash(height: int) -> str:
    """Deterministic 64-hex block hash with the usual leading zeros."""

    return f"{height:064x}"


def tx_id(n: int) -> str:
    return f"{n:x}".rjust(64, "a")


class Seeder:
    """Insert indexer rows with sensible defaults for each table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _insert(self, table, row: Dict[str, Any]) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            conn.execute(table.insert().values(**row))
        return row

    def rune(self, **overrides: Any) -> Dict[str, Any]:
        row = {
            "id": SAMPLE_RUNE_ID,
            "number": 1,
            "name": "Sample Rune",
            "spaced_name": "Sample•Rune",
            "block_hash": block_hash(1),
            "block_height": "1",
            "tx_index": 0,
            "tx_id": tx_id(1),
            "divisibility": 2,
            "premine": "1000",
            "symbol": "ᚠ",
            "cenotaph": False,
            "terms_amount": None,
            "terms_cap": None,
            "terms_height_start": None,
            "terms_height_end": None,
            "terms_offset_start": None,
            "terms_offset_end": None,
            "turbo": False,
            "timestamp": 1713571767,
        }
        row.update(overrides)
        return self._insert(runes, row)

    def ledger_entry(self, **overrides: Any) -> Dict[str, Any]:
        height = int(overrides.get("block_height", 1))
        row = {
            "rune_id": SAMPLE_RUNE_ID,
            "block_hash": block_hash(height),
            "block_height": str(height),
            "tx_index": 0,
            "event_index": 0,
            "tx_id": tx_id(1),
            "output": 0,
            "address": SAMPLE_ADDRESS,
            "receiver_address": None,
            "amount": "1000",
            "operation": "etching",
            "timestamp": 1713571767,
        }
        row.update(overrides)
        return self._insert(ledger, row)

    def supply_change(self, **overrides: Any) -> Dict[str, Any]:
        row = {
            "rune_id": SAMPLE_RUNE_ID,
            "block_height": "1",
            "minted": "0",
            "total_mints": "0",
            "burned": "0",
            "total_burns": "0",
            "total_operations": "1",
        }
        row.update(overrides)
        return self._insert(supply_changes, row)

    def balance_change(self, **overrides: Any) -> Dict[str, Any]:
        row = {
            "rune_id": SAMPLE_RUNE_ID,
            "block_height": "1",
            "address": SAMPLE_ADDRESS,
            "balance": "1000",
            "total_operations": 1,
        }
        row.update(overrides)
        return self._insert(balance_changes, row)


@pytest.fixture(scope="function")
def database_url(tmp_path):
    """Point the app at a fresh SQLite file; restore the environment afterwards."""

    original = os.environ.get("RUNES_DATABASE_URL")
    url = f"sqlite:///{tmp_path / 'runes.db'}"
    os.environ["RUNES_DATABASE_URL"] = url
    try:
        yield url
    finally:
        if original is None:
            os.environ.pop("RUNES_DATABASE_URL", None)
        else:
            os.environ["RUNES_DATABASE_URL"] = original


@pytest.fixture(scope="function")
def engine(database_url):
    store_engine = create_store_engine(load_settings())
    metadata.create_all(store_engine)
    try:
        yield store_engine
    finally:
        store_engine.dispose()


@pytest.fixture(scope="function")
def client(database_url):
    """
    Single TestClient whose app creates and disposes its engine
    inside the same context, on a schema created for this test only.
    """
    with TestClient(real_app) as c:
        metadata.create_all(real_app.state.engine)
        yield c


@pytest.fixture(scope="function")
def seed(request):
    """Row factories bound to whichever engine the test uses."""

    if "client" in request.fixturenames:
        request.getfixturevalue("client")
        return Seeder(real_app.state.engine)
    return Seeder(request.getfixturevalue("engine"))
