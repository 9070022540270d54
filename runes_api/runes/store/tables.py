"""Table definitions for the indexer database.

The indexer owns these tables; the API only reads them. They are declared
here so queries can be built with SQLAlchemy Core and so tests can create
an empty schema.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Enum,
    Index,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    SmallInteger,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator

from runes_api.runes.models import LEDGER_OPERATIONS


U128_DIGITS = 40


class U128(TypeDecorator):
    """Unsigned integer up to 128 bits, surfaced to Python as a decimal string.

    PostgreSQL stores it as ``NUMERIC(40, 0)``. SQLite (used by the test suite)
    has no exact type wider than 64 bits, so values are stored as zero-padded
    fixed-width text; equal width keeps comparison and ordering numeric.
    """

    impl = Numeric(U128_DIGITS, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(U128_DIGITS))
        return dialect.type_descriptor(Numeric(U128_DIGITS, 0))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        number = int(value)
        if number < 0 or number >= 2**128:
            raise ValueError(f"{value!r} is outside the unsigned 128-bit range")
        if dialect.name == "sqlite":
            return str(number).zfill(U128_DIGITS)
        return number

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return str(int(value))


metadata = MetaData()

runes = Table(
    "runes",
    metadata,
    Column("id", Text, primary_key=True),
    Column("number", BigInteger, nullable=False, unique=True),
    Column("name", Text, nullable=False, unique=True),
    Column("spaced_name", Text, nullable=False, unique=True),
    Column("block_hash", Text, nullable=False),
    Column("block_height", U128, nullable=False),
    Column("tx_index", BigInteger, nullable=False),
    Column("tx_id", Text, nullable=False),
    Column("divisibility", SmallInteger, nullable=False),
    Column("premine", U128, nullable=False),
    Column("symbol", Text, nullable=False),
    Column("cenotaph", Boolean, nullable=False, default=False),
    Column("terms_amount", U128, nullable=True),
    Column("terms_cap", U128, nullable=True),
    Column("terms_height_start", U128, nullable=True),
    Column("terms_height_end", U128, nullable=True),
    Column("terms_offset_start", U128, nullable=True),
    Column("terms_offset_end", U128, nullable=True),
    Column("turbo", Boolean, nullable=False, default=False),
    Column("timestamp", BigInteger, nullable=False),
    Index("runes_block_height_tx_index_index", "block_height", "tx_index"),
)

supply_changes = Table(
    "supply_changes",
    metadata,
    Column("rune_id", Text, nullable=False),
    Column("block_height", U128, nullable=False),
    Column("minted", U128, nullable=False, default=0),
    Column("total_mints", U128, nullable=False, default=0),
    Column("burned", U128, nullable=False, default=0),
    Column("total_burns", U128, nullable=False, default=0),
    Column("total_operations", U128, nullable=False, default=0),
    PrimaryKeyConstraint("rune_id", "block_height"),
)

ledger = Table(
    "ledger",
    metadata,
    Column("rune_id", Text, nullable=False),
    Column("block_hash", Text, nullable=False),
    Column("block_height", U128, nullable=False),
    Column("tx_index", BigInteger, nullable=False),
    Column("event_index", BigInteger, nullable=False),
    Column("tx_id", Text, nullable=False),
    Column("output", BigInteger, nullable=True),
    Column("address", Text, nullable=True),
    Column("receiver_address", Text, nullable=True),
    Column("amount", U128, nullable=True),
    Column(
        "operation",
        Enum(*LEDGER_OPERATIONS, name="ledger_operation", native_enum=True),
        nullable=False,
    ),
    Column("timestamp", BigInteger, nullable=False),
    Index("ledger_rune_id_index", "rune_id"),
    Index("ledger_block_hash_index", "block_hash"),
    Index("ledger_block_height_index", "block_height"),
    Index("ledger_tx_id_index", "tx_id"),
    Index("ledger_address_index", "address"),
)

balance_changes = Table(
    "balance_changes",
    metadata,
    Column("rune_id", Text, nullable=False),
    Column("block_height", U128, nullable=False),
    Column("address", String, nullable=False),
    Column("balance", U128, nullable=False),
    Column("total_operations", BigInteger, nullable=False, default=0),
    PrimaryKeyConstraint("rune_id", "address", "block_height"),
    Index("balance_changes_address_index", "address"),
)


__all__ = ["U128", "balance_changes", "ledger", "metadata", "runes", "supply_changes"]
