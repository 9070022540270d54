"""Paginated read queries over the indexer database."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import ColumnElement, FromClause, Select

from runes_api.runes.errors import StoreError
from runes_api.runes.identifiers import (
    And,
    ByAddress,
    ByBlockHash,
    ByBlockHeight,
    ById,
    ByName,
    ByNumber,
    BySpacedName,
    ByTxId,
    BlockFilter,
    Filter,
    RuneFilter,
)
from runes_api.runes.models import Balance, ChainTip, Etching, LedgerEntry, Page, T
from runes_api.runes.store.tables import balance_changes, ledger, runes, supply_changes

LOGGER = logging.getLogger(__name__)

MAX_LIMIT = 60

RUNE_IDENTITY_COLUMNS = (
    runes.c.number,
    runes.c.name,
    runes.c.spaced_name,
    runes.c.divisibility,
)


def compile_filter(
    flt: Filter,
    *,
    rune_source: FromClause = runes,
    row_source: FromClause | None = None,
) -> ColumnElement[bool]:
    """Translate a filter into a bound SQL expression.

    Rune identity filters apply to ``rune_source``; address, block and
    transaction filters apply to ``row_source`` (ledger or balance rows).
    """

    if isinstance(flt, And):
        return and_(
            compile_filter(flt.left, rune_source=rune_source, row_source=row_source),
            compile_filter(flt.right, rune_source=rune_source, row_source=row_source),
        )
    if isinstance(flt, ById):
        return rune_source.c.id == flt.value
    if isinstance(flt, ByNumber):
        return rune_source.c.number == flt.value
    if isinstance(flt, ByName):
        return rune_source.c.name == flt.value
    if isinstance(flt, BySpacedName):
        return rune_source.c.spaced_name == flt.value

    if row_source is None:
        raise ValueError(f"{type(flt).__name__} needs a row source")
    if isinstance(flt, ByAddress):
        return row_source.c.address == flt.value
    if isinstance(flt, ByBlockHeight):
        return row_source.c.block_height == flt.value
    if isinstance(flt, ByBlockHash):
        return row_source.c.block_hash == flt.value
    if isinstance(flt, ByTxId):
        return row_source.c.tx_id == flt.value
    raise TypeError(f"Unsupported filter {flt!r}")


def _latest_supply() -> FromClause:
    """Supply snapshots ranked newest first per rune."""

    rank = func.row_number().over(
        partition_by=supply_changes.c.rune_id,
        order_by=supply_changes.c.block_height.desc(),
    )
    return select(
        supply_changes.c.rune_id,
        supply_changes.c.minted,
        supply_changes.c.total_mints,
        supply_changes.c.burned,
        supply_changes.c.total_burns,
        supply_changes.c.total_operations,
        rank.label("recency"),
    ).subquery("supply")


def _latest_balances() -> FromClause:
    """Balance change rows ranked newest first per (rune, address)."""

    rank = func.row_number().over(
        partition_by=(balance_changes.c.rune_id, balance_changes.c.address),
        order_by=balance_changes.c.block_height.desc(),
    )
    return select(
        balance_changes.c.rune_id,
        balance_changes.c.address,
        balance_changes.c.balance,
        balance_changes.c.total_operations,
        rank.label("recency"),
    ).subquery("balances")


def _check_window(offset: int, limit: int) -> None:
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")
    if not 1 <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be within [1, {MAX_LIMIT}], got {limit}")


class RuneQueryStore:
    """Read-only queries bound to one connection.

    The connection is expected to sit inside a transaction so that every
    query issued for a request (chain tip included) observes one snapshot.
    """

    def __init__(self, connection: Connection):
        self._conn = connection

    def _execute(self, statement: Select, operation: str) -> List[RowMapping]:
        try:
            return list(self._conn.execute(statement).mappings())
        except SQLAlchemyError as exc:
            raise StoreError(f"{operation} query failed", context={"operation": operation}) from exc

    def _scalar(self, statement: Select, operation: str) -> Any:
        try:
            return self._conn.execute(statement).scalar()
        except SQLAlchemyError as exc:
            raise StoreError(f"{operation} query failed", context={"operation": operation}) from exc

    def _paginate(
        self,
        operation: str,
        columns: Sequence[Any],
        source: FromClause,
        criteria: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any],
        offset: int,
        limit: int,
        factory: Callable[[RowMapping], T],
    ) -> Page[T]:
        """Fetch one page together with the full match count.

        ``COUNT(*) OVER ()`` rides along with the page. An empty page past
        the end carries no count, so the same criteria are counted again.
        """

        _check_window(offset, limit)
        statement = (
            select(*columns, func.count().over().label("total"))
            .select_from(source)
            .where(*criteria)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        rows = self._execute(statement, operation)
        if rows:
            total = int(rows[0]["total"])
        elif offset > 0:
            total = self.count(operation, source, criteria)
        else:
            total = 0
        LOGGER.debug("%s page fetched", operation, extra={"rows": len(rows), "total": total})
        return Page(total=total, results=[factory(row) for row in rows])

    def count(
        self,
        operation: str,
        source: FromClause,
        criteria: Sequence[ColumnElement[bool]],
    ) -> int:
        statement = select(func.count()).select_from(source).where(*criteria)
        return int(self._scalar(statement, f"{operation}_count") or 0)

    # ----- chain tip -----

    def get_chain_tip(self) -> Optional[ChainTip]:
        """Return the newest ledger block, or ``None`` for an empty ledger."""

        statement = (
            select(ledger.c.block_hash, ledger.c.block_height)
            .order_by(ledger.c.block_height.desc())
            .limit(1)
        )
        rows = self._execute(statement, "chain_tip")
        if not rows:
            return None
        return ChainTip(block_hash=rows[0]["block_hash"], block_height=rows[0]["block_height"])

    # ----- etchings -----

    def _etching_source(self) -> tuple[FromClause, List[Any]]:
        supply = _latest_supply()
        source = runes.outerjoin(
            supply, and_(supply.c.rune_id == runes.c.id, supply.c.recency == 1)
        )
        columns = [
            *runes.c,
            supply.c.minted,
            supply.c.total_mints,
            supply.c.burned,
            supply.c.total_burns,
            supply.c.total_operations,
        ]
        return source, columns

    def get_etching(self, flt: RuneFilter) -> Optional[Etching]:
        source, columns = self._etching_source()
        statement = select(*columns).select_from(source).where(compile_filter(flt)).limit(1)
        rows = self._execute(statement, "etching")
        if not rows:
            return None
        return Etching.from_row(rows[0])

    def get_etchings(self, offset: int, limit: int) -> Page[Etching]:
        source, columns = self._etching_source()
        return self._paginate(
            "etchings",
            columns,
            source,
            [],
            (runes.c.block_height.desc(), runes.c.tx_index.desc()),
            offset,
            limit,
            Etching.from_row,
        )

    # ----- activity -----

    def _activity(self, operation: str, flt: Filter, offset: int, limit: int) -> Page[LedgerEntry]:
        source = ledger.join(runes, runes.c.id == ledger.c.rune_id)
        return self._paginate(
            operation,
            (*ledger.c, *RUNE_IDENTITY_COLUMNS),
            source,
            [compile_filter(flt, row_source=ledger)],
            (ledger.c.block_height.desc(), ledger.c.tx_index.desc(), ledger.c.event_index.desc()),
            offset,
            limit,
            LedgerEntry.from_row,
        )

    def get_rune_activity(self, flt: RuneFilter, offset: int, limit: int) -> Page[LedgerEntry]:
        return self._activity("rune_activity", flt, offset, limit)

    def get_rune_address_activity(
        self, flt: RuneFilter, address: str, offset: int, limit: int
    ) -> Page[LedgerEntry]:
        return self._activity("rune_address_activity", And(flt, ByAddress(address)), offset, limit)

    def get_address_activity(self, address: str, offset: int, limit: int) -> Page[LedgerEntry]:
        return self._activity("address_activity", ByAddress(address), offset, limit)

    def get_block_activity(self, flt: BlockFilter, offset: int, limit: int) -> Page[LedgerEntry]:
        return self._activity("block_activity", flt, offset, limit)

    def get_transaction_activity(self, tx_id: str, offset: int, limit: int) -> Page[LedgerEntry]:
        return self._activity("transaction_activity", ByTxId(tx_id), offset, limit)

    # ----- balances -----

    def _balance_query(self) -> tuple[FromClause, List[Any], ColumnElement[bool]]:
        balances = _latest_balances()
        source = balances.join(runes, runes.c.id == balances.c.rune_id)
        columns = [
            balances.c.rune_id,
            balances.c.address,
            balances.c.balance,
            balances.c.total_operations,
            *RUNE_IDENTITY_COLUMNS,
        ]
        return source, columns, balances.c.recency == 1

    def _balances(self, operation: str, flt: Filter, offset: int, limit: int) -> Page[Balance]:
        source, columns, latest = self._balance_query()
        balances = source.left
        return self._paginate(
            operation,
            columns,
            source,
            [latest, compile_filter(flt, row_source=balances)],
            (balances.c.balance.desc(), balances.c.address.asc()),
            offset,
            limit,
            Balance.from_row,
        )

    def get_rune_holders(self, flt: RuneFilter, offset: int, limit: int) -> Page[Balance]:
        return self._balances("rune_holders", flt, offset, limit)

    def get_address_balances(self, address: str, offset: int, limit: int) -> Page[Balance]:
        return self._balances("address_balances", ByAddress(address), offset, limit)

    def get_rune_address_balance(self, flt: RuneFilter, address: str) -> Optional[Balance]:
        source, columns, latest = self._balance_query()
        balances = source.left
        statement = (
            select(*columns)
            .select_from(source)
            .where(latest, compile_filter(And(flt, ByAddress(address)), row_source=balances))
            .limit(1)
        )
        rows = self._execute(statement, "rune_address_balance")
        if not rows:
            return None
        return Balance.from_row(rows[0])


__all__ = ["MAX_LIMIT", "RuneQueryStore", "compile_filter"]
