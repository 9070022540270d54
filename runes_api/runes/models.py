"""Data classes describing rows read from the indexer database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T")

LEDGER_OPERATIONS = ("etching", "mint", "burn", "send", "receive")


@dataclass(frozen=True)
class MintTerms:
    """Optional bounds on open minting. ``None`` means unbounded."""

    amount: Optional[str] = None
    cap: Optional[str] = None
    height_start: Optional[str] = None
    height_end: Optional[str] = None
    offset_start: Optional[str] = None
    offset_end: Optional[str] = None


@dataclass(frozen=True)
class SupplySnapshot:
    """Latest cumulative supply counters for a rune."""

    minted: str = "0"
    total_mints: str = "0"
    burned: str = "0"
    total_burns: str = "0"
    total_operations: str = "0"


@dataclass(frozen=True)
class RuneRef:
    """Identity columns joined onto activity and balance rows."""

    id: str
    number: int
    name: str
    spaced_name: str
    divisibility: int


@dataclass(frozen=True)
class Etching:
    """A rune definition joined with its current supply."""

    id: str
    number: int
    name: str
    spaced_name: str
    block_hash: str
    block_height: str
    tx_index: int
    tx_id: str
    divisibility: int
    premine: str
    symbol: str
    terms: MintTerms
    turbo: bool
    timestamp: int
    cenotaph: bool = False
    supply: SupplySnapshot = field(default_factory=SupplySnapshot)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Etching":
        return cls(
            id=row["id"],
            number=int(row["number"]),
            name=row["name"],
            spaced_name=row["spaced_name"],
            block_hash=row["block_hash"],
            block_height=row["block_height"],
            tx_index=int(row["tx_index"]),
            tx_id=row["tx_id"],
            divisibility=int(row["divisibility"]),
            premine=row["premine"] or "0",
            symbol=row["symbol"],
            terms=MintTerms(
                amount=row["terms_amount"],
                cap=row["terms_cap"],
                height_start=row["terms_height_start"],
                height_end=row["terms_height_end"],
                offset_start=row["terms_offset_start"],
                offset_end=row["terms_offset_end"],
            ),
            turbo=bool(row["turbo"]),
            timestamp=int(row["timestamp"]),
            cenotaph=bool(row["cenotaph"]),
            supply=SupplySnapshot(
                minted=row.get("minted") or "0",
                total_mints=row.get("total_mints") or "0",
                burned=row.get("burned") or "0",
                total_burns=row.get("total_burns") or "0",
                total_operations=row.get("total_operations") or "0",
            ),
        )


def _rune_ref(row: Mapping[str, Any]) -> RuneRef:
    return RuneRef(
        id=row["rune_id"],
        number=int(row["number"]),
        name=row["name"],
        spaced_name=row["spaced_name"],
        divisibility=int(row["divisibility"]),
    )


@dataclass(frozen=True)
class LedgerEntry:
    """One protocol operation observed on-chain, with its rune identity."""

    rune: RuneRef
    block_hash: str
    block_height: str
    tx_index: int
    event_index: int
    tx_id: str
    output: Optional[int]
    address: Optional[str]
    receiver_address: Optional[str]
    amount: Optional[str]
    operation: str
    timestamp: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LedgerEntry":
        output = row["output"]
        return cls(
            rune=_rune_ref(row),
            block_hash=row["block_hash"],
            block_height=row["block_height"],
            tx_index=int(row["tx_index"]),
            event_index=int(row["event_index"]),
            tx_id=row["tx_id"],
            output=int(output) if output is not None else None,
            address=row["address"],
            receiver_address=row["receiver_address"],
            amount=row["amount"],
            operation=row["operation"],
            timestamp=int(row["timestamp"]),
        )


@dataclass(frozen=True)
class Balance:
    """Current holding of one address for one rune."""

    rune: RuneRef
    address: Optional[str]
    balance: str
    total_operations: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Balance":
        return cls(
            rune=_rune_ref(row),
            address=row["address"],
            balance=row["balance"] or "0",
            total_operations=str(row["total_operations"] or 0),
        )


@dataclass(frozen=True)
class ChainTip:
    """Most recently indexed block."""

    block_hash: str
    block_height: str


@dataclass
class Page(Generic[T]):
    """A window of an ordered result set plus the unwindowed match count."""

    total: int
    results: List[T] = field(default_factory=list)


__all__ = [
    "Balance",
    "ChainTip",
    "Etching",
    "LEDGER_OPERATIONS",
    "LedgerEntry",
    "MintTerms",
    "Page",
    "RuneRef",
    "SupplySnapshot",
]
