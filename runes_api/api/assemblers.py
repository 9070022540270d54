"""Map stored rows into public response shapes."""

from __future__ import annotations

from typing import Any, Dict

from runes_api.api.schemas import (
    ActivityResponse,
    BalanceResponse,
    EtchingResponse,
    LocationResponse,
    MintTermsResponse,
    RuneDetail,
    SupplyResponse,
)
from runes_api.runes.decimals import parse_integer, render
from runes_api.runes.mintability import is_mintable, mint_percentage
from runes_api.runes.models import Balance, Etching, LedgerEntry, RuneRef


def _render_optional(value: str | None, divisibility: int) -> str | None:
    return render(value, divisibility) if value is not None else None


def _int_optional(value: str | None) -> int | None:
    return parse_integer(value) if value is not None else None


def _rune_detail(rune: RuneRef) -> RuneDetail:
    return RuneDetail(id=rune.id, number=rune.number, name=rune.name, spaced_name=rune.spaced_name)


def _current_supply(etching: Etching) -> int:
    supply = etching.supply
    return parse_integer(etching.premine) + parse_integer(supply.minted) - parse_integer(supply.burned)


def assemble_etching(etching: Etching, chain_tip: str | int | None) -> EtchingResponse:
    """Build the etching detail, including derived supply and mintability.

    With no chain tip the etching's own block height stands in for it.
    """

    divisibility = etching.divisibility
    terms = etching.terms
    supply = etching.supply
    tip = chain_tip if chain_tip is not None else etching.block_height

    return EtchingResponse(
        id=etching.id,
        number=etching.number,
        name=etching.name,
        spaced_name=etching.spaced_name,
        divisibility=divisibility,
        symbol=etching.symbol,
        mint_terms=MintTermsResponse(
            amount=_render_optional(terms.amount, divisibility),
            cap=_render_optional(terms.cap, divisibility),
            height_start=_int_optional(terms.height_start),
            height_end=_int_optional(terms.height_end),
            offset_start=_int_optional(terms.offset_start),
            offset_end=_int_optional(terms.offset_end),
        ),
        supply=SupplyResponse(
            premine=render(etching.premine, divisibility),
            current=render(_current_supply(etching), divisibility),
            minted=render(supply.minted, divisibility),
            total_mints=str(parse_integer(supply.total_mints)),
            burned=render(supply.burned, divisibility),
            total_burns=str(parse_integer(supply.total_burns)),
            mint_percentage=mint_percentage(supply.total_mints, terms.cap),
            mintable=is_mintable(
                terms,
                supply.total_mints,
                tip,
                etching_height=etching.block_height,
                cenotaph=etching.cenotaph,
            ),
        ),
        turbo=etching.turbo,
        location=LocationResponse(
            block_hash=etching.block_hash,
            block_height=parse_integer(etching.block_height),
            tx_index=etching.tx_index,
            tx_id=etching.tx_id,
            timestamp=etching.timestamp,
        ),
    )


def assemble_activity(entry: LedgerEntry) -> ActivityResponse:
    """Build an activity item, leaving out fields that are SQL NULL."""

    location: Dict[str, Any] = {
        "block_hash": entry.block_hash,
        "block_height": parse_integer(entry.block_height),
        "tx_index": entry.tx_index,
        "tx_id": entry.tx_id,
        "timestamp": entry.timestamp,
    }
    if entry.output is not None:
        location["vout"] = entry.output
        location["output"] = f"{entry.tx_id}:{entry.output}"

    item: Dict[str, Any] = {
        "rune": _rune_detail(entry.rune),
        "operation": entry.operation,
        "location": LocationResponse(**location),
    }
    if entry.address is not None:
        item["address"] = entry.address
    if entry.receiver_address is not None:
        item["receiver_address"] = entry.receiver_address
    if entry.amount is not None:
        item["amount"] = render(entry.amount, entry.rune.divisibility)
    return ActivityResponse(**item)


def assemble_balance(balance: Balance) -> BalanceResponse:
    item: Dict[str, Any] = {
        "rune": _rune_detail(balance.rune),
        "balance": render(balance.balance, balance.rune.divisibility),
    }
    if balance.address is not None:
        item["address"] = balance.address
    return BalanceResponse(**item)


__all__ = [
    "assemble_activity",
    "assemble_balance",
    "assemble_etching",
]
