"""Derive whether a rune can currently be minted."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, localcontext

from runes_api.runes.decimals import parse_integer
from runes_api.runes.models import MintTerms

_PERCENT_QUANTUM = Decimal("0.0001")
ZERO_PERCENTAGE = "0.0000"


def _int_or_none(value: str | int | None) -> int | None:
    if value is None:
        return None
    return parse_integer(value)


def is_mintable(
    terms: MintTerms,
    total_mints: str | int,
    chain_tip: str | int,
    *,
    etching_height: str | int,
    cenotaph: bool = False,
) -> bool:
    """Return ``True`` when a mint at ``chain_tip`` would be accepted.

    Every present bound is checked independently; a missing bound never
    disqualifies. Heights are compared as Python integers so values wider
    than 64 bits stay exact.
    """

    if terms.amount is None or cenotaph:
        return False

    tip = parse_integer(chain_tip)
    mints = parse_integer(total_mints)
    height = parse_integer(etching_height)

    cap = _int_or_none(terms.cap)
    if cap is not None and mints >= cap:
        return False

    height_start = _int_or_none(terms.height_start)
    if height_start is not None and tip < height_start:
        return False

    height_end = _int_or_none(terms.height_end)
    if height_end is not None and tip > height_end:
        return False

    offset_start = _int_or_none(terms.offset_start)
    if offset_start is not None and tip < height + offset_start:
        return False

    offset_end = _int_or_none(terms.offset_end)
    if offset_end is not None and tip > height + offset_end:
        return False

    return True


def mint_percentage(total_mints: str | int, cap: str | int | None) -> str:
    """Return ``total_mints / cap * 100`` with four fractional digits."""

    cap_value = _int_or_none(cap)
    if not cap_value:
        return ZERO_PERCENTAGE
    with localcontext() as ctx:
        ctx.prec = 96
        ratio = Decimal(parse_integer(total_mints)) * 100 / Decimal(cap_value)
        return format(ratio.quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_UP), "f")


__all__ = ["ZERO_PERCENTAGE", "is_mintable", "mint_percentage"]
