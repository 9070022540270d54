"""Scaled-decimal rendering of protocol integer amounts.

Rune amounts are unsigned integers of up to 128 bits stored as decimal
strings. A rune's ``divisibility`` is the number of fractional digits used
when presenting those amounts to humans, so ``"1000"`` with divisibility 2
renders as ``"10.00"``.
"""

from __future__ import annotations

import re
from decimal import Context, Decimal, InvalidOperation

from runes_api.runes.errors import ParseError

# u128 has 39 digits; divisibility is capped at 38 by the protocol.
_CONTEXT = Context(prec=96)
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+(\.[0-9]+)?$")


def _check_divisibility(divisibility: int) -> int:
    if isinstance(divisibility, bool) or not isinstance(divisibility, int):
        raise ValueError(f"divisibility must be an integer, got {divisibility!r}")
    if divisibility < 0:
        raise ValueError(f"divisibility must be non-negative, got {divisibility}")
    return divisibility


def parse_integer(raw: str | int) -> int:
    """Return ``raw`` as an ``int`` or raise :class:`ParseError`."""

    if isinstance(raw, bool):
        raise ParseError(f"Invalid integer amount {raw!r}", context={"value": raw})
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not _INTEGER_RE.match(text):
        raise ParseError(f"Invalid integer amount {raw!r}", context={"value": raw})
    return int(text)


def render(raw: str | int, divisibility: int) -> str:
    """Render an integer amount with exactly ``divisibility`` fractional digits."""

    places = _check_divisibility(divisibility)
    value = Decimal(parse_integer(raw))
    scaled = value.scaleb(-places, context=_CONTEXT)
    return format(scaled.quantize(Decimal(1).scaleb(-places), context=_CONTEXT), "f")


def parse(rendered: str, divisibility: int) -> str:
    """Invert :func:`render`, returning the base-unit integer string."""

    places = _check_divisibility(divisibility)
    text = str(rendered).strip()
    if not _DECIMAL_RE.match(text):
        raise ParseError(f"Invalid decimal amount {rendered!r}", context={"value": rendered})
    try:
        value = Decimal(text).scaleb(places, context=_CONTEXT)
    except InvalidOperation as exc:  # pragma: no cover - regex guards the input
        raise ParseError(f"Invalid decimal amount {rendered!r}") from exc
    if value != value.to_integral_value(context=_CONTEXT):
        raise ParseError(
            f"{rendered!r} has more than {places} fractional digits",
            context={"value": rendered, "divisibility": places},
        )
    return str(int(value))


__all__ = ["parse", "parse_integer", "render"]
