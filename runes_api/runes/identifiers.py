"""Classify user supplied identifiers into typed lookup filters.

Rune identifiers arrive as free-form path segments. They may name a rune by
its compound id (``840000:1``), its sequential number (``1``), its plain
name (``ZZZZZFEHUZZZZZ``) or its spaced name (``Z•Z•Z•Z•Z•FEHU``). The
resolver picks the first matching form and returns a filter value; the
store translates filters into bound SQL parameters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

SPACER = "•"

RUNE_ID_RE = re.compile(r"^[0-9]+:[0-9]+$")
RUNE_NUMBER_RE = re.compile(r"^[0-9]+$")
RUNE_NAME_RE = re.compile(r"^[A-Z]+$")
RUNE_SPACED_NAME_RE = re.compile(rf"^[A-Z]({SPACER}[A-Z]+)+$")

BLOCK_HEIGHT_RE = re.compile(r"^[0-9]+$")
BLOCK_HASH_RE = re.compile(r"^(0x)?[0]{8}[a-fA-F0-9]{56}$")
TX_ID_RE = re.compile(r"^(0x)?[a-fA-F0-9]{64}$")

# Larger values cannot be bound as BIGINT and cannot match any row.
MAX_SQL_INTEGER = 2**63 - 1


@dataclass(frozen=True)
class ById:
    value: str


@dataclass(frozen=True)
class ByNumber:
    value: int


@dataclass(frozen=True)
class ByName:
    value: str


@dataclass(frozen=True)
class BySpacedName:
    value: str


@dataclass(frozen=True)
class ByAddress:
    value: str


@dataclass(frozen=True)
class ByBlockHeight:
    value: int


@dataclass(frozen=True)
class ByBlockHash:
    value: str


@dataclass(frozen=True)
class ByTxId:
    value: str


@dataclass(frozen=True)
class And:
    left: "Filter"
    right: "Filter"


Filter = Union[
    ById, ByNumber, ByName, BySpacedName, ByAddress, ByBlockHeight, ByBlockHash, ByTxId, And
]
RuneFilter = Union[ById, ByNumber, ByName, BySpacedName]
BlockFilter = Union[ByBlockHeight, ByBlockHash]


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def resolve_rune(identifier: str) -> RuneFilter:
    """Return the filter addressing ``identifier``.

    Unrecognised identifiers fall through to a literal compound-id match,
    which simply finds nothing.
    """

    if RUNE_ID_RE.match(identifier):
        return ById(identifier)
    if RUNE_NUMBER_RE.match(identifier) and int(identifier) <= MAX_SQL_INTEGER:
        return ByNumber(int(identifier))
    if RUNE_NAME_RE.match(identifier):
        return ByName(identifier)
    if RUNE_SPACED_NAME_RE.match(identifier):
        return BySpacedName(identifier)
    return ById(identifier)


def resolve_block(identifier: str) -> BlockFilter:
    """Digits address a block height, anything else a block hash."""

    if BLOCK_HEIGHT_RE.match(identifier) and int(identifier) <= MAX_SQL_INTEGER:
        return ByBlockHeight(int(identifier))
    return ByBlockHash(_strip_hex_prefix(identifier).lower())


def normalize_tx_id(tx_id: str) -> str:
    return _strip_hex_prefix(tx_id).lower()


__all__ = [
    "And",
    "BLOCK_HASH_RE",
    "BlockFilter",
    "ByAddress",
    "ByBlockHash",
    "ByBlockHeight",
    "ById",
    "ByName",
    "ByNumber",
    "BySpacedName",
    "ByTxId",
    "Filter",
    "RuneFilter",
    "SPACER",
    "TX_ID_RE",
    "normalize_tx_id",
    "resolve_block",
    "resolve_rune",
]
