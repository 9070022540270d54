import pytest

from runes_api.runes.identifiers import (
    MAX_SQL_INTEGER,
    ByBlockHash,
    ByBlockHeight,
    ById,
    ByName,
    ByNumber,
    BySpacedName,
    normalize_tx_id,
    resolve_block,
    resolve_rune,
)

HASH = "00000000000000000000c9787573a1f1775a2b56b403a2d0c7957e9a5bc754bb"


@pytest.mark.parametrize(
    "identifier, expected",
    [
        ("840000:1", ById("840000:1")),
        ("1", ByNumber(1)),
        ("ZZZZZFEHUZZZZZ", ByName("ZZZZZFEHUZZZZZ")),
        ("Z•Z•Z•Z•Z•FEHU", BySpacedName("Z•Z•Z•Z•Z•FEHU")),
        ("Z•FEHU", BySpacedName("Z•FEHU")),
    ],
)
def test_resolve_rune(identifier, expected):
    assert resolve_rune(identifier) == expected


@pytest.mark.parametrize(
    "identifier",
    ["UNCOMMON GOODS", "UNCOMMON•GOODS", "AB•CD", "lowercase", "•LEADING", "Z•", "Z••Z"],
)
def test_unrecognised_identifiers_fall_through_to_literal_id(identifier):
    assert resolve_rune(identifier) == ById(identifier)


def test_numbers_beyond_bigint_fall_through():
    too_big = str(MAX_SQL_INTEGER + 1)
    assert resolve_rune(too_big) == ById(too_big)
    assert resolve_rune(str(MAX_SQL_INTEGER)) == ByNumber(MAX_SQL_INTEGER)


def test_resolve_block():
    assert resolve_block("840000") == ByBlockHeight(840000)
    assert resolve_block(HASH) == ByBlockHash(HASH)
    assert resolve_block("0x" + HASH.upper()) == ByBlockHash(HASH)


def test_normalize_tx_id():
    assert normalize_tx_id("0x" + "AB" * 32) == "ab" * 32
    assert normalize_tx_id("ab" * 32) == "ab" * 32
