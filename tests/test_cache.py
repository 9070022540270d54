from runes_api.api.cache import etag_for, parse_if_none_match
from runes_api.runes.models import ChainTip


def test_parse_if_none_match():
    assert parse_if_none_match(None) == []
    assert parse_if_none_match("") == []
    assert parse_if_none_match('"abc"') == ["abc"]
    assert parse_if_none_match('W/"abc", "def" , *') == ["abc", "def", "*"]


def test_etag_is_quoted_block_hash():
    tip = ChainTip(block_hash="00000000deadbeef", block_height="840000")
    assert etag_for(tip) == '"00000000deadbeef"'
