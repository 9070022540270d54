import pytest

from runes_api.runes.decimals import parse, parse_integer, render
from runes_api.runes.errors import ParseError

U128_MAX = str(2**128 - 1)


@pytest.mark.parametrize(
    "raw, divisibility, expected",
    [
        ("1000", 2, "10.00"),
        ("5", 0, "5"),
        ("0", 2, "0.00"),
        ("1", 8, "0.00000001"),
        (U128_MAX, 0, U128_MAX),
        (U128_MAX, 38, "3.40282366920938463463374607431768211455"),
    ],
)
def test_render_uses_exactly_divisibility_fraction_digits(raw, divisibility, expected):
    assert render(raw, divisibility) == expected


def test_render_accepts_python_integers():
    assert render(123456, 3) == "123.456"


def test_parse_recovers_base_units():
    for raw, divisibility in [("1000", 2), ("5", 0), (U128_MAX, 18)]:
        assert parse(render(raw, divisibility), divisibility) == raw


def test_parse_rejects_excess_fraction_digits():
    with pytest.raises(ParseError):
        parse("1.234", 2)


def test_render_rejects_non_integer_literals():
    with pytest.raises(ParseError) as excinfo:
        render("12.5", 2)
    assert excinfo.value.code == "parse_error"

    with pytest.raises(ParseError):
        render("abc", 0)


def test_render_rejects_negative_divisibility():
    with pytest.raises(ValueError):
        render("1", -1)


def test_parse_integer_rejects_booleans():
    with pytest.raises(ParseError):
        parse_integer(True)
    assert parse_integer(" 42 ") == 42
