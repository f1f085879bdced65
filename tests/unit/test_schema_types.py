from __future__ import annotations

import pytest

from masterdata.models.schema import EnumMember
from masterdata.schema.types import (
    PRIMITIVE_TYPES,
    EnumBodyError,
    is_identifier,
    parse_bool,
    parse_enum_body,
)


def test_enum_body_one_member_per_line_with_implicit_values():
    enum = parse_enum_body("Element", "Fire\nWater,\nWind = 5,\nEarth")
    assert enum.name == "Element"
    assert enum.members == (
        EnumMember("Fire", 0),
        EnumMember("Water", 1),
        EnumMember("Wind", 5),
        EnumMember("Earth", 6),
    )


def test_enum_body_ignores_comments_and_blank_lines():
    enum = parse_enum_body("Rank", "// ranks\nLow = 1  # lowest\n\nHigh\r\n")
    assert enum.labels == ["Low", "High"]
    assert enum.member("High").value == 2


def test_enum_body_accepts_comma_separated_single_line():
    assert parse_enum_body("Abc", "A, B, C").labels == ["A", "B", "C"]


def test_enum_body_hex_value():
    assert parse_enum_body("Flag", "Big = 0x10").member("Big").value == 16
    assert parse_enum_body("Flag", "Neg = -0X1f").member("Neg").value == -31


def test_enum_body_leading_zero_is_decimal():
    enum = parse_enum_body("Code", "A = 010\nB")
    assert [(m.name, m.value) for m in enum.members] == [("A", 10), ("B", 11)]


@pytest.mark.parametrize(
    "body, message",
    [
        ("", "no members"),
        ("// only a comment", "no members"),
        ("A\nA", "duplicate member"),
        ("1st", "invalid member name"),
        ("class", "invalid member name"),
        ("__Hidden", "invalid member name"),
        ("_x = 1", "invalid member name"),
        ("A = 0b11", "non integer value"),
        ("A = one", "non integer value"),
    ],
)
def test_enum_body_errors(body: str, message: str):
    with pytest.raises(EnumBodyError, match=message):
        parse_enum_body("E", body)


def test_int_kinds_are_range_checked():
    assert PRIMITIVE_TYPES["int"].parse("-5") == -5
    assert PRIMITIVE_TYPES["byte"].parse("255") == 255
    with pytest.raises(ValueError):
        PRIMITIVE_TYPES["byte"].parse("256")
    with pytest.raises(ValueError):
        PRIMITIVE_TYPES["uint"].parse("-1")
    with pytest.raises(ValueError):
        PRIMITIVE_TYPES["int"].parse("1.5")
    assert PRIMITIVE_TYPES["ulong"].parse(str(2**64 - 1)) == 2**64 - 1


def test_float_rejects_non_finite():
    assert PRIMITIVE_TYPES["double"].parse("0.25") == 0.25
    with pytest.raises(ValueError):
        PRIMITIVE_TYPES["float"].parse("inf")
    with pytest.raises(ValueError):
        PRIMITIVE_TYPES["float"].parse("nan")


def test_parse_bool():
    assert parse_bool("TRUE") is True
    assert parse_bool("1") is True
    assert parse_bool(" false ") is False
    assert parse_bool("0") is False
    with pytest.raises(ValueError):
        parse_bool("yes")


def test_text_types_are_verbatim():
    assert PRIMITIVE_TYPES["string"].parse("  spaced  ") == "  spaced  "
    assert PRIMITIVE_TYPES["str"].annotation == "str"


def test_is_identifier():
    assert is_identifier("Character")
    assert is_identifier("_x1")
    assert not is_identifier("1x")
    assert not is_identifier("for")
    assert not is_identifier("has space")
