from __future__ import annotations

import keyword
import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from ..models.schema import EnumDefinition, EnumMember

"""Declared type names, their Python annotations and canonical parsers.

Schema sheets declare field types with the names game-data designers are used
to (int, uint, float, string...). Each name maps to the Python annotation the
generated record uses and to the parser the exporter coerces raw cell text
with. Enum types are declared per sheet (Row 2) and handled separately.
"""

__all__ = [
    "PrimitiveType",
    "PRIMITIVE_TYPES",
    "TEXT_TYPES",
    "EnumBodyError",
    "is_primitive",
    "is_text_type",
    "is_identifier",
    "parse_enum_body",
    "parse_bool",
]


@dataclass(frozen=True)
class PrimitiveType:
    name: str  # declared name
    annotation: str  # python annotation used in generated code
    parse: Callable[[str], object]
    default: str  # python literal of the default value


def _int_parser(lo: int | None, hi: int | None) -> Callable[[str], int]:
    def parse(text: str) -> int:
        value = int(text.strip())
        if lo is not None and value < lo:
            raise ValueError(f"{value} is less than {lo}")
        if hi is not None and value > hi:
            raise ValueError(f"{value} is greater than {hi}")
        return value
    return parse


def _parse_float(text: str) -> float:
    value = float(text.strip())
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {text!r}")
    return value


_TRUE = {"true", "1"}
_FALSE = {"false", "0"}


def parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"invalid literal for bool: {text!r}")


def _parse_text(text: str) -> str:
    return text


PRIMITIVE_TYPES: dict[str, PrimitiveType] = {
    t.name: t
    for t in (
        PrimitiveType("int", "int", _int_parser(-(2**31), 2**31 - 1), "0"),
        PrimitiveType("uint", "int", _int_parser(0, 2**32 - 1), "0"),
        PrimitiveType("long", "int", _int_parser(-(2**63), 2**63 - 1), "0"),
        PrimitiveType("ulong", "int", _int_parser(0, 2**64 - 1), "0"),
        PrimitiveType("short", "int", _int_parser(-(2**15), 2**15 - 1), "0"),
        PrimitiveType("ushort", "int", _int_parser(0, 2**16 - 1), "0"),
        PrimitiveType("byte", "int", _int_parser(0, 255), "0"),
        PrimitiveType("sbyte", "int", _int_parser(-128, 127), "0"),
        PrimitiveType("float", "float", _parse_float, "0.0"),
        PrimitiveType("double", "float", _parse_float, "0.0"),
        PrimitiveType("decimal", "float", _parse_float, "0.0"),
        PrimitiveType("bool", "bool", parse_bool, "False"),
        PrimitiveType("string", "str", _parse_text, '""'),
        PrimitiveType("str", "str", _parse_text, '""'),
    )
}

TEXT_TYPES = frozenset({"string", "str"})


def is_primitive(type_name: str) -> bool:
    return type_name in PRIMITIVE_TYPES


def is_text_type(type_name: str) -> bool:
    return type_name in TEXT_TYPES


def is_identifier(name: str) -> bool:
    """Usable as a Python attribute / class / module name."""
    return name.isidentifier() and not keyword.iskeyword(name)


class EnumBodyError(ValueError):
    pass


_MEMBER_RE = re.compile(r"^(?P<name>[^\s=,]+)\s*(?:=\s*(?P<value>[^,]+?))?\s*,?$")


def _strip_comment(line: str) -> str:
    for marker in ("//", "#"):
        pos = line.find(marker)
        if pos >= 0:
            line = line[:pos]
    return line.strip()


def _parse_enum_value(text: str) -> int:
    """Decimal (leading zeros allowed, ``010`` == 10) or ``0x`` hexadecimal."""
    digits = text.lstrip("+-")
    if digits[:2].lower() == "0x":
        return int(text, 16)
    return int(text, 10)


def parse_enum_body(name: str, body: str) -> EnumDefinition:
    """Parse a Row-2 enum body into an EnumDefinition.

    One member per line: ``Name``, ``Name,`` or ``Name = 3,``. Values without
    an explicit number continue from the previous one (first member = 0).
    Values are decimal or ``0x`` hexadecimal. Member names must not start
    with an underscore (IntEnum would not treat them as members).
    Blank lines and ``//`` / ``#`` comments are ignored. A single line holding
    several comma separated members is accepted as well.

    Raises:
        EnumBodyError: invalid member name, non integer value, duplicates or
            an empty body.
    """
    entries: list[str] = []
    for raw_line in body.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        line = _strip_comment(raw_line)
        if not line:
            continue
        entries.extend(part.strip() for part in line.split(",") if part.strip())

    members: list[EnumMember] = []
    seen: set[str] = set()
    next_value = 0
    for entry in entries:
        m = _MEMBER_RE.match(entry)
        if m is None:
            raise EnumBodyError(f"enum '{name}': cannot parse member {entry!r}")
        member_name = m.group("name")
        if not is_identifier(member_name) or member_name.startswith("_"):
            raise EnumBodyError(f"enum '{name}': invalid member name {member_name!r}")
        if member_name in seen:
            raise EnumBodyError(f"enum '{name}': duplicate member {member_name!r}")
        raw_value = m.group("value")
        if raw_value is not None:
            try:
                value = _parse_enum_value(raw_value.strip())
            except ValueError:
                raise EnumBodyError(
                    f"enum '{name}': member {member_name!r} has non integer value {raw_value!r}"
                ) from None
        else:
            value = next_value
        members.append(EnumMember(member_name, value))
        seen.add(member_name)
        next_value = value + 1

    if not members:
        raise EnumBodyError(f"enum '{name}': body defines no members")
    return EnumDefinition(name=name, members=tuple(members))
