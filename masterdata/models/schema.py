from __future__ import annotations

from dataclasses import dataclass

"""Schema Description model: the typed view of one sheet.

Produced by masterdata.schema.interpreter, consumed by the artifact generator
and the exporter. Transient: recomputed on every run.
"""

__all__ = [
    "EnumMember",
    "EnumDefinition",
    "FieldDefinition",
    "DataRow",
    "SchemaDescription",
]


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: int


@dataclass(frozen=True)
class EnumDefinition:
    """An enum type declared by a Row-2 cell. name is the Row-3 type name."""

    name: str
    members: tuple[EnumMember, ...]

    def member(self, label: str) -> EnumMember | None:
        for m in self.members:
            if m.name == label:
                return m
        return None

    @property
    def labels(self) -> list[str]:
        return [m.name for m in self.members]


@dataclass(frozen=True)
class FieldDefinition:
    name: str  # Row 0
    column: int  # grid column index
    declared_type: str  # Row 3 (enum type name when enum)
    comment: str = ""  # Row 1
    enum: EnumDefinition | None = None  # parsed Row 2
    enum_body: str = ""  # Row 2 raw text

    @property
    def is_enum(self) -> bool:
        return self.enum is not None


@dataclass(frozen=True)
class DataRow:
    row_number: int  # 0-based grid row (first data row = 4)
    values: dict[str, str]  # field name -> raw cell string ("" when absent)


@dataclass(frozen=True)
class SchemaDescription:
    """Parsed, typed representation of one sheet.

    fields keep column order; rows keep row order; fields[0] is the primary key.
    """

    schema_name: str  # schema file name without extension
    sheet_name: str
    fields: tuple[FieldDefinition, ...]
    rows: tuple[DataRow, ...] = ()

    @property
    def key_field(self) -> FieldDefinition:
        return self.fields[0]

    def field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def enums(self) -> list[EnumDefinition]:
        """Enum definitions in column order (one per enum field)."""
        return [f.enum for f in self.fields if f.enum is not None]
