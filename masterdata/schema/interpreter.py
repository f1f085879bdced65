from __future__ import annotations

import logging
from enum import IntEnum

from ..errors import SchemaShapeError
from ..models.grid import Sheet, Workbook
from ..models.schema import DataRow, EnumDefinition, FieldDefinition, SchemaDescription
from .types import EnumBodyError, is_identifier, is_primitive, parse_enum_body

"""Schema interpreter: one Sheet grid -> SchemaDescription.

Fixed row convention of a schema sheet::

        A            | B ~
    0:  key name     | field name     (must be non-empty)
    1:  any comment  | any comment    (optional)
    2:               | enum define    (optional, marks an enum column)
    3:  key type     | field type     (must be non-empty)
    4~: key value    | value          (may be empty only for string fields)

Column A (0) is the primary key.
"""

__all__ = [
    "RowSettings",
    "KEY_COLUMN",
    "collect_enums",
    "interpret_sheet",
    "interpret_workbook",
]

logger = logging.getLogger(__name__)


class RowSettings(IntEnum):
    """Meaning of each header row."""
    KEY_NAME = 0
    COMMENT = 1
    ENUM_DEFINE = 2
    TYPE = 3
    VALUE = 4


KEY_COLUMN = 0

# 生成される VO の中で型名 / メソッド名と衝突するフィールド名
RESERVED_FIELD_NAMES = frozenset({"int", "float", "bool", "str", "get_key"})


def _shape_error(schema_name: str, sheet: Sheet, message: str, column: int = -1, row: int = -1) -> SchemaShapeError:
    return SchemaShapeError(message, file=schema_name, sheet=sheet.name, row=row, column=column)


def _populated_columns(sheet: Sheet, row: int) -> list[int]:
    return [c.column for c in sheet.get_row(row) if c.value.strip()]


def interpret_sheet(
    sheet: Sheet,
    schema_name: str,
    known_enums: dict[str, EnumDefinition] | None = None,
) -> SchemaDescription:
    """Interpret one sheet under the fixed row convention.

    Args:
        sheet: decoded grid of one sheet
        schema_name: schema file name without extension (for messages/paths)
        known_enums: enums declared anywhere in the same schema file; a
            field may use one of them as its type without repeating the body.

    Raises:
        SchemaShapeError: missing key column, name without type (or vice
            versa), invalid identifiers, bad enum body, unknown field type.
    """
    known_enums = known_enums or {}
    if not is_identifier(sheet.name):
        raise _shape_error(schema_name, sheet, f"sheet name {sheet.name!r} is not a valid identifier")

    name_columns = _populated_columns(sheet, RowSettings.KEY_NAME)
    type_columns = _populated_columns(sheet, RowSettings.TYPE)

    if KEY_COLUMN not in name_columns:
        raise _shape_error(
            schema_name, sheet, "primary key field name is missing", column=KEY_COLUMN, row=RowSettings.KEY_NAME
        )
    for column in name_columns:
        if column not in type_columns:
            raise _shape_error(
                schema_name,
                sheet,
                f"field '{sheet.get_value(RowSettings.KEY_NAME, column).strip()}' has no type",
                column=column,
                row=RowSettings.TYPE,
            )
    for column in type_columns:
        if column not in name_columns:
            raise _shape_error(
                schema_name, sheet, "type declared without a field name", column=column, row=RowSettings.KEY_NAME
            )

    fields: list[FieldDefinition] = []
    seen_names: set[str] = set()
    local_enums: dict[str, EnumDefinition] = {}
    for column in name_columns:
        name = sheet.get_value(RowSettings.KEY_NAME, column).strip()
        declared_type = sheet.get_value(RowSettings.TYPE, column).strip()
        comment = sheet.get_value(RowSettings.COMMENT, column).strip()
        enum_body = sheet.get_value(RowSettings.ENUM_DEFINE, column)

        if not is_identifier(name):
            raise _shape_error(
                schema_name, sheet, f"field name {name!r} is not a valid identifier", column=column, row=RowSettings.KEY_NAME
            )
        if name in seen_names:
            raise _shape_error(schema_name, sheet, f"duplicate field name {name!r}", column=column, row=RowSettings.KEY_NAME)
        if name in RESERVED_FIELD_NAMES:
            raise _shape_error(schema_name, sheet, f"field name {name!r} is reserved", column=column, row=RowSettings.KEY_NAME)
        seen_names.add(name)

        enum: EnumDefinition | None = None
        if enum_body.strip():
            if not is_identifier(declared_type) or is_primitive(declared_type):
                raise _shape_error(
                    schema_name,
                    sheet,
                    f"enum type name {declared_type!r} must be a non-primitive identifier",
                    column=column,
                    row=RowSettings.TYPE,
                )
            try:
                enum = parse_enum_body(declared_type, enum_body)
            except EnumBodyError as e:
                raise _shape_error(schema_name, sheet, str(e), column=column, row=RowSettings.ENUM_DEFINE) from e
            previous = local_enums.get(declared_type)
            if previous is not None and previous != enum:
                raise _shape_error(
                    schema_name,
                    sheet,
                    f"enum {declared_type!r} is declared twice with different members",
                    column=column,
                    row=RowSettings.ENUM_DEFINE,
                )
            local_enums[declared_type] = enum
        elif not is_primitive(declared_type):
            # 同じファイル内の別シート / 同シート内で定義済みの enum を型として参照
            enum = local_enums.get(declared_type) or known_enums.get(declared_type)
            if enum is None:
                raise _shape_error(
                    schema_name, sheet, f"unknown field type {declared_type!r}", column=column, row=RowSettings.TYPE
                )
            enum_body = ""

        fields.append(
            FieldDefinition(
                name=name,
                column=column,
                declared_type=declared_type,
                comment=comment,
                enum=enum,
                enum_body=enum_body,
            )
        )

    enum_names = {f.enum.name for f in fields if f.enum is not None}
    for f in fields:
        if f.name in enum_names:
            raise _shape_error(
                schema_name,
                sheet,
                f"field name {f.name!r} collides with an enum type name",
                column=f.column,
                row=RowSettings.KEY_NAME,
            )

    rows: list[DataRow] = []
    for row in sheet.row_indices():
        if row < RowSettings.VALUE:
            continue
        values = {f.name: sheet.get_value(row, f.column) for f in fields}
        if not any(v.strip() for v in values.values()):
            continue
        rows.append(DataRow(row_number=row, values=values))

    logger.debug(
        "interpreted schema=%s sheet=%s fields=%d rows=%d", schema_name, sheet.name, len(fields), len(rows)
    )
    return SchemaDescription(
        schema_name=schema_name,
        sheet_name=sheet.name,
        fields=tuple(fields),
        rows=tuple(rows),
    )


def collect_enums(workbook: Workbook) -> dict[str, EnumDefinition]:
    """Every enum declared anywhere in the workbook, by type name.

    Enums share one namespace per schema file, so a sheet may use an enum
    declared by any sibling regardless of sheet order or of whether the
    declaring sheet is otherwise valid. The first declaration in sheet/column
    order wins; bodies that do not parse are left for interpret_sheet to
    report.
    """
    enums: dict[str, EnumDefinition] = {}
    for sheet in workbook.sheets:
        for column in _populated_columns(sheet, RowSettings.ENUM_DEFINE):
            declared_type = sheet.get_value(RowSettings.TYPE, column).strip()
            if declared_type in enums or not is_identifier(declared_type) or is_primitive(declared_type):
                continue
            try:
                enums[declared_type] = parse_enum_body(declared_type, sheet.get_value(RowSettings.ENUM_DEFINE, column))
            except EnumBodyError:
                continue
    return enums


def interpret_workbook(
    workbook: Workbook,
) -> tuple[list[SchemaDescription], list[SchemaShapeError]]:
    """Interpret every sheet of a workbook, isolating failures per sheet.

    Enums are collected from all sheets first (see collect_enums). A sheet
    declaring an enum name again with different members fails.

    Returns:
        (descriptions in sheet order, errors of the sheets that failed)
    """
    descriptions: list[SchemaDescription] = []
    errors: list[SchemaShapeError] = []
    file_enums = collect_enums(workbook)
    for sheet in workbook.sheets:
        try:
            description = interpret_sheet(sheet, workbook.name, file_enums)
            for f in description.fields:
                if f.enum is None or not f.enum_body:
                    continue
                if file_enums.get(f.enum.name) != f.enum:
                    raise _shape_error(
                        workbook.name,
                        sheet,
                        f"enum {f.enum.name!r} conflicts with another declaration in this file",
                        column=f.column,
                        row=RowSettings.ENUM_DEFINE,
                    )
        except SchemaShapeError as e:
            logger.debug("schema shape error: %s", e)
            errors.append(e)
            continue
        descriptions.append(description)
    return descriptions, errors
