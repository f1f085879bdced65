from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..codegen.writer import write_artifact
from ..errors import DataCoercionError, MasterDataError, SchemaShapeError
from ..models.config_models import asset_file_path
from ..models.grid import Workbook
from ..models.processing_result import ArtifactResult
from ..models.schema import DataRow, FieldDefinition, SchemaDescription
from ..models.sheet_process import SheetProcess
from ..schema.interpreter import interpret_workbook
from ..schema.types import PRIMITIVE_TYPES, is_text_type

"""Exporter: schema rows -> typed records -> persisted YAML asset per sheet.

Export is all-or-nothing per sheet: the first row that cannot be coerced
aborts that sheet (its asset keeps its last-good content) while the other
sheets of the workbook carry on.

Asset layout::

    name: Character
    record_type: CharacterVO
    list:
    - id: 101
      type: 2          # enum members are stored by value
      assetName: dragon
"""

__all__ = [
    "ExportedSheet",
    "WorkbookExport",
    "coerce_value",
    "build_records",
    "render_asset",
    "export_sheet",
    "export_workbook",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedSheet:
    description: SchemaDescription
    records: list[dict[str, Any]]
    artifact: ArtifactResult


@dataclass
class WorkbookExport:
    sheets: list[SheetProcess] = field(default_factory=list)
    errors: list[MasterDataError] = field(default_factory=list)


def _coercion_error(description: SchemaDescription, f: FieldDefinition, row: DataRow, message: str) -> DataCoercionError:
    return DataCoercionError(
        message,
        file=description.schema_name,
        sheet=description.sheet_name,
        row=row.row_number,
        column=f.column,
    )


def coerce_value(description: SchemaDescription, f: FieldDefinition, row: DataRow) -> Any:
    """Coerce one raw cell string into the field's declared type.

    Text fields take the raw value verbatim (empty allowed); enum fields map
    the member label to its integer value; everything else goes through the
    canonical parser of the declared type and must not be empty.

    Raises:
        DataCoercionError: empty non-text value, unparseable value or an
            unknown enum label.
    """
    raw = row.values.get(f.name, "")
    if f.enum is None and is_text_type(f.declared_type):
        return raw

    text = raw.strip()
    if not text:
        raise _coercion_error(description, f, row, f"value required for {f.declared_type} field '{f.name}'")

    if f.enum is not None:
        member = f.enum.member(text)
        if member is None:
            raise _coercion_error(
                description,
                f,
                row,
                f"'{text}' is not a member of {f.enum.name} (expected one of {', '.join(f.enum.labels)})",
            )
        return member.value

    primitive = PRIMITIVE_TYPES[f.declared_type]
    try:
        return primitive.parse(text)
    except ValueError as e:
        raise _coercion_error(
            description, f, row, f"cannot parse '{text}' as {f.declared_type} for field '{f.name}': {e}"
        ) from e


def build_records(description: SchemaDescription) -> list[dict[str, Any]]:
    """Coerce every data row of a sheet, in row order."""
    records: list[dict[str, Any]] = []
    for row in description.rows:
        records.append({f.name: coerce_value(description, f, row) for f in description.fields})
    return records


def render_asset(description: SchemaDescription, records: list[dict[str, Any]]) -> str:
    payload = {
        "name": description.sheet_name,
        "record_type": f"{description.sheet_name}VO",
        "list": records,
    }
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True, default_flow_style=False)


def export_sheet(description: SchemaDescription, asset_root: Path) -> ExportedSheet:
    """Coerce and persist one sheet. Nothing is written when a row fails."""
    records = build_records(description)
    path = asset_file_path(asset_root, description.schema_name, description.sheet_name)
    artifact = write_artifact(path, render_asset(description, records))
    logger.debug(
        "exported schema=%s sheet=%s records=%d status=%s",
        description.schema_name,
        description.sheet_name,
        len(records),
        artifact.status.value,
    )
    return ExportedSheet(description, records, artifact)


def export_workbook(
    workbook: Workbook,
    asset_root: Path,
    sheets: Collection[str] | None = None,
) -> WorkbookExport:
    """Export every sheet of a workbook (or only the named ones).

    Sheet level failures (shape or coercion) are collected, never raised, so
    sibling sheets still export.
    """
    result = WorkbookExport()
    descriptions, shape_errors = interpret_workbook(workbook)
    for error in shape_errors:
        if sheets is not None and error.sheet not in sheets:
            continue
        result.errors.append(error)
        result.sheets.append(SheetProcess(workbook.name, error.sheet, error=str(error)))

    for description in descriptions:
        if sheets is not None and description.sheet_name not in sheets:
            continue
        try:
            exported = export_sheet(description, asset_root)
        except (DataCoercionError, SchemaShapeError) as e:
            result.errors.append(e)
            result.sheets.append(SheetProcess(workbook.name, description.sheet_name, error=str(e)))
            continue
        result.sheets.append(
            SheetProcess(
                workbook.name,
                description.sheet_name,
                artifacts=[exported.artifact],
                records=len(exported.records),
            )
        )

    if sheets is not None:
        found = set(workbook.sheet_names)
        for name in sheets:
            if name not in found:
                error = SchemaShapeError("sheet not found in schema file", file=workbook.name, sheet=name)
                result.errors.append(error)
                result.sheets.append(SheetProcess(workbook.name, name, error=str(error)))

    # シート順 (ワークブック上の順序) に並べ直す
    order = {name: i for i, name in enumerate(workbook.sheet_names)}
    result.sheets.sort(key=lambda s: order.get(s.sheet_name, len(order)))
    return result
