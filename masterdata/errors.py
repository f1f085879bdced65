from __future__ import annotations

"""Error kinds raised by the schema compiler and exporter.

File level and sheet level errors never stop sibling files/sheets; the
orchestrator catches them, records an ErrorRecord and moves on. Every error
carries enough context (file, sheet, row, column) to locate the offending
cell. Row and column are 0-based grid indices, -1 when not applicable.
"""

__all__ = [
    "MasterDataError",
    "SchemaFileReadError",
    "SchemaShapeError",
    "DataCoercionError",
]


class MasterDataError(Exception):
    """Base class for all masterdata errors."""

    error_type = "MASTERDATA_ERROR"

    def __init__(
        self,
        message: str,
        *,
        file: str = "",
        sheet: str = "",
        row: int = -1,
        column: int = -1,
    ) -> None:
        self.message = message
        self.file = file
        self.sheet = sheet
        self.row = row
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.file:
            location.append(f"file={self.file}")
        if self.sheet:
            location.append(f"sheet={self.sheet}")
        if self.row >= 0:
            location.append(f"row={self.row}")
        if self.column >= 0:
            location.append(f"column={self.column}")
        if not location:
            return self.message
        return f"{self.message} ({' '.join(location)})"


class SchemaFileReadError(MasterDataError):
    """The schema file could not be decoded. Aborts that file only."""

    error_type = "SCHEMA_FILE_READ_ERROR"


class SchemaShapeError(MasterDataError):
    """Missing name/type cell, bad enum body, unknown type... Aborts the sheet."""

    error_type = "SCHEMA_SHAPE_ERROR"


class DataCoercionError(MasterDataError):
    """A data cell cannot be parsed into its declared type. Aborts the sheet export."""

    error_type = "DATA_COERCION_ERROR"
