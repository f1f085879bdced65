from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Every generate/export error is appended as one fixed-schema line so that the
offending schema cell can be located afterwards. row/column are 0-based grid
indices; -1 means "not applicable" (file level or sheet level errors).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Schema file name being processed
        sheet: Sheet name within the file ("<FILE_LEVEL>" for file errors)
        row: Grid row index, -1 when unknown
        column: Grid column index, -1 when unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    column: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        file: str, sheet: str, row: int, column: int, error_type: str, message: str
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            column=column,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_error(error: Exception, *, file: str = "", sheet: str = "") -> ErrorRecord:
        """Build a record from a MasterDataError (or any exception).

        Context carried by the error wins over the file/sheet arguments.
        """
        return ErrorRecord.create(
            file=getattr(error, "file", "") or file,
            sheet=getattr(error, "sheet", "") or sheet or "<FILE_LEVEL>",
            row=getattr(error, "row", -1),
            column=getattr(error, "column", -1),
            error_type=getattr(error, "error_type", "UNEXPECTED_ERROR"),
            message=getattr(error, "message", None) or str(error),
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
