from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.grid import Cell, Sheet, Workbook

"""Schema file reader: .xlsx -> Workbook grid.

pandas (openpyxl engine) does the actual decoding; this module only turns
the raw DataFrames into the (row, column) -> string grid the interpreter
consumes. Reading never raises for a broken file: try_read returns a
ReadResult with a human readable error instead.
"""

__all__ = [
    "ReadResult",
    "try_read",
    "read_workbook",
    "scan_schema_files",
    "cell_to_string",
]

SCHEMA_FILE_SUFFIX = ".xlsx"
LOCK_FILE_PREFIX = "~$"  # Excel が開いている間に作るロックファイル


@dataclass(frozen=True)
class ReadResult:
    success: bool
    workbook: Workbook | None
    error: str = ""


def cell_to_string(value: Any) -> str:
    """Normalize one decoded cell value to its textual form.

    Integral floats lose the trailing '.0' (pandas reads numeric columns with
    blanks as float64), booleans become 'True'/'False', NaN becomes ''.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return value.replace("\r\n", "\n").replace("\r", "\n")
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    # numpy scalars (int64, bool_) -> python scalars
    if hasattr(value, "item"):
        return cell_to_string(value.item())
    return str(value)


def _frame_to_sheet(name: str, df: pd.DataFrame) -> Sheet:
    cells: list[Cell] = []
    for r, raw in enumerate(df.itertuples(index=False, name=None)):
        for c, value in enumerate(raw):
            cells.append(Cell(r, c, cell_to_string(value)))
    return Sheet(name=name, cells=tuple(cells))


def read_workbook(path: Path) -> Workbook:
    """Read every sheet of an .xlsx file into a Workbook.

    Raises whatever pandas/openpyxl raise for unreadable files; callers that
    need the non-raising contract use try_read().
    """
    sheets: list[Sheet] = []
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        for name in xls.sheet_names:
            # ヘッダなし / NA 変換なしで生読み (セル文字列をそのまま保持)
            df = xls.parse(name, header=None, keep_default_na=False, na_values=[], dtype=object)
            sheets.append(_frame_to_sheet(str(name), df))
    return Workbook.from_sheets(path, sheets)


def try_read(path: Path) -> ReadResult:
    """Try to read a schema file.

    Returns:
        ReadResult(success=True, workbook) on success, otherwise
        ReadResult(success=False, None, error) with the decoder's message.
    """
    path = Path(path)
    if not path.exists():
        return ReadResult(False, None, f"schema file not found: {path}")
    try:
        return ReadResult(True, read_workbook(path))
    except Exception as e:  # decoder errors are reported, never raised
        return ReadResult(False, None, f"failed to read {path.name}: {type(e).__name__}: {e}")


def scan_schema_files(directory: Path) -> list[Path]:
    """List .xlsx schema files (non-recursive, sorted, lock files skipped)."""
    directory = Path(directory)
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix == SCHEMA_FILE_SUFFIX and not p.name.startswith(LOCK_FILE_PREFIX)
    )
