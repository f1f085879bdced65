from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

"""Grid model: a decoded spreadsheet as named sheets of (row, column, value) cells.

Pure data structure. The reader (masterdata.excel.reader) produces it, the
schema interpreter consumes it. Rows and columns are 0-based and are not
assumed contiguous or bounded.
"""

__all__ = [
    "Cell",
    "Sheet",
    "Workbook",
]


@dataclass(frozen=True)
class Cell:
    row: int
    column: int
    value: str


@dataclass(frozen=True)
class Sheet:
    """One named table of a schema file.

    At most one Cell exists per (row, column); construction rejects duplicates.
    """

    name: str
    cells: tuple[Cell, ...] = ()
    _index: dict[tuple[int, int], Cell] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index = self._index
        for cell in self.cells:
            key = (cell.row, cell.column)
            if key in index:
                raise ValueError(
                    f"sheet '{self.name}' has more than one cell at row={cell.row} column={cell.column}"
                )
            index[key] = cell

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]]) -> Sheet:
        """Build a sheet from a list of rows; None is stored as an empty string."""
        cells = []
        for r, values in enumerate(rows):
            for c, value in enumerate(values):
                cells.append(Cell(r, c, "" if value is None else str(value)))
        return cls(name=name, cells=tuple(cells))

    def get_cell(self, row: int, column: int) -> Cell | None:
        return self._index.get((row, column))

    def get_value(self, row: int, column: int) -> str:
        """Cell value at the coordinate, or an empty string when absent."""
        cell = self._index.get((row, column))
        return cell.value if cell is not None else ""

    def get_row(self, row: int) -> list[Cell]:
        """Cells of a row ordered by column ascending."""
        return sorted((c for c in self.cells if c.row == row), key=lambda c: c.column)

    def get_column(self, column: int) -> list[Cell]:
        """Cells of a column ordered by row ascending."""
        return sorted((c for c in self.cells if c.column == column), key=lambda c: c.row)

    def row_indices(self) -> list[int]:
        return sorted({c.row for c in self.cells})

    @property
    def max_row(self) -> int:
        return max((c.row for c in self.cells), default=-1)


@dataclass(frozen=True)
class Workbook:
    """A decoded schema file. name is the file name without extension."""

    name: str
    path: Path
    sheets: tuple[Sheet, ...] = ()

    @classmethod
    def from_sheets(cls, path: Path, sheets: Iterable[Sheet]) -> Workbook:
        return cls(name=Path(path).stem, path=Path(path), sheets=tuple(sheets))

    def get_sheet(self, name: str) -> Sheet | None:
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None

    @property
    def sheet_names(self) -> list[str]:
        return [s.name for s in self.sheets]
