from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for generate/export runs (TTY only).

A single tqdm bar counts schema files and keeps a running
``ok=.. failed=..`` postfix; inside a file, one printed line per sheet reports
what the sheet produced (modules for generate, records for export). Non-TTY
output (CI, pipes, tests) gets neither, only the log lines.
"""

__all__ = [
    "ProgressTracker",
    "SheetProgressIndicator",
    "is_tty_enabled",
]

OK_MARK = "✓"
NG_MARK = "✗"


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Schema file progress bar with success/failure counters."""

    def __init__(self, total_files: int, *, description: str = "Processing schema files") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.succeeded = 0
        self.failed = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, success: bool = True, **extra: Any) -> None:
        """Count the file and refresh the bar.

        Args:
            success: whether every sheet of the file succeeded
            **extra: additional postfix values (e.g. records=120)
        """
        if success:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.set_postfix(ok=self.succeeded, failed=self.failed, **extra)
            self.pbar.set_description(self.description)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class SheetProgressIndicator:
    """``  Sheet 2/3: Item - 3 modules ✓`` lines for one schema file."""

    def __init__(self, file_name: str, total_sheets: int, *, unit: str = "records") -> None:
        self.file_name = file_name
        self.total_sheets = total_sheets
        self.unit = unit
        self.current_sheet = 0
        self.enabled = is_tty_enabled()

    def start_sheet(self, sheet_name: str) -> None:
        self.current_sheet += 1
        if self.enabled:
            print(f"  Sheet {self.current_sheet}/{self.total_sheets}: {sheet_name}", end="", flush=True)

    def finish_sheet(self, success: bool = True, count: int = 0) -> None:
        if not self.enabled:
            return
        mark = OK_MARK if success else NG_MARK
        if success and count > 0:
            print(f" - {count} {self.unit} {mark}")
        else:
            print(f" {mark}")
