from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .processing_result import ArtifactResult
from .sheet_process import SheetProcess

"""ExcelFile domain model and FileStatus enum.

ExcelFile is the processing context of one schema file during a generate or
export run, tracking its status from pending to success/failed.
"""


class FileStatus(Enum):
    """Status enum for ExcelFile processing lifecycle.

    State transitions: pending → processing → (success | failed)

    - PENDING: File discovered but not yet processed
    - PROCESSING: File is currently being processed
    - SUCCESS: File read and every sheet processed
    - FAILED: File unreadable or at least one sheet failed
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ExcelFile:
    """Processing context for a single schema file."""
    path: Path
    name: str  # file name without extension (schema name)
    sheets: list[SheetProcess] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    # file level artifacts (enum module, exporter module)
    artifacts: list[ArtifactResult] = field(default_factory=list)
    error: str | None = None  # Failure reason summary

    @property
    def failed_sheets(self) -> int:
        return sum(1 for s in self.sheets if not s.succeeded)

    @property
    def records(self) -> int:
        return sum(s.records for s in self.sheets)

    @property
    def all_artifacts(self) -> list[ArtifactResult]:
        result = list(self.artifacts)
        for s in self.sheets:
            result.extend(s.artifacts)
        return result
