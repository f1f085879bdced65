from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Processing result models for generate / export runs.

ArtifactResult is reported for every file the writer touches (generated code
and exported assets alike); ProcessingResult aggregates a whole run and feeds
the SUMMARY line.
"""


class ArtifactStatus(Enum):
    """Outcome of a content-addressed write.

    - GENERATED: target did not exist and was written
    - UPDATED: target existed with different content and was overwritten
    - SKIPPED: target already had identical content, left untouched
    """
    GENERATED = "generated"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ArtifactResult:
    path: Path
    status: ArtifactStatus


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str  # ファイル名
    status: str  # success/failed
    sheets: int  # 処理対象シート数
    failed_sheets: int  # 失敗シート数
    records: int  # エクスポート件数 (generate 時は 0)
    elapsed_seconds: float  # ファイル処理時間


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one generate or export run."""
    success_files: int  # 全シート成功したファイル数
    failed_files: int  # 読み込み失敗 or 1 シート以上失敗したファイル数
    failed_sheets: int  # 失敗シート合計
    generated: int  # 新規作成ファイル数
    updated: int  # 上書きファイル数
    skipped: int  # 内容同一で未更新のファイル数
    total_records: int  # エクスポートしたレコード総数
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
    artifacts: list[ArtifactResult] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files

    @property
    def has_failures(self) -> bool:
        return self.failed_files > 0 or self.failed_sheets > 0


def count_statuses(artifacts: list[ArtifactResult]) -> tuple[int, int, int]:
    """Return (generated, updated, skipped) counts."""
    generated = sum(1 for a in artifacts if a.status is ArtifactStatus.GENERATED)
    updated = sum(1 for a in artifacts if a.status is ArtifactStatus.UPDATED)
    skipped = sum(1 for a in artifacts if a.status is ArtifactStatus.SKIPPED)
    return generated, updated, skipped
