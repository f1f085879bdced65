from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from masterdata.models.excel_file import ExcelFile, FileStatus
from masterdata.models.processing_result import ArtifactResult, ArtifactStatus, ProcessingResult, count_statuses
from masterdata.models.sheet_process import SheetProcess


def test_count_statuses():
    artifacts = [
        ArtifactResult(Path("a"), ArtifactStatus.GENERATED),
        ArtifactResult(Path("b"), ArtifactStatus.SKIPPED),
        ArtifactResult(Path("c"), ArtifactStatus.SKIPPED),
        ArtifactResult(Path("d"), ArtifactStatus.UPDATED),
    ]
    assert count_statuses(artifacts) == (1, 1, 2)


def test_excel_file_aggregates_sheets():
    ok = SheetProcess("Game", "A", artifacts=[ArtifactResult(Path("a"), ArtifactStatus.GENERATED)], records=4)
    bad = SheetProcess("Game", "B", error="boom")
    f = ExcelFile(
        path=Path("Game.xlsx"),
        name="Game",
        sheets=[ok, bad],
        status=FileStatus.FAILED,
        artifacts=[ArtifactResult(Path("t"), ArtifactStatus.SKIPPED)],
    )
    assert ok.succeeded and not bad.succeeded
    assert f.failed_sheets == 1
    assert f.records == 4
    assert [a.path.name for a in f.all_artifacts] == ["t", "a"]


def test_processing_result_flags():
    t = datetime(2024, 1, 1, tzinfo=UTC)
    clean = ProcessingResult(2, 0, 0, 1, 0, 0, 0, t, t, 0.0)
    assert clean.total_files == 2
    assert not clean.has_failures
    sheet_failure = ProcessingResult(2, 0, 1, 1, 0, 0, 0, t, t, 0.0)
    assert sheet_failure.has_failures
