from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..codegen.generator import ArtifactGenerator, RegistryEntry, validate_schema_name
from ..codegen.writer import write_artifact
from ..errors import MasterDataError, SchemaFileReadError, SchemaShapeError
from ..excel.reader import scan_schema_files, try_read
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import MASTER_DATA_ROOT_DIRECTORY_NAME, GeneratorConfig
from ..models.error_record import ErrorRecord
from ..models.excel_file import ExcelFile, FileStatus
from ..models.grid import Workbook
from ..models.processing_result import ArtifactResult, FileStat, ProcessingResult, count_statuses
from ..models.schema import SchemaDescription
from ..models.sheet_process import SheetProcess
from ..schema.interpreter import collect_enums, interpret_workbook
from .exporter import export_workbook
from .progress import ProgressTracker, SheetProgressIndicator

"""Batch drivers for the generate and export runs.

Both runs walk the schema files of the source directory in name order, one
file at a time:

- an unreadable file is recorded (SCHEMA_FILE_READ_ERROR) and skipped;
- a sheet that fails (shape error on generate, coercion error on export) is
  recorded and skipped, its artifacts keep their last-good content, and the
  sibling sheets still go through;
- file level aggregates (enum module, exporter module) and the registry are
  rendered from the sheets that succeeded.

Every error ends up in the JSON Lines error log, flushed once per run.
"""

__all__ = [
    "ProcessingError",
    "scan_source_directory",
    "generate",
    "export_all",
]

logger = logging.getLogger(__name__)

FILE_LEVEL = "<FILE_LEVEL>"


class ProcessingError(Exception):
    """Fatal run level error (e.g. the source directory is missing)."""


def scan_source_directory(directory: Path) -> list[Path]:
    """Schema files of directory, sorted by name.

    Raises:
        ProcessingError: directory missing, not a directory or unreadable
    """
    directory = Path(directory)
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return scan_schema_files(directory)
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _record(error_log: ErrorLogBuffer, error: MasterDataError, *, file: str, sheet: str = "") -> None:
    logger.error("%s: %s", error.error_type, error)
    error_log.append(ErrorRecord.from_error(error, file=file, sheet=sheet))


def _failed_file(path: Path, start: datetime, error: str, sheets: list[SheetProcess] | None = None) -> ExcelFile:
    return ExcelFile(
        path=path,
        name=path.stem,
        sheets=sheets or [],
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED,
        error=error,
    )


def _open_schema_file(path: Path, error_log: ErrorLogBuffer) -> tuple[Workbook | None, str]:
    """Read and name-check one schema file; returns (workbook, error message)."""
    read = try_read(path)
    if not read.success or read.workbook is None:
        _record(error_log, SchemaFileReadError(read.error, file=path.stem), file=path.stem)
        return None, read.error
    try:
        validate_schema_name(read.workbook.name)
    except SchemaShapeError as e:
        _record(error_log, e, file=path.stem, sheet=FILE_LEVEL)
        return None, str(e)
    return read.workbook, ""


def _aggregate(
    files: list[ExcelFile],
    extra_artifacts: list[ArtifactResult],
    start_time: datetime,
) -> ProcessingResult:
    end_time = datetime.now(UTC)
    artifacts: list[ArtifactResult] = []
    file_stats: list[FileStat] = []
    for f in files:
        artifacts.extend(f.all_artifacts)
        elapsed = (f.end_time - f.start_time).total_seconds() if f.start_time and f.end_time else 0.0
        file_stats.append(
            FileStat(
                file_name=f.path.name,
                status=f.status.value,
                sheets=len(f.sheets),
                failed_sheets=f.failed_sheets,
                records=f.records,
                elapsed_seconds=elapsed,
            )
        )
    artifacts.extend(extra_artifacts)
    generated, updated, skipped = count_statuses(artifacts)
    return ProcessingResult(
        success_files=sum(1 for f in files if f.status is FileStatus.SUCCESS),
        failed_files=sum(1 for f in files if f.status is FileStatus.FAILED),
        failed_sheets=sum(f.failed_sheets for f in files),
        generated=generated,
        updated=updated,
        skipped=skipped,
        total_records=sum(f.records for f in files),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        artifacts=artifacts,
    )


def _flush(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で実行全体を失敗させない
        logger.warning("failed to write error log: %s", e)
        return
    if path is not None:
        logger.info("error log: %s", path.as_posix())


# ---------------------------------------------------------------- generate
def _generate_file(
    path: Path,
    generator: ArtifactGenerator,
    error_log: ErrorLogBuffer,
    registry_entries: list[RegistryEntry],
) -> ExcelFile:
    start = datetime.now(UTC)
    workbook, error = _open_schema_file(path, error_log)
    if workbook is None:
        return _failed_file(path, start, error)

    descriptions, shape_errors = interpret_workbook(workbook)
    by_sheet: dict[str, SchemaDescription] = {d.sheet_name: d for d in descriptions}
    errors_by_sheet = {e.sheet: e for e in shape_errors}

    sheet_progress = SheetProgressIndicator(path.name, len(workbook.sheets), unit="modules")
    sheets: list[SheetProcess] = []
    succeeded: list[SchemaDescription] = []
    try:
        for sheet in workbook.sheets:
            sheet_progress.start_sheet(sheet.name)
            shape_error = errors_by_sheet.get(sheet.name)
            if shape_error is not None:
                _record(error_log, shape_error, file=workbook.name, sheet=sheet.name)
                sheets.append(SheetProcess(workbook.name, sheet.name, error=str(shape_error)))
                if generator.vo_path(workbook.name, sheet.name).exists():
                    logger.warning(
                        "STALE: modules of %s/%s from an earlier run are kept unchanged", workbook.name, sheet.name
                    )
                sheet_progress.finish_sheet(success=False)
                continue
            description = by_sheet[sheet.name]
            # シート単位で全成果物をレンダリングしてから書き込む
            rendered = generator.sheet_artifacts(description)
            artifacts = [write_artifact(a.path, a.content) for a in rendered]
            sheets.append(SheetProcess(workbook.name, sheet.name, artifacts=artifacts))
            succeeded.append(description)
            sheet_progress.finish_sheet(success=True, count=len(artifacts))

        file_artifacts: list[ArtifactResult] = []
        if succeeded:
            for a in generator.file_artifacts(
                workbook.name, path, succeeded, collect_enums(workbook).values()
            ):
                file_artifacts.append(write_artifact(a.path, a.content))
    except OSError as e:
        logger.error("ARTIFACT_WRITE_ERROR: %s: %s", path.name, e)
        error_log.append(
            ErrorRecord.create(
                file=workbook.name,
                sheet=FILE_LEVEL,
                row=-1,
                column=-1,
                error_type="ARTIFACT_WRITE_ERROR",
                message=str(e),
            )
        )
        return _failed_file(path, start, f"artifact write failed: {e}", sheets)

    registry_entries.extend(RegistryEntry(d.schema_name, d.sheet_name) for d in succeeded)
    failed = [s for s in sheets if not s.succeeded]
    return ExcelFile(
        path=path,
        name=workbook.name,
        sheets=sheets,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED if failed else FileStatus.SUCCESS,
        artifacts=file_artifacts,
        error=f"{len(failed)} sheet(s) failed" if failed else None,
    )


def generate(
    source: Path | str,
    code_dest: Path | str,
    asset_dest: Path | str,
    project_code: str | None = None,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Generate the Python modules for every schema file of source.

    Args:
        source: directory holding the .xlsx schema files
        code_dest: root under which ``MasterData/...`` modules are written
        asset_dest: root under which ``MasterData/{schema}/{sheet}.asset``
            lives (embedded in the generated accessors and exporters)
        project_code: optional top level package of the generated modules
        error_log: error log buffer (a default one under ./logs when None)

    Returns:
        ProcessingResult aggregated over every file.

    Raises:
        ProcessingError: source directory missing
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    paths = scan_source_directory(Path(source))
    generator = ArtifactGenerator(
        GeneratorConfig(Path(code_dest), Path(asset_dest), project_code or None)
    )
    logger.info("Generating from %d schema file(s) in %s", len(paths), Path(source).as_posix())

    files: list[ExcelFile] = []
    registry_entries: list[RegistryEntry] = []
    with ProgressTracker(len(paths), description="Generating") as progress:
        for path in paths:
            progress.start_file(path)
            outcome = _generate_file(path, generator, error_log, registry_entries)
            files.append(outcome)
            progress.finish_file(success=outcome.status is FileStatus.SUCCESS)

    extra: list[ArtifactResult] = []
    if registry_entries:
        registry = generator.registry_artifact(registry_entries)
        try:
            extra.append(write_artifact(registry.path, registry.content))
        except OSError as e:
            raise ProcessingError(f"failed to write registry {registry.path}: {e}") from e

    _flush(error_log)
    return _aggregate(files, extra, start_time)


# ------------------------------------------------------------------ export
def _export_file(path: Path, asset_root: Path, error_log: ErrorLogBuffer) -> ExcelFile:
    start = datetime.now(UTC)
    workbook, error = _open_schema_file(path, error_log)
    if workbook is None:
        return _failed_file(path, start, error)

    try:
        exported = export_workbook(workbook, asset_root)
    except OSError as e:
        logger.error("ARTIFACT_WRITE_ERROR: %s: %s", path.name, e)
        error_log.append(
            ErrorRecord.create(
                file=workbook.name,
                sheet=FILE_LEVEL,
                row=-1,
                column=-1,
                error_type="ARTIFACT_WRITE_ERROR",
                message=str(e),
            )
        )
        return _failed_file(path, start, f"asset write failed: {e}")

    for e in exported.errors:
        _record(error_log, e, file=workbook.name)

    sheet_progress = SheetProgressIndicator(path.name, len(exported.sheets))
    for s in exported.sheets:
        sheet_progress.start_sheet(s.sheet_name)
        sheet_progress.finish_sheet(success=s.succeeded, count=s.records)

    failed = [s for s in exported.sheets if not s.succeeded]
    return ExcelFile(
        path=path,
        name=workbook.name,
        sheets=exported.sheets,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED if failed else FileStatus.SUCCESS,
        error=f"{len(failed)} sheet(s) failed" if failed else None,
    )


def export_all(
    source: Path | str,
    asset_dest: Path | str,
    *,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Export every sheet of every schema file of source to YAML assets.

    Assets land at ``{asset_dest}/MasterData/{schema}/{sheet}.asset``.

    Raises:
        ProcessingError: source directory missing
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    paths = scan_source_directory(Path(source))
    asset_root = Path(asset_dest) / MASTER_DATA_ROOT_DIRECTORY_NAME
    logger.info("Exporting %d schema file(s) from %s", len(paths), Path(source).as_posix())

    files: list[ExcelFile] = []
    with ProgressTracker(len(paths), description="Exporting") as progress:
        for path in paths:
            progress.start_file(path)
            outcome = _export_file(path, asset_root, error_log)
            files.append(outcome)
            progress.finish_file(
                success=outcome.status is FileStatus.SUCCESS,
                records=sum(f.records for f in files),
            )

    _flush(error_log)
    return _aggregate(files, [], start_time)
