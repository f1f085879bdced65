from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for generate / export runs."""

__all__ = [
    "render_summary_line",
    "format_elapsed",
]


def format_elapsed(seconds: float) -> str:
    """Render elapsed seconds without scientific notation or a trailing '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the one-line run summary.

    Format::

        SUMMARY files={n}/{n} success={s} failed={f} sheets_failed={x}
        generated={g} updated={u} skipped={k} records={r} elapsed_sec={e}

    (on a single line).

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = ProcessingResult(
        ...     success_files=1, failed_files=0, failed_sheets=0, generated=5,
        ...     updated=0, skipped=0, total_records=0, start_time=t, end_time=t,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(r)
        'SUMMARY files=1/1 success=1 failed=0 sheets_failed=0 generated=5 updated=0 skipped=0 records=0 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"sheets_failed={result.failed_sheets} "
        f"generated={result.generated} "
        f"updated={result.updated} "
        f"skipped={result.skipped} "
        f"records={result.total_records} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
