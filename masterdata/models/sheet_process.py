from __future__ import annotations

from dataclasses import dataclass, field

from .processing_result import ArtifactResult

"""SheetProcess model: the processing unit for a single schema sheet."""

__all__ = [
    "SheetProcess",
]


@dataclass(frozen=True)
class SheetProcess:
    """Outcome of generating or exporting one sheet.

    A failed sheet has error set and no artifacts: nothing of it was written.
    """
    schema_name: str  # schema file name without extension
    sheet_name: str
    artifacts: list[ArtifactResult] = field(default_factory=list)
    records: int = 0  # exported record count (export only)
    error: str | None = None  # Sheet-level error message

    @property
    def succeeded(self) -> bool:
        return self.error is None
