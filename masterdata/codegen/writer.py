from __future__ import annotations

import logging
from pathlib import Path

from ..models.processing_result import ArtifactResult, ArtifactStatus

"""Content-addressed artifact writer.

Targets whose content is already identical are left untouched (no mtime
change, no log noise); anything else is fully rewritten. Line endings are
always '\\n' so the output is byte-stable across platforms.
"""

__all__ = [
    "write_artifact",
]

logger = logging.getLogger(__name__)


def write_artifact(path: Path, content: str) -> ArtifactResult:
    """Write content to path unless it already holds exactly that content.

    Returns:
        ArtifactResult with GENERATED (new file), UPDATED (overwritten) or
        SKIPPED (identical, untouched).
    """
    path = Path(path)
    data = content.encode("utf-8")
    if path.exists():
        if path.read_bytes() == data:
            logger.debug("SKIP: %s", path.as_posix())
            return ArtifactResult(path, ArtifactStatus.SKIPPED)
        status = ArtifactStatus.UPDATED
        logger.info("UPDATE: %s", path.as_posix())
    else:
        status = ArtifactStatus.GENERATED
        logger.info("GENERATE: %s", path.as_posix())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return ArtifactResult(path, status)
