from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml

"""Asset loading collaborator.

The host decides where assets live; accessors only need a mapping back.
FileAssetLoader reads the YAML assets the exporter writes.
"""

__all__ = [
    "AssetLoader",
    "FileAssetLoader",
]


class AssetLoader(Protocol):
    def load(self, path: str) -> Mapping[str, Any]:
        ...

    async def load_async(self, path: str) -> Mapping[str, Any]:
        ...


class FileAssetLoader:
    """Loads YAML assets from disk, relative paths resolved against base_dir."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def resolve(self, path: str) -> Path:
        p = Path(path)
        if self.base_dir is not None and not p.is_absolute():
            return self.base_dir / p
        return p

    def load(self, path: str) -> Mapping[str, Any]:
        resolved = self.resolve(path)
        payload = yaml.safe_load(resolved.read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise ValueError(f"asset {resolved} does not hold a mapping")
        return payload

    async def load_async(self, path: str) -> Mapping[str, Any]:
        # ファイル読み込みはスレッドへ逃がす (キャンセルは呼び出し側の await で可能)
        return await asyncio.to_thread(self.load, path)
