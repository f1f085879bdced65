from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import ClassVar

from ..errors import SchemaFileReadError
from ..excel.reader import try_read
from ..services.exporter import WorkbookExport, export_workbook
from .container import MasterDataContainer
from .loader import FileAssetLoader

"""Base class of the generated per-schema-file exporters.

A generated ``{schema}Exporter`` binds the source file, the asset root and
one container type per sheet; export() re-reads the schema file, writes the
assets and checks that each written asset loads back into its container.
"""

__all__ = [
    "MasterDataExporter",
]

logger = logging.getLogger(__name__)


class MasterDataExporter:
    source_path: ClassVar[str]
    asset_root: ClassVar[str]
    schema_name: ClassVar[str]
    containers: ClassVar[dict[str, type[MasterDataContainer]]] = {}

    def export(self) -> WorkbookExport:
        """Export every sheet this exporter knows about.

        Raises:
            SchemaFileReadError: the schema file cannot be opened.
        """
        read = try_read(Path(self.source_path))
        if not read.success or read.workbook is None:
            raise SchemaFileReadError(read.error, file=self.schema_name)

        result = export_workbook(read.workbook, Path(self.asset_root), sheets=list(self.containers))
        loader = FileAssetLoader()
        for index, sheet in enumerate(result.sheets):
            if not sheet.succeeded:
                logger.error("export failed: %s", sheet.error)
                continue
            container_type = self.containers[sheet.sheet_name]
            try:
                # 書き出したアセットが生成済みの型で読み戻せることを確認
                for artifact in sheet.artifacts:
                    container_type.from_asset(loader.load(str(artifact.path)))
            except Exception as e:
                message = f"asset does not load into {container_type.__name__} (stale generated modules?): {e}"
                logger.error("export verify failed: %s/%s: %s", self.schema_name, sheet.sheet_name, message)
                result.sheets[index] = replace(sheet, error=message)
        return result

    @classmethod
    def export_all(cls) -> list[WorkbookExport]:
        """Run every loaded exporter subclass, one after another."""
        results: list[WorkbookExport] = []
        for exporter_type in cls.__subclasses__():
            logger.info("export start: %s", exporter_type.schema_name)
            results.append(exporter_type().export())
        return results
