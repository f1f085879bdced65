from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Config dataclasses for the schema compiler.

MasterDataConfig is what the YAML loader produces; GeneratorConfig is the
small, pure configuration the artifact generator and exporter work from.
"""

MASTER_DATA_ROOT_DIRECTORY_NAME = "MasterData"


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration of one generation run.

    code_destination / asset_destination are the roots given by the user;
    generated files land below their MasterData sub directory.
    """
    code_destination: Path
    asset_destination: Path
    project_code: str | None = None

    @property
    def code_root(self) -> Path:
        return Path(self.code_destination) / MASTER_DATA_ROOT_DIRECTORY_NAME

    @property
    def asset_root(self) -> Path:
        return Path(self.asset_destination) / MASTER_DATA_ROOT_DIRECTORY_NAME

    @property
    def base_namespace(self) -> str:
        """Import path of the code root, e.g. 'Demo.MasterData'.

        The parent of code_root must be importable as project_code (or be on
        sys.path itself when no project code is given).
        """
        if self.project_code:
            return f"{self.project_code}.{MASTER_DATA_ROOT_DIRECTORY_NAME}"
        return MASTER_DATA_ROOT_DIRECTORY_NAME


@dataclass(frozen=True)
class MasterDataConfig:
    """Root configuration object (config/masterdata.yml)."""
    source_directory: str  # Directory to scan for .xlsx schema files
    code_destination: str
    asset_destination: str
    project_code: str | None = None
    log_dir: str = "./logs"

    def generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(
            code_destination=Path(self.code_destination),
            asset_destination=Path(self.asset_destination),
            project_code=self.project_code or None,
        )


def asset_file_path(asset_root: Path, schema_name: str, sheet_name: str) -> Path:
    """Deterministic asset location: {asset_root}/{schema}/{sheet}.asset."""
    return Path(asset_root) / schema_name / f"{sheet_name}.asset"
