# Shared pytest fixtures
from __future__ import annotations

import importlib
import sys
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

import pandas as pd
import pytest

from masterdata.logging.init import reset_logging

# 行規約: 0 フィールド名 / 1 コメント / 2 enum 定義 / 3 型 / 4~ データ
CHARACTER_ROWS: list[list[object]] = [
    ["id", "name", "element", "power", "rate", "active"],
    ["ID", "名前", "属性", "", "", ""],
    [None, None, "Fire\nWater\nWind = 5", None, None, None],
    ["int", "string", "ElementType", "long", "float", "bool"],
    [1, "dragon", "Fire", 100, 1.5, True],
    [2, "slime", "Wind", 5, 0.25, False],
    [3, "", "Water", 20, 2, "true"],
]

ITEM_ROWS: list[list[object]] = [
    ["code", "element", "price"],
    [None, None, None],
    [None, None, None],
    ["string", "ElementType", "int"],
    ["potion", "Fire", 10],
    ["ether", "Water", 20],
]


def make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write an .xlsx file with one sheet per entry (no header row, no index)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def _reset_logging_state():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
code_destination: ./gen/Demo
asset_destination: ./assets
project_code: Demo
log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "masterdata.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def game_schema(temp_workdir: Path) -> Path:
    """data/Game.xlsx with a Character sheet (declares ElementType) and an Item sheet (uses it)."""
    return make_excel(temp_workdir / "data" / "Game.xlsx", {"Character": CHARACTER_ROWS, "Item": ITEM_ROWS})


@dataclass
class GeneratedPackage:
    """Where a test generates code to, and how to import it back."""

    project_code: str
    code_dest: Path
    asset_dest: Path

    def import_module(self, relative: str) -> ModuleType:
        importlib.invalidate_caches()
        return importlib.import_module(f"{self.project_code}.MasterData.{relative}")


@pytest.fixture()
def generated_package(temp_workdir: Path, monkeypatch) -> GeneratedPackage:
    # テストごとに一意なトップレベル名 (sys.modules の衝突回避)
    project_code = f"Proj{uuid.uuid4().hex[:10]}"
    root = temp_workdir / "gen"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    yield GeneratedPackage(project_code, root / project_code, temp_workdir / "assets")
    for name in list(sys.modules):
        if name == project_code or name.startswith(project_code + "."):
            del sys.modules[name]


@pytest.fixture()
def excel_factory():
    """make_excel as a fixture: excel_factory(path, {sheet: rows})."""
    return make_excel


@pytest.fixture()
def character_rows() -> list[list[object]]:
    return [list(r) for r in CHARACTER_ROWS]


@pytest.fixture()
def item_rows() -> list[list[object]]:
    return [list(r) for r in ITEM_ROWS]
