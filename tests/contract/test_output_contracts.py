from __future__ import annotations

import json
import re
from pathlib import Path

import jsonschema
import pytest
import yaml

from masterdata.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from masterdata.cli.__main__ import main as cli_main
from masterdata.config.loader import SCHEMA_PATH

"""Externally observed formats: error log lines, SUMMARY line, assets, config schema, exit codes."""

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/(\d+) success=(\d+) failed=(\d+) sheets_failed=(\d+) "
    r"generated=(\d+) updated=(\d+) skipped=(\d+) records=(\d+) elapsed_sec=\d+(\.\d+)?$"
)
ERROR_LOG_KEYS = {"timestamp", "file", "sheet", "row", "column", "error_type", "message"}
TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def _summary_line(out: str) -> str:
    lines = [line for line in out.splitlines() if line.startswith("SUMMARY ")]
    assert len(lines) == 1
    return lines[0]


def test_config_schema_is_valid_draft_2020_12():
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)
    assert set(schema["required"]) == {"source_directory", "code_destination", "asset_destination"}


def test_sample_config_matches_schema():
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    sample = Path(__file__).resolve().parents[2] / "config" / "masterdata.yml"
    jsonschema.validate(yaml.safe_load(sample.read_text(encoding="utf-8")), schema)


def test_summary_line_format(temp_workdir: Path, write_config: Path, game_schema: Path, capsys):
    assert cli_main(["export"]) == EXIT_SUCCESS_ALL
    m = SUMMARY_RE.match(_summary_line(capsys.readouterr().out))
    assert m is not None
    assert m.group(1, 2, 3, 4, 5) == ("1", "1", "1", "0", "0")
    assert m.group(9) == "5"


def test_error_log_lines_have_fixed_keys(temp_workdir: Path, write_config: Path, excel_factory, character_rows, item_rows, capsys):
    item_rows[4][2] = "ten"
    excel_factory(temp_workdir / "data" / "Game.xlsx", {"Character": character_rows, "Item": item_rows})
    (temp_workdir / "data" / "Broken.xlsx").write_bytes(b"\x00\x01")

    assert cli_main(["export"]) == EXIT_PARTIAL_FAILURE
    summary = SUMMARY_RE.match(_summary_line(capsys.readouterr().out))
    assert summary.group(1, 2, 3, 4, 5) == ("2", "2", "0", "2", "1")

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", logs[0].name)
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert len(records) == 2
    for r in records:
        assert set(r) == ERROR_LOG_KEYS
        assert TIMESTAMP_RE.match(r["timestamp"])
        assert isinstance(r["row"], int) and isinstance(r["column"], int)
        assert re.fullmatch(r"[A-Z][A-Z0-9_]*", r["error_type"])
    assert [r["error_type"] for r in records] == ["SCHEMA_FILE_READ_ERROR", "DATA_COERCION_ERROR"]
    assert (records[0]["row"], records[0]["column"]) == (-1, -1)
    assert (records[1]["row"], records[1]["column"]) == (4, 2)


def test_asset_document_shape(temp_workdir: Path, write_config: Path, game_schema: Path):
    assert cli_main(["export"]) == EXIT_SUCCESS_ALL
    payload = yaml.safe_load(
        (temp_workdir / "assets" / "MasterData" / "Game" / "Character.asset").read_text(encoding="utf-8")
    )
    assert list(payload) == ["name", "record_type", "list"]
    assert payload["name"] == "Character"
    assert payload["record_type"] == "CharacterVO"
    assert payload["list"][0] == {
        "id": 1,
        "name": "dragon",
        "element": 0,
        "power": 100,
        "rate": 1.5,
        "active": True,
    }
    assert [r["element"] for r in payload["list"]] == [0, 5, 1]


def test_generated_modules_carry_header(temp_workdir: Path, write_config: Path, game_schema: Path):
    assert cli_main(["generate"]) == EXIT_SUCCESS_ALL
    modules = sorted((temp_workdir / "gen" / "Demo" / "MasterData").rglob("*.py"))
    assert len(modules) == 9
    for m in modules:
        assert m.read_text(encoding="utf-8").startswith("# DON'T EDIT. THIS IS GENERATED AUTOMATICALLY.\n")


@pytest.mark.parametrize(
    "argv, setup, expected",
    [
        (["generate"], "ok", EXIT_SUCCESS_ALL),
        (["generate"], "broken_sheet", EXIT_PARTIAL_FAILURE),
        (["generate"], "no_config", EXIT_FATAL),
        (["export", "--source", "./missing"], "ok", EXIT_FATAL),
    ],
)
def test_exit_codes(temp_workdir: Path, sample_config_yaml: str, excel_factory, character_rows, argv, setup, expected):
    sheets = {"Character": character_rows}
    if setup == "broken_sheet":
        sheets["Broken"] = [["id", "x"], [None, None], [None, None], ["int", None]]
    excel_factory(temp_workdir / "data" / "Game.xlsx", sheets)
    if setup != "no_config":
        (temp_workdir / "config" / "masterdata.yml").write_text(sample_config_yaml, encoding="utf-8")
    assert cli_main(argv) == expected
