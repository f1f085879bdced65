from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, build_config, resolve_config_path
from ..excel.reader import try_read
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.config_models import MasterDataConfig
from ..schema.interpreter import interpret_workbook
from ..services.orchestrator import ProcessingError, export_all, generate, scan_source_directory
from ..services.summary import render_summary_line

"""CLI entrypoint: ``python -m masterdata.cli {generate,export,inspect}``.

- generate: schema files -> Python modules (VO / DTO / DAO / Type / Exporter
  / Registry)
- export: schema files -> YAML assets
- inspect: print what the interpreter sees in every schema file

Exit codes: 0 all files succeeded, 2 some file or sheet failed, 1 fatal
(config error, missing source directory).
"""

__all__ = [
    "main",
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=None, help="Config file (default: config/masterdata.yml)")
    common.add_argument("--source", default=None, help="Directory of .xlsx schema files")
    common.add_argument("--debug", action="store_true", help="Enable debug logging")

    p = argparse.ArgumentParser(prog="masterdata", description="Spreadsheet schema -> typed master data modules")
    sub = p.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", parents=[common], help="Generate Python modules from schema files")
    gen.add_argument("--code-dest", dest="code_destination", default=None, help="Root of the generated modules")
    gen.add_argument("--asset-dest", dest="asset_destination", default=None, help="Root of the exported assets")
    gen.add_argument("--project-code", dest="project_code", default=None, help="Top level package of the generated modules")

    exp = sub.add_parser("export", parents=[common], help="Export schema rows to YAML assets")
    exp.add_argument("--asset-dest", dest="asset_destination", default=None, help="Root of the exported assets")

    sub.add_parser("inspect", parents=[common], help="Print fields and row counts of every schema sheet")
    return p.parse_args(argv)


def _load_config(args: argparse.Namespace) -> MasterDataConfig:
    overrides = {
        "source_directory": args.source,
        "code_destination": getattr(args, "code_destination", None),
        "asset_destination": getattr(args, "asset_destination", None),
        "project_code": getattr(args, "project_code", None),
    }
    path = resolve_config_path(args.config)
    return build_config(path, overrides, required=args.config is not None)


def _inspect(source: Path) -> int:
    paths = scan_source_directory(source)
    if not paths:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    failed = False
    for path in paths:
        print(f"FILE: {path.name}")
        read = try_read(path)
        if not read.success or read.workbook is None:
            print(f"  read_error: {read.error}")
            failed = True
            continue
        descriptions, errors = interpret_workbook(read.workbook)
        for d in descriptions:
            fields = ", ".join(
                f"{f.name}:{f.declared_type}{'(enum)' if f.is_enum else ''}" for f in d.fields
            )
            print(f"  SHEET: {d.sheet_name} key={d.key_field.name} rows={len(d.rows)}")
            print(f"    fields= {fields}")
        for e in errors:
            print(f"  SHEET: {e.sheet} error={e}")
            failed = True
    return EXIT_PARTIAL_FAILURE if failed else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # argv=[] (テストからの呼び出し) で sys.argv が混ざらないよう None の時だけ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    load_dotenv(dotenv_path=Path(".env"), override=False)
    logger.debug("debug mode enabled")

    if args.command == "inspect" and args.source:
        source = Path(args.source)
    else:
        try:
            cfg = _load_config(args)
        except ConfigError as e:
            logger.error(f"config: {e}")
            return EXIT_FATAL
        source = Path(cfg.source_directory)

    try:
        if args.command == "inspect":
            return _inspect(source)

        error_log = ErrorLogBuffer(cfg.log_dir)
        if args.command == "generate":
            result = generate(
                source,
                cfg.code_destination,
                cfg.asset_destination,
                cfg.project_code,
                error_log=error_log,
            )
        else:
            result = export_all(source, cfg.asset_destination, error_log=error_log)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary が "SUMMARY " を付与するので先頭を除く
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.has_failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
