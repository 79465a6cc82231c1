from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheetdiff.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from sheetdiff.logging.init import log_summary, setup_logging
from sheetdiff.services.orchestrator import ProcessingError, run_all
from sheetdiff.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (--config / SHEETDIFF_CONFIG / config/compare.yml)
- Run every configured comparison, writing one report workbook each
- Print one line per comparison and a final SUMMARY line

Exit codes: 0 all comparisons succeeded, 2 at least one failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

CONFIG_ENV_VAR = "SHEETDIFF_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv (missing file is not an error)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheetdiff",
        description="Keyed comparison of a baseline and a revision spreadsheet",
    )
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/compare.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print headers & first rows of every configured file then exit",
    )
    return p.parse_args(argv)


def _inspect_data(cfg) -> int:
    from sheetdiff.excel.reader import SheetHeaderError, SheetReadError, read_dataset

    seen: set[Path] = set()
    for comparison in cfg.comparisons:
        for path in (comparison.baseline, comparison.revision):
            if path in seen:
                continue
            seen.add(path)
            print(f"FILE: {path}")
            try:
                ds = read_dataset(path, comparison.sheet)
            except (SheetReadError, SheetHeaderError) as e:
                print(f"  read_error: {e}")
                continue
            print(f"  SHEET: {ds.sheet_name} cols={ds.headers} rows={len(ds.rows)}")
            print("    sample_rows=", ds.rows[:3])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # NOTE: 空リスト [] が与えられた場合に sys.argv[1:] (pytest の引数) を
    #       誤って解析しないよう、None のときのみシステム引数を読む。
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    config_path = args.config or Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Running {len(cfg.comparisons)} comparison(s) -> {cfg.output_directory}")
    try:
        result = run_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.error_log_path is not None and result.failed_count:
        logger.info(f"error log: {result.error_log_path}")

    # log_summary が "SUMMARY " を付与するため除去
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_count > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
