#!/usr/bin/env python3
"""
Import History To Drive exports into the history database.

Call with one or more export files and POSTGRESQL_URL in the environment (or
a .env file), for instance:

    find "$(pwd)" -name "*.xlsx" | xargs -d '\\n' scripts/import-history.py

Rows are only inserted when they are newer than the latest row already
stored for the same file name, so exports can be re-imported safely.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from historydb.config import load_settings, require_files
from historydb.errors import ConfigError, StoreError
from historydb.importer import import_files
from historydb.schema import ensure_schema
from historydb.store import open_store
from historydb.writer import summarize_stats

load_dotenv()

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FILE_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import browser history exports (xlsx or csv) into the history database."
    )
    parser.add_argument("paths", nargs="+", type=Path, help="Export files to import, in order.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (default: $POSTGRESQL_URL). Accepts postgresql:// or sqlite:///.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Rows per committed transaction (default: 1000 or $HISTORY_BATCH_SIZE).",
    )
    parser.add_argument(
        "--sheet", default=None, help="Worksheet to read from Excel files (default: Sheet1)."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings YAML (default: config/history-import.yml).",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Read and filter rows without writing them."
    )
    parser.add_argument("--limit", type=int, default=None, help="Only read the first N rows.")
    parser.add_argument("--verbose", action="store_true", help="Log per-row and batch details.")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    return parser


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run(args: argparse.Namespace) -> int:
    paths = require_files(args.paths)
    settings = load_settings(
        config_path=args.config,
        database_url=args.database_url,
        batch_size=args.batch_size,
        sheet=args.sheet,
    )

    with open_store(settings.database_url) as store:
        if not args.dry_run:
            ensure_schema(store)
        results = import_files(
            store,
            paths,
            batch_size=settings.batch_size,
            sheet=settings.sheet,
            dry_run=args.dry_run,
            limit=args.limit,
        )

    for stats in results:
        print(summarize_stats(stats, args.dry_run))
    return EXIT_OK if all(stats.ok for stats in results) else EXIT_FILE_FAILED


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    try:
        return run(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG
    except StoreError as exc:
        logger.error("Could not prepare the database: %s", exc)
        return EXIT_FILE_FAILED


if __name__ == "__main__":
    sys.exit(main())
