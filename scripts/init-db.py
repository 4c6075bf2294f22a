#!/usr/bin/env python3
"""
Create the history_to_drive schema, tables and indexes if they are missing.

Uses POSTGRESQL_URL (or --database-url). Existing tables and rows are left
untouched, so this is safe to run against a populated database.
"""

from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv
from historydb.config import load_settings
from historydb.errors import ConfigError, StoreError
from historydb.schema import ensure_schema
from historydb.store import open_store

load_dotenv()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initialize the history database schema.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (default: $POSTGRESQL_URL). Accepts postgresql:// or sqlite:///.",
    )
    return parser.parse_args(argv)


def init_db(database_url: str) -> str:
    with open_store(database_url) as store:
        ensure_schema(store)
        return store.dialect


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(database_url=args.database_url)
        dialect = init_db(settings.database_url)
    except (ConfigError, StoreError) as exc:
        print(f"Could not create schema: {exc}")
        return 1

    print(f"Initialized {dialect} database schema")
    return 0


if __name__ == "__main__":
    sys.exit(main())
