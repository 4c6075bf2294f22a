"""Shared constants for the history export import tooling."""

DATABASE_URL_ENV = "POSTGRESQL_URL"
BATCH_SIZE_ENV = "HISTORY_BATCH_SIZE"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_SHEET = "Sheet1"
PG_SCHEMA = "history_to_drive"


__all__ = [
    "BATCH_SIZE_ENV",
    "DATABASE_URL_ENV",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_SHEET",
    "PG_SCHEMA",
]
