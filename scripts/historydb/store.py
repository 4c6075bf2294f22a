"""Database handles for the history tables (PostgreSQL or SQLite)."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any

import psycopg

from historydb.errors import ConfigError, StoreError
from historydb.records import HistoryRecord
from historydb.utils import (
    FLOOR_TIMESTAMP,
    format_timestamp,
    parse_stored_timestamp,
    to_naive_utc,
)

POSTGRES_URL_PREFIXES = ("postgresql://", "postgres://")
SQLITE_URL_PREFIX = "sqlite:"


class HistoryStore(ABC):
    """One open connection plus the SQL needed by the importer.

    Writes happen inside the driver's implicit transaction; callers decide
    when to ``commit`` or ``rollback``.
    """

    dialect = ""
    driver_errors: tuple[type[Exception], ...] = ()

    def __init__(self, conn: Any) -> None:
        self.conn = conn

    def __enter__(self) -> HistoryStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except self.driver_errors as exc:
            raise StoreError(f"{action} failed: {exc}") from exc

    def close(self) -> None:
        self.conn.close()

    def commit(self) -> None:
        with self.translate_errors("Commit"):
            self.conn.commit()

    def rollback(self) -> None:
        with self.translate_errors("Rollback"):
            self.conn.rollback()

    @abstractmethod
    def executescript(self, script: str) -> None: ...

    @abstractmethod
    def max_timestamp(self, origin: str) -> datetime | None: ...

    @abstractmethod
    def insert_record(self, record: HistoryRecord) -> None: ...


class PostgresHistoryStore(HistoryStore):
    dialect = "postgresql"
    driver_errors = (psycopg.Error,)

    MAX_TIMESTAMP_SQL = """
        select max(h.timestamp) last_ts
        from history_to_drive.history h
        where h.origin_description = %s
    """

    # History row, missing tags and links in one statement so a tag created
    # here is linked in the same snapshot.
    INSERT_RECORD_SQL = """
        with record_insert_id as (
            insert into history_to_drive.history
                (timestamp, title, host, url, user_agent, origin_description)
            values (%s, %s, %s, %s, %s, %s)
            returning history_id
        )
           , tags_to_merge as (
            select distinct tag
            from unnest(%s::varchar[]) as t(tag)
        )
           , inserted_tags as (
            insert into history_to_drive.tag (tag)
                select tag
                from tags_to_merge
                on conflict (tag) do nothing
                returning tag_id
        )
           , tag_ids as (
            select tag_id
            from inserted_tags
            union
            select tag_id
            from history_to_drive.tag
            where tag in (select tag from tags_to_merge)
        )
        insert
        into history_to_drive.history_tag (history_id, tag_id)
        select r.history_id, t.tag_id
        from tag_ids t
            cross join record_insert_id r
    """

    def executescript(self, script: str) -> None:
        with self.translate_errors("Schema bootstrap"):
            # multiple statements are only accepted without parameters
            self.conn.execute(script)
            self.conn.commit()

    def max_timestamp(self, origin: str) -> datetime | None:
        with self.translate_errors(f"Watermark query for {origin}"):
            row = self.conn.execute(self.MAX_TIMESTAMP_SQL, (origin,)).fetchone()
        if row is None or row[0] is None:
            return None
        return parse_stored_timestamp(row[0])

    def insert_record(self, record: HistoryRecord) -> None:
        with self.translate_errors(f"Insert of {record.url!r}"):
            self.conn.execute(
                self.INSERT_RECORD_SQL,
                (
                    to_naive_utc(record.timestamp),
                    record.title,
                    record.host,
                    record.url,
                    record.user_agent,
                    record.origin,
                    sorted(record.tags),
                ),
            )


class SqliteHistoryStore(HistoryStore):
    dialect = "sqlite"
    driver_errors = (sqlite3.Error,)

    def executescript(self, script: str) -> None:
        with self.translate_errors("Schema bootstrap"):
            self.conn.executescript(script)
            self.conn.commit()

    def max_timestamp(self, origin: str) -> datetime | None:
        with self.translate_errors(f"Watermark query for {origin}"):
            row = self.conn.execute(
                "SELECT max(timestamp) FROM history WHERE origin_description = ?", (origin,)
            ).fetchone()
        if row is None or row[0] is None:
            return None
        return parse_stored_timestamp(row[0])

    def insert_record(self, record: HistoryRecord) -> None:
        with self.translate_errors(f"Insert of {record.url!r}"):
            cursor = self.conn.execute(
                """
                INSERT INTO history (timestamp, title, host, url, user_agent, origin_description)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    format_timestamp(record.timestamp),
                    record.title,
                    record.host,
                    record.url,
                    record.user_agent,
                    record.origin,
                ),
            )
            history_id = cursor.lastrowid
            tags = sorted(record.tags)
            if not tags:
                return
            self.conn.executemany(
                "INSERT OR IGNORE INTO tag (tag) VALUES (?)", [(tag,) for tag in tags]
            )
            placeholders = ", ".join("?" for _ in tags)
            tag_ids = self.conn.execute(
                f"SELECT tag_id FROM tag WHERE tag IN ({placeholders})", tags
            ).fetchall()
            self.conn.executemany(
                "INSERT INTO history_tag (history_id, tag_id) VALUES (?, ?)",
                [(history_id, row[0]) for row in tag_ids],
            )


def is_postgres_url(url: str) -> bool:
    return url.startswith(POSTGRES_URL_PREFIXES)


def sqlite_path(url: str) -> str:
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "", 1)
    return url.replace(SQLITE_URL_PREFIX, "", 1)


def open_store(database_url: str) -> HistoryStore:
    """Connect to the store named by ``database_url``.

    ``postgresql://`` and ``postgres://`` URLs go to PostgreSQL through
    psycopg; ``sqlite:///path/to/file.db`` opens (and creates) a local file.
    """
    if is_postgres_url(database_url):
        try:
            conn = psycopg.connect(database_url)
        except psycopg.Error as exc:
            raise StoreError(f"Could not connect to PostgreSQL: {exc}") from exc
        return PostgresHistoryStore(conn)

    if database_url.startswith(SQLITE_URL_PREFIX):
        path = sqlite_path(database_url)
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(path)
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open SQLite database {path}: {exc}") from exc
        return SqliteHistoryStore(conn)

    scheme = database_url.split(":", 1)[0]
    raise ConfigError(f"Unsupported database URL scheme {scheme!r}")


def resolve_watermark(store: HistoryStore, origin: str) -> datetime:
    """Latest stored timestamp for ``origin``, or FLOOR_TIMESTAMP if none."""
    latest = store.max_timestamp(origin)
    if latest is None:
        return FLOOR_TIMESTAMP
    return latest
