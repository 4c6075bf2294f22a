"""Decode worksheet rows into history records."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from historydb.cells import Cell, cell_to_str
from historydb.errors import CellError, SchemaViolation
from historydb.tags import split_tags
from historydb.utils import parse_timestamp, truncate

REQUIRED_COLUMNS = 6

TITLE_MAX_LENGTH = 1000
HOST_MAX_LENGTH = 600
URL_MAX_LENGTH = 3000
USER_AGENT_MAX_LENGTH = 3000
ORIGIN_MAX_LENGTH = 100


def _empty_tags() -> frozenset[str]:
    return frozenset()


@dataclass(frozen=True)
class HistoryRecord:
    timestamp: datetime
    title: str
    host: str
    url: str
    user_agent: str
    origin: str
    tags: frozenset[str] = field(default_factory=_empty_tags)


def origin_from_path(path: Path) -> str:
    return truncate(path.name, ORIGIN_MAX_LENGTH)


def decode_row(cells: Sequence[Cell], *, origin: str) -> HistoryRecord | None:
    """Turn one row of cells into a record.

    Columns are positional: timestamp, tags, title, host, url, user agent.
    Returns None when the timestamp does not parse. Raises SchemaViolation for
    short rows and CellError for error cells outside the title column.
    """
    if len(cells) < REQUIRED_COLUMNS:
        raise SchemaViolation(
            f"Only {len(cells)} columns present, expected at least {REQUIRED_COLUMNS}"
        )

    raw_timestamp = cell_to_str(cells[0])
    raw_tags = cell_to_str(cells[1])
    try:
        title = cell_to_str(cells[2])
    except CellError:
        # title cells may hold #NAME? errors
        title = ""
    host = cell_to_str(cells[3])
    url = cell_to_str(cells[4])
    user_agent = cell_to_str(cells[5])

    timestamp = parse_timestamp(raw_timestamp)
    if timestamp is None:
        return None

    return HistoryRecord(
        timestamp=timestamp,
        title=truncate(title, TITLE_MAX_LENGTH),
        host=truncate(host, HOST_MAX_LENGTH),
        url=truncate(url, URL_MAX_LENGTH),
        user_agent=truncate(user_agent, USER_AGENT_MAX_LENGTH),
        origin=truncate(origin, ORIGIN_MAX_LENGTH),
        tags=split_tags(raw_tags),
    )
