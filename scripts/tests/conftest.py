from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from historydb.schema import ensure_schema
from historydb.store import HistoryStore, open_store


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'history.db'}"


@pytest.fixture
def store(sqlite_url: str) -> Iterator[HistoryStore]:
    with open_store(sqlite_url) as handle:
        ensure_schema(handle)
        yield handle
