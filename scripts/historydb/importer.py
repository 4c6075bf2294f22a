"""Per-file import: watermark lookup, row streaming and batched writes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from historydb import DEFAULT_BATCH_SIZE, DEFAULT_SHEET
from historydb.errors import StoreError
from historydb.records import origin_from_path
from historydb.store import HistoryStore, resolve_watermark
from historydb.utils import FLOOR_TIMESTAMP
from historydb.workbook import read_rows
from historydb.writer import ImportStats, import_rows

logger = logging.getLogger(__name__)


def import_file(
    store: HistoryStore,
    path: Path,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    sheet: str = DEFAULT_SHEET,
    dry_run: bool = False,
    limit: int | None = None,
) -> ImportStats:
    origin = origin_from_path(path)
    logger.info("Importing %s ...", path.name)

    try:
        watermark = resolve_watermark(store, origin)
    except StoreError as exc:
        logger.error("%s", exc)
        try:
            store.rollback()
        except StoreError as rollback_exc:
            logger.warning("%s", rollback_exc)
        return ImportStats(origin=origin, error=str(exc))

    if watermark > FLOOR_TIMESTAMP:
        logger.info(
            "Max timestamp of %s found for %s, skipping records before then", watermark, origin
        )
    else:
        logger.info("No previous records found for %s", origin)

    stats = import_rows(
        store,
        read_rows(path, sheet=sheet),
        origin=origin,
        watermark=watermark,
        batch_size=batch_size,
        dry_run=dry_run,
        limit=limit,
    )
    if stats.ok:
        logger.info("Done inserting %d history rows", stats.inserted)
    return stats


def import_files(
    store: HistoryStore,
    paths: Iterable[Path],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    sheet: str = DEFAULT_SHEET,
    dry_run: bool = False,
    limit: int | None = None,
) -> list[ImportStats]:
    """Import files one at a time; a failed file does not stop the next one."""
    return [
        import_file(
            store, path, batch_size=batch_size, sheet=sheet, dry_run=dry_run, limit=limit
        )
        for path in paths
    ]
