"""Batched, transactional writes of decoded history rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from historydb import DEFAULT_BATCH_SIZE
from historydb.cells import Cell
from historydb.errors import HistoryImportError, StoreError
from historydb.records import HistoryRecord, decode_row
from historydb.store import HistoryStore

logger = logging.getLogger(__name__)


@dataclass
class ImportStats:
    origin: str = ""
    rows: int = 0
    inserted: int = 0
    skipped: int = 0
    ignored: int = 0
    batches: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchWriter:
    """Inserts records and commits every ``batch_size`` of them.

    ``committed`` only ever counts rows whose transaction has been committed.
    In dry-run mode nothing is inserted and every flush rolls back.
    """

    def __init__(
        self, store: HistoryStore, *, batch_size: int = DEFAULT_BATCH_SIZE, dry_run: bool = False
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.dry_run = dry_run
        self.pending = 0
        self.committed = 0
        self.batches = 0

    def write(self, record: HistoryRecord) -> None:
        if not self.dry_run:
            self.store.insert_record(record)
        self.pending += 1
        if self.pending >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if self.dry_run:
            self.store.rollback()
        else:
            self.store.commit()
        if self.pending:
            self.batches += 1
            logger.debug("Committed batch %d (%d rows)", self.batches, self.pending)
        self.committed += self.pending
        self.pending = 0

    def abort(self) -> int:
        """Roll back the open batch and return how many rows were discarded."""
        discarded = self.pending
        self.pending = 0
        try:
            self.store.rollback()
        except StoreError as exc:
            logger.warning("%s", exc)
        return discarded


def import_rows(
    store: HistoryStore,
    rows: Iterable[Sequence[Cell]],
    *,
    origin: str,
    watermark: datetime,
    batch_size: int = DEFAULT_BATCH_SIZE,
    dry_run: bool = False,
    limit: int | None = None,
) -> ImportStats:
    """Write every row newer than ``watermark`` and return what was committed.

    Rows with a timestamp equal to or older than the watermark are skipped.
    Any import error stops the file: the open batch is rolled back, earlier
    batches stay committed, and the error is recorded on the returned stats.
    """
    stats = ImportStats(origin=origin)
    writer = BatchWriter(store, batch_size=batch_size, dry_run=dry_run)

    try:
        for cells in rows:
            if limit is not None and stats.rows >= limit:
                break
            stats.rows += 1
            record = decode_row(cells, origin=origin)
            if record is None:
                stats.ignored += 1
                logger.debug("Ignoring row %d of %s: no timestamp", stats.rows, origin)
                continue
            if record.timestamp <= watermark:
                stats.skipped += 1
                continue
            writer.write(record)
        writer.flush()
    except HistoryImportError as exc:
        discarded = writer.abort()
        stats.error = str(exc)
        logger.error(
            "Import of %s stopped at row %d: %s (%d uncommitted rows discarded)",
            origin,
            stats.rows,
            exc,
            discarded,
        )

    stats.inserted = writer.committed
    stats.batches = writer.batches
    return stats


def summarize_stats(stats: ImportStats, dry_run: bool) -> str:
    action = "Dry-run" if dry_run else "Applied"
    summary = (
        f"{action} {stats.origin}: read {stats.rows}, inserted {stats.inserted}, "
        f"skipped {stats.skipped}, ignored {stats.ignored}, batches {stats.batches}"
    )
    if stats.error:
        summary += f", error: {stats.error}"
    return summary
