from __future__ import annotations

import math
from datetime import UTC, datetime
from decimal import Decimal

from dateutil import parser  # type: ignore[import-untyped]

# Watermark for an origin that has no rows yet.
FLOOR_TIMESTAMP = datetime.min.replace(tzinfo=UTC)


def truncate(value: str, limit: int) -> str:
    return value[:limit]


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(raw: str) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Anything that is not an ISO-8601 timestamp with an explicit offset returns
    None, so header rows and other stray text never look like data.
    """
    stripped = raw.strip()
    if not stripped:
        return None
    try:
        parsed: datetime = parser.isoparse(stripped)
        if parsed.tzinfo is None:
            return None
        return parsed.astimezone(UTC)
    except (ValueError, OverflowError):
        return None


def to_naive_utc(value: datetime) -> datetime:
    return ensure_utc(value).replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as sortable UTC text with microseconds."""
    return to_naive_utc(value).isoformat(sep=" ", timespec="microseconds")


def parse_stored_timestamp(raw: object) -> datetime:
    """Read back a timestamp column value, assuming naive values are UTC."""
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, str):
        return ensure_utc(datetime.fromisoformat(raw))
    raise ValueError(f"Unsupported timestamp value: {raw!r}")


def format_float(value: float) -> str:
    """Plain decimal text, never exponent notation."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
