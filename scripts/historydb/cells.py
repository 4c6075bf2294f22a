"""Spreadsheet cell values and their conversion to text.

Excel and CSV readers hand every cell over as a ``Cell`` so the row decoder
never has to inspect raw Python values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import cast

from historydb.errors import CellError
from historydb.utils import ensure_utc, format_float


class CellKind(Enum):
    TEXT = "text"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ERROR = "error"
    EMPTY = "empty"


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: str | int | float | bool | None = None

    @classmethod
    def text(cls, value: str) -> Cell:
        return cls(CellKind.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> Cell:
        return cls(CellKind.INT, value)

    @classmethod
    def number(cls, value: float) -> Cell:
        return cls(CellKind.FLOAT, value)

    @classmethod
    def boolean(cls, value: bool) -> Cell:
        return cls(CellKind.BOOL, value)

    @classmethod
    def error(cls, description: str) -> Cell:
        return cls(CellKind.ERROR, description)


EMPTY_CELL = Cell(CellKind.EMPTY)


def cell_from_value(value: object) -> Cell:
    """Wrap a plain Python value read from a workbook or CSV file.

    Datetime values become RFC3339 text; naive ones are taken to be UTC.
    """
    if value is None:
        return EMPTY_CELL
    if isinstance(value, bool):
        return Cell.boolean(value)
    if isinstance(value, int):
        return Cell.integer(value)
    if isinstance(value, float):
        return Cell.number(value)
    if isinstance(value, datetime):
        return Cell.text(ensure_utc(value).isoformat())
    if isinstance(value, str):
        return Cell.text(value) if value else EMPTY_CELL
    return Cell.text(str(value))


def cell_to_str(cell: Cell) -> str:
    """Return the canonical text of a cell, raising CellError for error cells."""
    kind = cell.kind
    if kind is CellKind.TEXT:
        return str(cell.value)
    if kind is CellKind.INT:
        return str(cell.value)
    if kind is CellKind.FLOAT:
        return format_float(cast(float, cell.value))
    if kind is CellKind.BOOL:
        return "true" if cell.value else "false"
    if kind is CellKind.EMPTY:
        return ""
    if kind is CellKind.ERROR:
        raise CellError(str(cell.value))
    raise ValueError(f"Unsupported cell kind: {kind!r}")
