"""Read export rows from Excel workbooks or CSV files as cells."""

from __future__ import annotations

import csv
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from xml.etree.ElementTree import ParseError

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from historydb import DEFAULT_SHEET
from historydb.cells import EMPTY_CELL, Cell, cell_from_value
from historydb.errors import SchemaViolation

CSV_SUFFIXES = {".csv"}

# lxml raises XMLSyntaxError, a SyntaxError subclass, in place of ParseError
OPEN_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    ParseError,
    SyntaxError,
    KeyError,
    OSError,
)
READ_ERRORS = (ParseError, SyntaxError, KeyError, ValueError, OSError)


def cell_from_openpyxl(cell: Any) -> Cell:
    value = cell.value
    if value is None:
        return EMPTY_CELL
    if cell.data_type == "e":
        return Cell.error(str(value))
    return cell_from_value(value)


def read_rows(path: Path, *, sheet: str = DEFAULT_SHEET) -> Iterator[list[Cell]]:
    """Yield each row of ``path`` as a list of cells.

    Nothing is opened until the first row is requested, so a missing worksheet
    surfaces as a SchemaViolation while the rows are being consumed.
    """
    if path.suffix.lower() in CSV_SUFFIXES:
        yield from _read_csv_rows(path)
    else:
        yield from _read_sheet_rows(path, sheet)


def _sheet_width(worksheet: Any) -> int:
    """Column count of the sheet, found by a scan when the file omits it."""
    if worksheet.max_column:
        return int(worksheet.max_column)
    return max((len(row) for row in worksheet.iter_rows()), default=0)


def _read_sheet_rows(path: Path, sheet: str) -> Iterator[list[Cell]]:
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except OPEN_ERRORS as exc:
        raise SchemaViolation(f"Cannot open workbook {path.name}: {exc}") from exc
    try:
        if sheet not in wb.sheetnames:
            raise SchemaViolation(f"Cannot find '{sheet}' in {path.name}")
        try:
            worksheet = wb[sheet]
            width = _sheet_width(worksheet)
            for row in worksheet.iter_rows():
                cells = [cell_from_openpyxl(cell) for cell in row]
                # rows are ragged when trailing cells were never written
                if len(cells) < width:
                    cells.extend([EMPTY_CELL] * (width - len(cells)))
                yield cells
        except READ_ERRORS as exc:
            raise SchemaViolation(f"Cannot read '{sheet}' in {path.name}: {exc}") from exc
    finally:
        wb.close()


def _read_csv_rows(path: Path) -> Iterator[list[Cell]]:
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as handle:
            for row in csv.reader(handle):
                yield [cell_from_value(value) for value in row]
    except (UnicodeDecodeError, csv.Error) as exc:
        raise SchemaViolation(f"Cannot read {path.name} as CSV: {exc}") from exc
