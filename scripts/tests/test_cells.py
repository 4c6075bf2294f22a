from datetime import UTC, datetime, timedelta, timezone

import pytest
from historydb.cells import EMPTY_CELL, Cell, CellKind, cell_from_value, cell_to_str
from historydb.errors import CellError


def test_cell_to_str_renders_each_kind() -> None:
    assert cell_to_str(Cell.text("Home")) == "Home"
    assert cell_to_str(Cell.integer(42)) == "42"
    assert cell_to_str(Cell.number(1.5)) == "1.5"
    assert cell_to_str(Cell.number(3.0)) == "3"
    assert cell_to_str(Cell.number(1e-07)) == "0.0000001"
    assert cell_to_str(Cell.boolean(True)) == "true"
    assert cell_to_str(Cell.boolean(False)) == "false"
    assert cell_to_str(EMPTY_CELL) == ""


def test_cell_to_str_keeps_text_verbatim() -> None:
    assert cell_to_str(Cell.text("  padded ; text ")) == "  padded ; text "


def test_error_cell_raises_with_description() -> None:
    with pytest.raises(CellError, match="#NAME?") as excinfo:
        cell_to_str(Cell.error("#NAME?"))
    assert excinfo.value.description == "#NAME?"


def test_cell_from_value_maps_python_types() -> None:
    assert cell_from_value(None) == EMPTY_CELL
    assert cell_from_value("") == EMPTY_CELL
    assert cell_from_value("x") == Cell.text("x")
    assert cell_from_value(True) == Cell(CellKind.BOOL, True)
    assert cell_from_value(7) == Cell(CellKind.INT, 7)
    assert cell_from_value(2.25) == Cell(CellKind.FLOAT, 2.25)


def test_cell_from_value_renders_datetimes_as_utc_text() -> None:
    naive = datetime(2023, 1, 1, 12, 0, 0)
    offset = datetime(2023, 1, 1, 7, 0, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert cell_from_value(naive) == Cell.text("2023-01-01T12:00:00+00:00")
    assert cell_from_value(offset) == Cell.text("2023-01-01T12:00:00+00:00")
    assert cell_from_value(datetime(2023, 1, 1, tzinfo=UTC)).kind is CellKind.TEXT
