from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from sheetcache.application.workbook import Workbook
from sheetcache.application.worksheet import Worksheet
from sheetcache.core.config import StagingSettings
from sheetcache.core.errors import NoSuchCellError, NoSuchColumnError, NoSuchRowError, StatementInUseError


@pytest.fixture
def workbook(sample_xlsx: Path, staging_settings: StagingSettings) -> Iterator[Workbook]:
    with Workbook(sample_xlsx, staging_settings) as opened:
        yield opened


@pytest.fixture
def first(workbook: Workbook) -> Worksheet:
    return workbook.get_worksheet_by_index(1)


def test_header_row_lists_shared_string_labels_in_column_order(first: Worksheet) -> None:
    row = first.get_row(1)

    assert list(row) == ["A", "B", "C", "D", "E", "F", "G", "H", "I"]
    assert list(row.values()) == [
        "General",
        "Number",
        "DateTime",
        "Date",
        "Time",
        "Shared String",
        "Rich String",
        "Money",
        "Fraction",
    ]


def test_second_row_decodes_through_styles_and_formats(first: Worksheet) -> None:
    assert first.get_cell("A", 2) == "This is a shared string."
    assert first.get_cell("B", 2) == 1
    assert first.get_cell("C", 2) == datetime(2016, 12, 28, 13, 59)
    assert first.get_cell("D", 2) == datetime(2016, 12, 28)
    assert first.get_cell("E", 2) == timedelta(hours=13, minutes=59)
    assert first.get_cell("F", 2) == "Hello world"
    assert first.get_cell("G", 2) == 3.5
    assert first.get_cell("H", 2) == 1.39
    assert first.get_cell("I", 2) == 0.5


def test_other_cell_types(first: Worksheet) -> None:
    assert first.get_row(4) == {
        "A": True,
        "B": "#DIV/0!",
        "C": "inline text",
        "D": "ab",
        "E": datetime(2016, 12, 28, 13, 59),
        "F": "",
        "G": "after empty",
    }


def test_cells_can_be_addressed_by_reference_or_index(first: Worksheet) -> None:
    assert first.get_cell_by_reference("c2") == datetime(2016, 12, 28, 13, 59)
    assert first.get_cell(3, 2) == first.get_cell("C", 2)


def test_missing_cell_error_names_sheet_and_coordinates(first: Worksheet) -> None:
    with pytest.raises(NoSuchCellError) as excinfo:
        first.get_cell("Z", 999)

    message = str(excinfo.value)
    assert "First" in message
    assert "Z999" in message


def test_blank_row_exists_but_missing_row_does_not(first: Worksheet) -> None:
    assert first.get_row(3) == {"B": None}
    with pytest.raises(NoSuchRowError):
        first.get_row(6)


def test_cells_without_reference_take_the_next_position(first: Worksheet) -> None:
    assert first.get_row(5) == {"A": 7, "C": 8, "D": 9}


def test_counts_and_existence_checks(first: Worksheet) -> None:
    assert first.count_columns() == 9
    assert first.count_rows() == 5
    assert first.count_cells() == 29

    assert first.has_row(3)
    assert not first.has_row(6)
    assert not first.has_row(0)
    assert first.has_column("I")
    assert not first.has_column("J")
    assert first.has_cell("B", 3)
    assert not first.has_cell("A", 3)


def test_existence_checks_return_false_for_unparsable_columns(first: Worksheet) -> None:
    assert not first.has_column("1")
    assert not first.has_column("")
    assert not first.has_cell("B-", 2)
    assert not first.has_cell("A1", 1)


def test_get_column_maps_rows_to_values(first: Worksheet) -> None:
    assert first.get_column("A") == {
        1: "General",
        2: "This is a shared string.",
        4: True,
        5: 7,
    }
    with pytest.raises(NoSuchColumnError):
        first.get_column("Z")


def test_iterate_column_yields_rows_in_order(first: Worksheet) -> None:
    assert [row for row, _ in first.iterate_column("A")] == [1, 2, 4, 5]
    assert list(first.iterate_column("Q")) == []


def test_iterate_rows_groups_cells_by_row(first: Worksheet) -> None:
    rows = list(first.iterate_rows())

    assert [row for row, _ in rows] == [1, 2, 3, 4, 5]
    assert rows[2] == (3, {"B": None})
    assert rows[1][1]["C"] == datetime(2016, 12, 28, 13, 59)


def test_abandoned_iteration_can_be_restarted(workbook: Workbook, first: Worksheet) -> None:
    rows = first.iterate_rows()
    assert next(rows)[0] == 1
    rows.close()

    assert workbook.database.checked_out == []
    assert len(list(first.iterate_rows())) == 5


def test_overlapping_iteration_of_the_same_query_is_rejected(first: Worksheet) -> None:
    outer = first.iterate_rows()
    next(outer)

    with pytest.raises(StatementInUseError):
        next(first.iterate_rows())

    outer.close()


def test_second_sheet_is_independent(workbook: Workbook) -> None:
    second = workbook.get_worksheet_by_name("Second")

    assert second.count_columns() == 2
    assert second.count_rows() == 2
    assert second.get_cell("B", 2) == 20
    assert not second.has_cell("C", 2)
