from __future__ import annotations

from pathlib import Path

import pytest

from sheetcache.application.workbook import Workbook, open_workbook
from sheetcache.core.config import StagingSettings
from sheetcache.core.errors import (
    InvalidArchiveError,
    MalformedPartError,
    MissingPartError,
    NoSuchWorksheetError,
    StatementExecutionError,
    WorkbookClosedError,
)


def test_listing_worksheets_does_not_import_cells(sample_xlsx: Path, staging_settings: StagingSettings) -> None:
    with open_workbook(sample_xlsx, staging_settings) as workbook:
        assert workbook.count_worksheets() == 2
        assert workbook.list_worksheets() == {1: "First", 3: "Second"}
        assert workbook.has_worksheet_by_index(3)
        assert not workbook.has_worksheet_by_index(2)
        assert workbook.has_worksheet_by_name("First")
        assert not workbook.has_worksheet_by_name("first")

        assert workbook.database.column("SELECT COUNT(*) FROM cells") == 0
        assert workbook.database.column("SELECT COUNT(*) FROM strings") == 0
        assert workbook.database.column("SELECT COUNT(*) FROM styles") == 0


def test_worksheet_records_resolve_parts_through_relationships(
    sample_xlsx: Path, staging_settings: StagingSettings
) -> None:
    with Workbook(sample_xlsx, staging_settings) as workbook:
        records = workbook.worksheet_records()

    assert [(record.index, record.name, record.state, record.part_path) for record in records] == [
        (1, "First", "visible", "xl/worksheets/sheet1.xml"),
        (3, "Second", "hidden", "xl/worksheets/data.xml"),
    ]


def test_fetching_a_worksheet_imports_shared_data_once(sample_xlsx: Path, staging_settings: StagingSettings) -> None:
    with Workbook(sample_xlsx, staging_settings) as workbook:
        first = workbook.get_worksheet_by_name("First")
        second = workbook.get_worksheet_by_index(3)

        assert (first.index, first.name) == (1, "First")
        assert (second.index, second.name) == (3, "Second")
        assert workbook.database.column("SELECT COUNT(*) FROM strings") == 14
        assert workbook.database.column("SELECT COUNT(*) FROM styles") == 8
        assert [index for index, _ in workbook.iterate_worksheets()] == [1, 3]


def test_fetching_again_returns_cached_worksheet_without_reading_archive(
    sample_xlsx: Path, staging_settings: StagingSettings, monkeypatch: pytest.MonkeyPatch
) -> None:
    with Workbook(sample_xlsx, staging_settings) as workbook:
        worksheet = workbook.get_worksheet_by_index(1)
        before = worksheet.get_row(2)

        def _unavailable(name: str):
            raise MissingPartError(f"{name} is gone")

        monkeypatch.setattr(workbook.archive, "open_entry", _unavailable)

        again = workbook.get_worksheet_by_index(1)
        assert again is worksheet
        assert workbook.get_worksheet_by_name("First").get_row(2) == before


def test_unknown_worksheet_raises(sample_xlsx: Path, staging_settings: StagingSettings) -> None:
    with Workbook(sample_xlsx, staging_settings) as workbook:
        with pytest.raises(NoSuchWorksheetError, match="index 7"):
            workbook.get_worksheet_by_index(7)
        with pytest.raises(NoSuchWorksheetError, match="Third"):
            workbook.get_worksheet_by_name("Third")


def test_close_removes_staging_files_and_blocks_use(
    sample_xlsx: Path, staging_settings: StagingSettings, staging_dir: Path
) -> None:
    workbook = Workbook(sample_xlsx, staging_settings)
    worksheet = workbook.get_worksheet_by_index(1)
    assert len(list(staging_dir.iterdir())) == 1

    workbook.close()
    workbook.close()

    assert workbook.closed
    assert list(staging_dir.iterdir()) == []
    with pytest.raises(WorkbookClosedError):
        workbook.list_worksheets()
    with pytest.raises(WorkbookClosedError):
        worksheet.get_cell("A", 1)


def test_close_releases_abandoned_iterations(
    sample_xlsx: Path, staging_settings: StagingSettings, staging_dir: Path
) -> None:
    workbook = Workbook(sample_xlsx, staging_settings)
    rows = workbook.get_worksheet_by_index(1).iterate_rows()
    next(rows)

    workbook.close()
    rows.close()

    assert list(staging_dir.iterdir()) == []


def test_open_rejects_files_that_are_not_workbooks(tmp_path: Path, staging_settings: StagingSettings) -> None:
    with pytest.raises(InvalidArchiveError):
        Workbook(tmp_path / "missing.xlsx", staging_settings)

    not_zip = tmp_path / "plain.xlsx"
    not_zip.write_bytes(b"not a zip archive")
    with pytest.raises(InvalidArchiveError):
        Workbook(not_zip, staging_settings)


def test_archive_without_manifest_fails_and_leaves_no_staging_files(
    tmp_path: Path, write_xlsx, staging_settings: StagingSettings, staging_dir: Path
) -> None:
    path = write_xlsx(tmp_path / "empty.xlsx", {"docProps/app.xml": "<Properties/>"})

    with pytest.raises(MissingPartError, match="xl/workbook.xml"):
        Workbook(path, staging_settings)

    assert not staging_dir.exists() or list(staging_dir.iterdir()) == []


def test_missing_worksheet_part_raises_on_fetch(
    tmp_path: Path, write_xlsx, sample_parts: dict[str, str], staging_settings: StagingSettings
) -> None:
    del sample_parts["xl/worksheets/data.xml"]
    path = write_xlsx(tmp_path / "partial.xlsx", sample_parts)

    with Workbook(path, staging_settings) as workbook:
        assert workbook.list_worksheets() == {1: "First", 3: "Second"}
        with pytest.raises(MissingPartError, match="Second"):
            workbook.get_worksheet_by_index(3)
        assert workbook.get_worksheet_by_index(1).get_cell("B", 2) == 1


def test_workbook_without_optional_parts_uses_default_names(
    tmp_path: Path, write_xlsx, staging_settings: StagingSettings
) -> None:
    path = write_xlsx(
        tmp_path / "minimal.xlsx",
        {
            "xl/workbook.xml": '<workbook><sheets><sheet name="Only" sheetId="2"/></sheets></workbook>',
            "xl/worksheets/sheet2.xml": (
                "<worksheet><sheetData>"
                '<row r="1"><c r="A1"><v>42732</v></c><c r="B1" s="3"><v>2.5</v></c></row>'
                "</sheetData></worksheet>"
            ),
        },
    )

    with Workbook(path, staging_settings) as workbook:
        worksheet = workbook.get_worksheet_by_name("Only")
        assert worksheet.get_row(1) == {"A": 42732, "B": 2.5}


def _assert_no_cells_staged(workbook: Workbook) -> None:
    database = workbook.database
    assert database.column("SELECT COUNT(*) FROM cells") == 0
    assert database.checked_out == []
    assert not database.in_transaction


def test_duplicate_cell_aborts_the_whole_worksheet_import(
    tmp_path: Path, write_xlsx, sample_parts: dict[str, str], staging_settings: StagingSettings
) -> None:
    sample_parts["xl/worksheets/sheet1.xml"] = (
        "<worksheet><sheetData>"
        '<row r="1"><c r="A1"><v>1</v></c><c r="B1"><v>2</v></c></row>'
        '<row r="2"><c r="A2"><v>3</v></c><c r="A1"><v>4</v></c></row>'
        "</sheetData></worksheet>"
    )
    path = write_xlsx(tmp_path / "duplicate.xlsx", sample_parts)

    with Workbook(path, staging_settings) as workbook:
        with pytest.raises(StatementExecutionError, match="UNIQUE"):
            workbook.get_worksheet_by_name("First")

        _assert_no_cells_staged(workbook)
        assert workbook.get_worksheet_by_name("Second").get_row(2) == {"B": 20}


def test_truncated_worksheet_part_aborts_the_whole_worksheet_import(
    tmp_path: Path, write_xlsx, sample_parts: dict[str, str], staging_dir: Path
) -> None:
    rows = "".join(f'<row r="{row}"><c r="A{row}"><v>{row}</v></c></row>' for row in range(1, 201))
    sample_parts["xl/worksheets/sheet1.xml"] = (
        f'<worksheet><sheetData>{rows}<row r="201"><c r="A201"><v>201</v></row>'
    )
    path = write_xlsx(tmp_path / "truncated.xlsx", sample_parts)
    settings = StagingSettings(staging_dir=staging_dir, xml_chunk_bytes=64)

    with Workbook(path, settings) as workbook:
        with pytest.raises(MalformedPartError, match="xl/worksheets/sheet1.xml"):
            workbook.get_worksheet_by_index(1)

        _assert_no_cells_staged(workbook)
        second = workbook.get_worksheet_by_index(3)
        assert second.get_cell("A", 1) == 10
        assert second.count_cells() == 2
