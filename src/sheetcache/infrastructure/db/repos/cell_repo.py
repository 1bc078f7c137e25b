from __future__ import annotations

import itertools
import logging
import sqlite3
from collections.abc import Iterable, Iterator

from sheetcache.core.columns import index_to_name, name_to_index
from sheetcache.domain.models.cell import CellRecord, ParsedCell, ResolvedCell
from sheetcache.infrastructure.db.sqlite import StagingDatabase
from sheetcache.infrastructure.readers.base import parse_int

logger = logging.getLogger(__name__)

# Styles, shared strings and formats are soft references: a cell whose
# target is missing still resolves, with NULL text or format.
_RESOLVED_CELL_SELECT = """
    SELECT
        cells."column" AS "column",
        cells."row" AS "row",
        cells.type AS type,
        cells.value AS value,
        strings.string AS shared_text,
        formats.format AS format_code
    FROM cells
    LEFT JOIN strings ON strings."index" = cells.string
    LEFT JOIN styles ON styles.id = cells.style
    LEFT JOIN formats ON formats.id = styles.number_format
"""


def to_cell_record(worksheet: int, parsed: ParsedCell) -> CellRecord:
    record = CellRecord(
        worksheet=worksheet,
        column=name_to_index(parsed.column),
        row=parsed.row,
        type=parsed.type,
        style_id=parsed.style_id,
    )
    if record.is_shared_string:
        record.shared_string_ref = parse_int(parsed.raw_value)
    else:
        record.raw_value = parsed.raw_value
    return record


class CellRepo:
    def __init__(self, database: StagingDatabase) -> None:
        self.database = database

    def insert(self, record: CellRecord) -> None:
        handle = self.database.execute(
            """
            INSERT INTO cells (worksheet, "column", "row", type, style, value, string)
            VALUES (:worksheet, :column, :row, :type, :style, :value, :string)
            """,
            self._to_params(record),
        )
        self.database.release(handle)

    def import_cells(self, worksheet: int, cells: Iterable[ParsedCell]) -> int:
        rows = (self._to_params(to_cell_record(worksheet, cell)) for cell in cells)
        count = self.database.transactional(
            lambda db: db.execute_many(
                """
                INSERT INTO cells (worksheet, "column", "row", type, style, value, string)
                VALUES (:worksheet, :column, :row, :type, :style, :value, :string)
                """,
                rows,
            )
        )
        logger.info("Imported %d cell(s) for worksheet %d", count, worksheet)
        return count

    def get_cell(self, worksheet: int, column: int, row: int) -> ResolvedCell | None:
        result = self.database.row(
            _RESOLVED_CELL_SELECT
            + """
            WHERE cells.worksheet = :worksheet AND cells."column" = :column AND cells."row" = :row
            """,
            {"worksheet": worksheet, "column": column, "row": row},
        )
        return self._to_cell(result) if result else None

    def get_row(self, worksheet: int, row: int) -> list[ResolvedCell]:
        rows = self.database.all(
            _RESOLVED_CELL_SELECT
            + """
            WHERE cells.worksheet = :worksheet AND cells."row" = :row
            ORDER BY cells."column"
            """,
            {"worksheet": worksheet, "row": row},
        )
        return [self._to_cell(result) for result in rows]

    def get_column(self, worksheet: int, column: int) -> list[ResolvedCell]:
        return list(self.iterate_column(worksheet, column))

    def iterate_column(self, worksheet: int, column: int) -> Iterator[ResolvedCell]:
        for result in self.database.iterate(
            _RESOLVED_CELL_SELECT
            + """
            WHERE cells.worksheet = :worksheet AND cells."column" = :column
            ORDER BY cells."row"
            """,
            {"worksheet": worksheet, "column": column},
        ):
            yield self._to_cell(result)

    def iterate_rows(self, worksheet: int) -> Iterator[tuple[int, list[ResolvedCell]]]:
        results = self.database.iterate(
            _RESOLVED_CELL_SELECT
            + """
            WHERE cells.worksheet = :worksheet
            ORDER BY cells."row", cells."column"
            """,
            {"worksheet": worksheet},
        )
        try:
            cells = (self._to_cell(result) for result in results)
            for row, group in itertools.groupby(cells, key=lambda cell: cell.row):
                yield row, list(group)
        finally:
            results.close()

    def count_columns(self, worksheet: int) -> int:
        return int(
            self.database.column(
                'SELECT COALESCE(MAX("column"), 0) FROM cells WHERE worksheet = :worksheet',
                {"worksheet": worksheet},
            )
        )

    def count_rows(self, worksheet: int) -> int:
        return int(
            self.database.column(
                'SELECT COALESCE(MAX("row"), 0) FROM cells WHERE worksheet = :worksheet',
                {"worksheet": worksheet},
            )
        )

    def count_cells(self, worksheet: int) -> int:
        return int(
            self.database.column(
                "SELECT COUNT(*) FROM cells WHERE worksheet = :worksheet",
                {"worksheet": worksheet},
            )
        )

    def has_cell(self, worksheet: int, column: int, row: int) -> bool:
        result = self.database.row(
            'SELECT 1 FROM cells WHERE worksheet = :worksheet AND "column" = :column AND "row" = :row',
            {"worksheet": worksheet, "column": column, "row": row},
        )
        return result is not None

    def has_column(self, worksheet: int, column: int) -> bool:
        return 1 <= column <= self.count_columns(worksheet)

    def has_row(self, worksheet: int, row: int) -> bool:
        return 1 <= row <= self.count_rows(worksheet)

    @staticmethod
    def _to_params(record: CellRecord) -> dict[str, object]:
        return {
            "worksheet": record.worksheet,
            "column": record.column,
            "row": record.row,
            "type": record.type,
            "style": record.style_id,
            "value": record.raw_value,
            "string": record.shared_string_ref,
        }

    @staticmethod
    def _to_cell(row: sqlite3.Row) -> ResolvedCell:
        return ResolvedCell(
            column=index_to_name(row["column"]),
            row=row["row"],
            type=row["type"],
            raw_value=row["value"],
            shared_text=row["shared_text"],
            format_code=row["format_code"],
        )
