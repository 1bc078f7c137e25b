from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable

from sheetcache.domain.models.workbook import CellStyleRecord, NumberFormatRecord
from sheetcache.infrastructure.db.repos.number_format_repo import NumberFormatRepo
from sheetcache.infrastructure.db.sqlite import StagingDatabase
from sheetcache.infrastructure.readers.styles_reader import StyleRecord

logger = logging.getLogger(__name__)


class CellStyleRepo:
    def __init__(self, database: StagingDatabase) -> None:
        self.database = database

    def insert(self, record: CellStyleRecord) -> None:
        handle = self.database.execute(
            """
            INSERT INTO styles (id, applies_number_format, number_format)
            VALUES (:id, :applies_number_format, :number_format)
            """,
            {
                "id": record.id,
                "applies_number_format": int(record.applies_number_format),
                "number_format": record.number_format_id,
            },
        )
        self.database.release(handle)

    def import_records(self, records: Iterable[CellStyleRecord]) -> int:
        def _import(_: StagingDatabase) -> int:
            count = 0
            for record in records:
                self.insert(record)
                count += 1
            return count

        return self.database.transactional(_import)

    def get(self, style_id: int) -> CellStyleRecord | None:
        row = self.database.row("SELECT * FROM styles WHERE id = :id", {"id": style_id})
        return self._to_record(row) if row else None

    def count(self) -> int:
        return int(self.database.column("SELECT COUNT(*) FROM styles"))

    @staticmethod
    def _to_record(row: sqlite3.Row) -> CellStyleRecord:
        return CellStyleRecord(
            id=row["id"],
            applies_number_format=bool(row["applies_number_format"]),
            number_format_id=row["number_format"],
        )


class StylesImporter:
    """Routes one pass over the styles part into the formats and styles tables."""

    def __init__(self, formats: NumberFormatRepo, styles: CellStyleRepo) -> None:
        self.formats = formats
        self.styles = styles

    def import_records(self, records: Iterable[StyleRecord]) -> tuple[int, int]:
        def _import(_: StagingDatabase) -> tuple[int, int]:
            format_count = 0
            style_count = 0
            for record in records:
                if isinstance(record, NumberFormatRecord):
                    self.formats.insert(record)
                    format_count += 1
                else:
                    self.styles.insert(record)
                    style_count += 1
            return format_count, style_count

        format_count, style_count = self.styles.database.transactional(_import)
        logger.info("Imported %d number format(s) and %d cell style(s)", format_count, style_count)
        return format_count, style_count
