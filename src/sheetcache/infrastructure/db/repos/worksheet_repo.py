from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable

from sheetcache.domain.models.workbook import WorksheetRecord
from sheetcache.infrastructure.db.sqlite import StagingDatabase

logger = logging.getLogger(__name__)


class WorksheetRepo:
    def __init__(self, database: StagingDatabase) -> None:
        self.database = database

    def insert(self, record: WorksheetRecord, position: int) -> None:
        handle = self.database.execute(
            """
            INSERT INTO worksheets ("index", name, relationship_id, state, part_path, position)
            VALUES (:index, :name, :relationship_id, :state, :part_path, :position)
            """,
            {
                "index": record.index,
                "name": record.name,
                "relationship_id": record.relationship_id,
                "state": record.state,
                "part_path": record.part_path,
                "position": position,
            },
        )
        self.database.release(handle)

    def import_records(self, records: Iterable[WorksheetRecord]) -> int:
        def _import(_: StagingDatabase) -> int:
            count = 0
            for position, record in enumerate(records):
                self.insert(record, position)
                count += 1
            return count

        count = self.database.transactional(_import)
        logger.info("Imported %d worksheet(s)", count)
        return count

    def count(self) -> int:
        return int(self.database.column("SELECT COUNT(*) FROM worksheets"))

    def has_index(self, index: int) -> bool:
        return self.database.row('SELECT 1 FROM worksheets WHERE "index" = :index', {"index": index}) is not None

    def has_name(self, name: str) -> bool:
        return self.database.row("SELECT 1 FROM worksheets WHERE name = :name", {"name": name}) is not None

    def get_name_by_index(self, index: int) -> str | None:
        return self.database.column('SELECT name FROM worksheets WHERE "index" = :index', {"index": index})

    def get_index_by_name(self, name: str) -> int | None:
        return self.database.column('SELECT "index" FROM worksheets WHERE name = :name', {"name": name})

    def get_by_index(self, index: int) -> WorksheetRecord | None:
        row = self.database.row('SELECT * FROM worksheets WHERE "index" = :index', {"index": index})
        return self._to_record(row) if row else None

    def list_names(self) -> dict[int, str]:
        return self.database.all(
            'SELECT "index", name FROM worksheets ORDER BY position',
            key="index",
            value="name",
        )

    def list_records(self) -> list[WorksheetRecord]:
        rows = self.database.all("SELECT * FROM worksheets ORDER BY position")
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: sqlite3.Row) -> WorksheetRecord:
        return WorksheetRecord(
            index=row["index"],
            name=row["name"],
            relationship_id=row["relationship_id"],
            state=row["state"],
            part_path=row["part_path"],
        )
