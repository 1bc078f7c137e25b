from __future__ import annotations

import logging
from collections.abc import Iterable

from sheetcache.domain.models.workbook import SharedStringRecord
from sheetcache.infrastructure.db.sqlite import StagingDatabase

logger = logging.getLogger(__name__)


class SharedStringRepo:
    def __init__(self, database: StagingDatabase) -> None:
        self.database = database

    def import_records(self, records: Iterable[SharedStringRecord]) -> int:
        rows = ({"index": record.index, "string": record.text} for record in records)
        count = self.database.transactional(
            lambda db: db.execute_many(
                'INSERT INTO strings ("index", string) VALUES (:index, :string)',
                rows,
            )
        )
        logger.info("Imported %d shared string(s)", count)
        return count

    def count(self) -> int:
        return int(self.database.column("SELECT COUNT(*) FROM strings"))

    def get_text(self, index: int) -> str | None:
        return self.database.column('SELECT string FROM strings WHERE "index" = :index', {"index": index})
