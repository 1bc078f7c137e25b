from __future__ import annotations

import logging
from collections.abc import Iterable

from sheetcache.core.number_formats import BUILTIN_NUMBER_FORMATS
from sheetcache.domain.models.workbook import NumberFormatRecord
from sheetcache.infrastructure.db.sqlite import StagingDatabase

logger = logging.getLogger(__name__)


class NumberFormatRepo:
    def __init__(self, database: StagingDatabase) -> None:
        self.database = database

    def seed_builtin(self) -> int:
        rows = [
            {"id": format_id, "format": format_code}
            for format_id, format_code in BUILTIN_NUMBER_FORMATS.items()
        ]
        count = self.database.transactional(
            lambda db: db.execute_many(
                "INSERT INTO formats (id, format, builtin) VALUES (:id, :format, 1)",
                rows,
            )
        )
        logger.debug("Seeded %d built-in number format(s)", count)
        return count

    def insert(self, record: NumberFormatRecord) -> None:
        """Store a custom format; a custom code replaces a built-in one with the same id."""
        builtin = self.database.column("SELECT builtin FROM formats WHERE id = :id", {"id": record.id})
        if builtin:
            logger.debug(
                "Custom number format %d overrides built-in %r with %r",
                record.id,
                BUILTIN_NUMBER_FORMATS.get(record.id),
                record.format_code,
            )
            handle = self.database.execute(
                "UPDATE formats SET format = :format, builtin = 0 WHERE id = :id",
                {"id": record.id, "format": record.format_code},
            )
        else:
            handle = self.database.execute(
                "INSERT INTO formats (id, format, builtin) VALUES (:id, :format, 0)",
                {"id": record.id, "format": record.format_code},
            )
        self.database.release(handle)

    def import_records(self, records: Iterable[NumberFormatRecord]) -> int:
        def _import(_: StagingDatabase) -> int:
            count = 0
            for record in records:
                self.insert(record)
                count += 1
            return count

        return self.database.transactional(_import)

    def get_format_code(self, format_id: int) -> str | None:
        return self.database.column("SELECT format FROM formats WHERE id = :id", {"id": format_id})

    def count(self) -> int:
        return int(self.database.column("SELECT COUNT(*) FROM formats"))
