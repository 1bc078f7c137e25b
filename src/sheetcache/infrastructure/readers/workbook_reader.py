from __future__ import annotations

import logging

from sheetcache.domain.models.workbook import WorksheetRecord
from sheetcache.infrastructure.readers.base import PartReader, parse_int
from sheetcache.infrastructure.xml.cursor import XmlNode

logger = logging.getLogger(__name__)

SHEET_PATH = ("workbook", "sheets", "sheet")


class WorkbookReader(PartReader[WorksheetRecord]):
    """Reads the worksheet listing from ``xl/workbook.xml``."""

    def _recognize(self, node: XmlNode) -> WorksheetRecord | None:
        if not node.is_start or node.path != SHEET_PATH:
            return None

        index = parse_int(node.get_attribute("sheetId"))
        name = node.get_attribute("name")
        if index is None or name is None:
            logger.warning("Skipping sheet entry without sheetId/name in %s: %s", self.source, dict(node.attributes))
            return None

        return WorksheetRecord(
            index=index,
            name=name,
            relationship_id=node.get_attribute("r:id"),
            state=node.get_attribute("state") or "visible",
        )
