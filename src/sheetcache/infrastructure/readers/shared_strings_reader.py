from __future__ import annotations

from sheetcache.domain.models.workbook import SharedStringRecord
from sheetcache.infrastructure.readers.base import PartReader
from sheetcache.infrastructure.xml.cursor import XmlNode


class SharedStringsReader(PartReader[SharedStringRecord]):
    """Reads ``xl/sharedStrings.xml``; rich text runs are flattened to plain text."""

    def _reset(self) -> None:
        self._index = -1

    def _recognize(self, node: XmlNode) -> SharedStringRecord | None:
        if not node.is_start or node.local_name != "si":
            return None
        self._index += 1
        return SharedStringRecord(index=self._index, text=self._read_text_content(node))
