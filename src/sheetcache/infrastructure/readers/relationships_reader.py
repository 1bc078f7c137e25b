from __future__ import annotations

from sheetcache.domain.models.workbook import RelationshipRecord
from sheetcache.infrastructure.readers.base import PartReader
from sheetcache.infrastructure.xml.cursor import XmlNode

RELATIONSHIP_PATH = ("Relationships", "Relationship")


class RelationshipsReader(PartReader[RelationshipRecord]):
    """Reads ``xl/_rels/workbook.xml.rels``."""

    def _recognize(self, node: XmlNode) -> RelationshipRecord | None:
        if not node.is_start or node.path != RELATIONSHIP_PATH:
            return None
        if (node.get_attribute("TargetMode") or "").lower() == "external":
            return None
        rel_id = (node.get_attribute("Id") or "").strip()
        target = (node.get_attribute("Target") or "").strip()
        if not rel_id or not target:
            return None
        return RelationshipRecord(id=rel_id, type=node.get_attribute("Type") or "", target=target)
