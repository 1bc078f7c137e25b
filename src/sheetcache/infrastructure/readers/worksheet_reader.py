from __future__ import annotations

import logging

from sheetcache.core.columns import index_to_name, name_to_index, split_reference
from sheetcache.core.errors import InvalidCellReferenceError
from sheetcache.domain.models.cell import ParsedCell
from sheetcache.infrastructure.readers.base import PartReader, parse_int
from sheetcache.infrastructure.xml.cursor import XmlNode

logger = logging.getLogger(__name__)

ROW_PATH = ("worksheet", "sheetData", "row")
VALUE_ELEMENTS = frozenset({"v", "t"})


class WorksheetReader(PartReader[ParsedCell]):
    """Reads cells from one ``xl/worksheets/sheetN.xml`` part."""

    def _reset(self) -> None:
        self._row_number = 0
        self._column_index = 0

    def _recognize(self, node: XmlNode) -> ParsedCell | None:
        if not node.is_start or node.path[:3] != ROW_PATH:
            return None
        if len(node.path) == 3:
            self._enter_row(node)
            return None
        if len(node.path) == 4 and node.local_name == "c":
            return self._read_cell(node)
        return None

    def _enter_row(self, node: XmlNode) -> None:
        self._row_number = parse_int(node.get_attribute("r")) or self._row_number + 1
        self._column_index = 0

    def _read_cell(self, node: XmlNode) -> ParsedCell:
        reference = node.get_attribute("r")
        column, row = self._locate(reference)
        self._column_index = name_to_index(column)

        raw_value = self._read_text_content(node, accept=lambda text: text.path[-1] in VALUE_ELEMENTS)
        return ParsedCell(
            column=column,
            row=row,
            raw_value=raw_value if raw_value != "" else None,
            type=node.get_attribute("t"),
            style_id=parse_int(node.get_attribute("s")),
        )

    def _locate(self, reference: str | None) -> tuple[str, int]:
        if reference is not None:
            try:
                return split_reference(reference)
            except InvalidCellReferenceError:
                logger.warning("Unusable cell reference %r in %s; using its position", reference, self.source)
        return index_to_name(self._column_index + 1), self._row_number
