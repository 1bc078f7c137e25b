from __future__ import annotations

import logging
from typing import Union

from sheetcache.core.number_formats import GENERAL_FORMAT_ID
from sheetcache.domain.models.workbook import CellStyleRecord, NumberFormatRecord
from sheetcache.infrastructure.readers.base import PartReader, parse_int
from sheetcache.infrastructure.xml.cursor import XmlNode

logger = logging.getLogger(__name__)

NUMBER_FORMATS_PATH = ("styleSheet", "numFmts")
CELL_FORMATS_PATH = ("styleSheet", "cellXfs")

StyleRecord = Union[NumberFormatRecord, CellStyleRecord]


class StylesReader(PartReader[StyleRecord]):
    """Reads custom number formats and cell formats from ``xl/styles.xml``.

    Cell formats have no id attribute: a cell's ``s`` attribute is the
    zero-based position of the ``xf`` element inside ``cellXfs``.
    """

    def _reset(self) -> None:
        self._cell_style_counter = 0

    def _recognize(self, node: XmlNode) -> StyleRecord | None:
        if not node.is_start:
            return None
        if node.local_name == "numFmt" and node.path[:2] == NUMBER_FORMATS_PATH:
            return self._read_number_format(node)
        if node.local_name == "xf" and node.path[:2] == CELL_FORMATS_PATH:
            return self._read_cell_style(node)
        return None

    def _read_number_format(self, node: XmlNode) -> NumberFormatRecord | None:
        format_id = parse_int(node.get_attribute("numFmtId"))
        format_code = node.get_attribute("formatCode")
        if format_id is None or format_code is None:
            logger.warning("Skipping numFmt without numFmtId/formatCode in %s", self.source)
            return None
        return NumberFormatRecord(id=format_id, format_code=format_code)

    def _read_cell_style(self, node: XmlNode) -> CellStyleRecord:
        record = CellStyleRecord(
            id=self._cell_style_counter,
            applies_number_format=node.get_attribute("applyNumberFormat") == "1",
            number_format_id=parse_int(node.get_attribute("numFmtId")) or GENERAL_FORMAT_ID,
        )
        self._cell_style_counter += 1
        return record
