from __future__ import annotations

from collections.abc import Callable, Iterator

from sheetcache.core.columns import format_reference, index_to_name, name_to_index, split_reference
from sheetcache.core.decoder import ValueDecoder
from sheetcache.core.errors import InvalidCellReferenceError, NoSuchCellError, NoSuchColumnError, NoSuchRowError
from sheetcache.domain.models.cell import DecodedValue
from sheetcache.infrastructure.db.repos.cell_repo import CellRepo


def _column_index(column: str | int) -> int:
    return column if isinstance(column, int) else name_to_index(column)


class Worksheet:
    """Query view over one materialised worksheet.

    Columns are addressed by letter name (``"C"``) or by 1-based index; rows
    by 1-based number. Values come back decoded: numbers with a date/time
    format as ``datetime`` or ``timedelta``, shared strings as their text.
    """

    def __init__(
        self,
        index: int,
        name: str,
        cells: CellRepo,
        decoder: ValueDecoder,
        ensure_open: Callable[[], None],
    ) -> None:
        self.index = index
        self.name = name
        self._cells = cells
        self._decoder = decoder
        self._ensure_open = ensure_open

    def __repr__(self) -> str:
        return f"Worksheet(index={self.index!r}, name={self.name!r})"

    def count_columns(self) -> int:
        self._ensure_open()
        return self._cells.count_columns(self.index)

    def count_rows(self) -> int:
        self._ensure_open()
        return self._cells.count_rows(self.index)

    def count_cells(self) -> int:
        self._ensure_open()
        return self._cells.count_cells(self.index)

    def get_cell(self, column: str | int, row: int) -> DecodedValue:
        self._ensure_open()
        column_index = _column_index(column)
        cell = self._cells.get_cell(self.index, column_index, row)
        if cell is None:
            reference = format_reference(column_index, row)
            raise NoSuchCellError(
                f'Worksheet "{self.name}" (index {self.index}) has no cell {reference} '
                f"(column {index_to_name(column_index)}, row {row})."
            )
        return self._decoder.decode(cell)

    def get_cell_by_reference(self, reference: str) -> DecodedValue:
        column, row = split_reference(reference)
        return self.get_cell(column, row)

    def get_row(self, row: int) -> dict[str, DecodedValue]:
        self._ensure_open()
        cells = self._cells.get_row(self.index, row)
        if not cells:
            raise NoSuchRowError(f'Worksheet "{self.name}" (index {self.index}) has no row {row}.')
        return {cell.column: self._decoder.decode(cell) for cell in cells}

    def get_column(self, column: str | int) -> dict[int, DecodedValue]:
        self._ensure_open()
        column_index = _column_index(column)
        cells = self._cells.get_column(self.index, column_index)
        if not cells:
            raise NoSuchColumnError(
                f'Worksheet "{self.name}" (index {self.index}) has no column {index_to_name(column_index)}.'
            )
        return {cell.row: self._decoder.decode(cell) for cell in cells}

    def has_cell(self, column: str | int, row: int) -> bool:
        self._ensure_open()
        try:
            column_index = _column_index(column)
        except InvalidCellReferenceError:
            return False
        return self._cells.has_cell(self.index, column_index, row)

    def has_column(self, column: str | int) -> bool:
        self._ensure_open()
        try:
            column_index = _column_index(column)
        except InvalidCellReferenceError:
            return False
        return self._cells.has_column(self.index, column_index)

    def has_row(self, row: int) -> bool:
        self._ensure_open()
        return self._cells.has_row(self.index, row)

    def iterate_column(self, column: str | int) -> Iterator[tuple[int, DecodedValue]]:
        self._ensure_open()
        for cell in self._cells.iterate_column(self.index, _column_index(column)):
            yield cell.row, self._decoder.decode(cell)

    def iterate_rows(self) -> Iterator[tuple[int, dict[str, DecodedValue]]]:
        self._ensure_open()
        for row, cells in self._cells.iterate_rows(self.index):
            yield row, {cell.column: self._decoder.decode(cell) for cell in cells}
