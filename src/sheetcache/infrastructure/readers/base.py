from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from sheetcache.core.config import DEFAULT_XML_CHUNK_BYTES
from sheetcache.core.errors import InvalidReaderStateError
from sheetcache.infrastructure.archive.store import EntryOpener
from sheetcache.infrastructure.xml.cursor import XmlCursor, XmlNode

RecordT = TypeVar("RecordT")


class PartReader(Generic[RecordT]):
    """Single-pass reader producing one record per recognised element.

    The reader is not rewindable in place: ``restart()`` discards the
    current cursor and opens the archive entry again.
    """

    def __init__(
        self,
        opener: EntryOpener,
        *,
        source: str = "<part>",
        chunk_size: int = DEFAULT_XML_CHUNK_BYTES,
    ) -> None:
        self.source = source
        self._opener = opener
        self._chunk_size = chunk_size
        self._cursor: XmlCursor | None = None
        self._started = False
        self._exhausted = False

    def __enter__(self) -> PartReader[RecordT]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[RecordT]:
        self.restart()
        try:
            while True:
                record = self.advance()
                if record is None:
                    return
                yield record
        finally:
            self.close()

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def restart(self) -> None:
        self.close()
        self._cursor = XmlCursor(self._opener(), source=self.source, chunk_size=self._chunk_size)
        self._started = True
        self._exhausted = False
        self._reset()

    def advance(self) -> RecordT | None:
        if not self._started:
            raise InvalidReaderStateError(f"Reader for {self.source} must be restarted before it is advanced.")
        if self._exhausted or self._cursor is None:
            return None
        for node in self._cursor:
            record = self._recognize(node)
            if record is not None:
                return record
        self._exhausted = True
        self._cursor.close()
        return None

    def close(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

    def _reset(self) -> None:
        """Clear per-pass state before a fresh cursor is consumed."""

    def _recognize(self, node: XmlNode) -> RecordT | None:
        raise NotImplementedError

    def _read_text_content(
        self,
        start: XmlNode,
        accept: Callable[[XmlNode], bool] | None = None,
    ) -> str:
        """Consume nodes up to the end of ``start`` and join their text."""
        if self._cursor is None:
            return ""
        parts: list[str] = []
        for node in self._cursor:
            if node.is_end and node.depth == start.depth and node.qualified_name == start.qualified_name:
                break
            if not (node.is_text or node.is_significant_whitespace):
                continue
            if accept is None or accept(node):
                parts.append(node.value or "")
        return "".join(parts)


def parse_int(value: str | None, default: int | None = None) -> int | None:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default
