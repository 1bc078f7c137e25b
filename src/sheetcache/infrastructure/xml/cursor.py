"""Forward-only XML node cursor.

``ElementTree.XMLPullParser`` only reports element start and end events,
with character data attached to elements as ``text`` and ``tail``. The
cursor turns that into a flat stream of start, end and text nodes in
document order, and prunes elements once they have been reported so memory
use is bounded by nesting depth rather than document size.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO
from xml.etree import ElementTree as ET

from sheetcache.core.config import DEFAULT_XML_CHUNK_BYTES
from sheetcache.core.errors import MalformedPartError

XML_SPACE_ATTRIBUTE = "{http://www.w3.org/XML/1998/namespace}space"

_EMPTY_ATTRIBUTES: Mapping[str, str] = {}


class NodeKind(Enum):
    START = "start"
    END = "end"
    TEXT = "text"
    WHITESPACE = "whitespace"
    SIGNIFICANT_WHITESPACE = "significant-whitespace"


@dataclass(slots=True)
class XmlNode:
    kind: NodeKind
    qualified_name: str
    local_name: str
    namespace: str | None
    depth: int
    path: tuple[str, ...]
    attributes: Mapping[str, str] = field(default_factory=dict)
    value: str | None = None

    @property
    def is_start(self) -> bool:
        return self.kind is NodeKind.START

    @property
    def is_end(self) -> bool:
        return self.kind is NodeKind.END

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT

    @property
    def is_significant_whitespace(self) -> bool:
        return self.kind is NodeKind.SIGNIFICANT_WHITESPACE

    @property
    def path_string(self) -> str:
        return "/" + "/".join(self.path)

    def has_attribute(self, name: str) -> bool:
        return self._attribute_key(name) is not None

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        key = self._attribute_key(name)
        return self.attributes[key] if key is not None else default

    def _attribute_key(self, name: str) -> str | None:
        if name in self.attributes:
            return name
        # Prefixed lookups such as "r:id" match on the local part.
        local = name.rsplit(":", 1)[-1]
        suffix = "}" + local
        for key in self.attributes:
            if key.endswith(suffix):
                return key
        return None


@dataclass(slots=True)
class _Frame:
    element: ET.Element
    depth: int
    path: tuple[str, ...]
    preserve_space: bool
    leading_emitted: bool = False
    last_child: ET.Element | None = None


def split_qualified_name(tag: str) -> tuple[str | None, str]:
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return None, tag


class XmlCursor:
    def __init__(
        self,
        stream: BinaryIO,
        *,
        source: str = "<stream>",
        chunk_size: int = DEFAULT_XML_CHUNK_BYTES,
    ) -> None:
        self.source = source
        self._stream: BinaryIO | None = stream
        self._chunk_size = max(1, int(chunk_size))
        self._nodes = self._generate()

    def __iter__(self) -> Iterator[XmlNode]:
        return self

    def __next__(self) -> XmlNode:
        return next(self._nodes)

    def __enter__(self) -> XmlCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._stream is None

    def close(self) -> None:
        self._nodes.close()
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def _generate(self) -> Iterator[XmlNode]:
        parser = ET.XMLPullParser(events=("start", "end"))
        stack: list[_Frame] = []
        try:
            while self._stream is not None:
                chunk = self._stream.read(self._chunk_size)
                if chunk:
                    parser.feed(chunk)
                else:
                    parser.close()
                for event, element in parser.read_events():
                    if event == "start":
                        yield from self._start(element, stack)
                    else:
                        yield from self._end(stack)
                if not chunk:
                    break
        except ET.ParseError as exc:
            raise MalformedPartError(f"Malformed XML in {self.source}: {exc}") from exc
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def _start(self, element: ET.Element, stack: list[_Frame]) -> Iterator[XmlNode]:
        namespace, local = split_qualified_name(element.tag)
        if stack:
            parent = stack[-1]
            yield from self._pending_text(parent)
            depth = parent.depth + 1
            path = parent.path + (local,)
            inherited = parent.preserve_space
        else:
            depth = 0
            path = (local,)
            inherited = False

        space = element.attrib.get(XML_SPACE_ATTRIBUTE)
        preserve = inherited if space is None else space == "preserve"
        stack.append(_Frame(element=element, depth=depth, path=path, preserve_space=preserve))

        yield XmlNode(
            kind=NodeKind.START,
            qualified_name=element.tag,
            local_name=local,
            namespace=namespace,
            depth=depth,
            path=path,
            attributes=dict(element.attrib) if element.attrib else _EMPTY_ATTRIBUTES,
        )

    def _end(self, stack: list[_Frame]) -> Iterator[XmlNode]:
        frame = stack[-1]
        yield from self._pending_text(frame)
        stack.pop()

        element = frame.element
        namespace, local = split_qualified_name(element.tag)
        yield XmlNode(
            kind=NodeKind.END,
            qualified_name=element.tag,
            local_name=local,
            namespace=namespace,
            depth=frame.depth,
            path=frame.path,
        )
        if stack:
            stack[-1].last_child = element

    def _pending_text(self, frame: _Frame) -> Iterator[XmlNode]:
        if not frame.leading_emitted:
            frame.leading_emitted = True
            text = frame.element.text
        elif frame.last_child is not None:
            child = frame.last_child
            frame.last_child = None
            text = child.tail
            frame.element.remove(child)
        else:
            return
        if not text:
            return

        if text.strip():
            kind = NodeKind.TEXT
        elif frame.preserve_space:
            kind = NodeKind.SIGNIFICANT_WHITESPACE
        else:
            kind = NodeKind.WHITESPACE
        yield XmlNode(
            kind=kind,
            qualified_name="#text",
            local_name="#text",
            namespace=None,
            depth=frame.depth + 1,
            path=frame.path,
            value=text,
        )
