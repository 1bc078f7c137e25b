from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Union

DecodedValue = Union[bool, int, float, str, datetime, timedelta, None]


class CellType(Enum):
    BOOLEAN = "b"
    DATE = "d"
    ERROR = "e"
    INLINE_STRING = "inlineStr"
    NUMBER = "n"
    SHARED_STRING = "s"
    FORMULA_STRING = "str"
    OTHER = "?"

    @classmethod
    def from_tag(cls, tag: str | None) -> CellType:
        if tag is None:
            return cls.NUMBER
        for member in cls:
            if member is not cls.OTHER and member.value == tag:
                return member
        return cls.OTHER


@dataclass(slots=True)
class CellRecord:
    worksheet: int
    column: int
    row: int
    type: str | None = None
    style_id: int | None = None
    raw_value: str | None = None
    shared_string_ref: int | None = None

    @property
    def is_shared_string(self) -> bool:
        return self.type == CellType.SHARED_STRING.value


@dataclass(slots=True)
class ParsedCell:
    """A cell as read from a worksheet part, before it is tied to a sheet."""

    column: str
    row: int
    raw_value: str | None
    type: str | None = None
    style_id: int | None = None


@dataclass(slots=True)
class ResolvedCell:
    """A stored cell joined with its shared string and number format."""

    column: str
    row: int
    type: str | None
    raw_value: str | None
    shared_text: str | None = None
    format_code: str | None = None
