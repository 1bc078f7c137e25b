from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class WorksheetRecord:
    index: int
    name: str
    relationship_id: str | None = None
    state: str = "visible"
    part_path: str | None = None


@dataclass(slots=True)
class SharedStringRecord:
    index: int
    text: str


@dataclass(slots=True)
class NumberFormatRecord:
    id: int
    format_code: str


@dataclass(slots=True)
class CellStyleRecord:
    id: int
    applies_number_format: bool
    number_format_id: int


@dataclass(slots=True)
class RelationshipRecord:
    id: str
    type: str
    target: str

    @property
    def type_name(self) -> str:
        return self.type.rsplit("/", 1)[-1]
