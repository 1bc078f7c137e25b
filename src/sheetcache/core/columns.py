"""Spreadsheet column names and cell references.

Column names are bijective base-26 numerals: ``A`` is 1, ``Z`` is 26 and
``AA`` is 27. There is no zero digit.
"""

from __future__ import annotations

import re

from sheetcache.core.errors import InvalidCellReferenceError

_ALPHABET = 26
_REFERENCE_RE = re.compile(r"^([A-Za-z]+)([0-9]+)$")


def name_to_index(name: str) -> int:
    letters = str(name or "").strip().upper()
    if not letters or not letters.isascii() or not letters.isalpha():
        raise InvalidCellReferenceError(f"Invalid column name: {name!r}")
    index = 0
    for letter in letters:
        index = index * _ALPHABET + (ord(letter) - ord("A") + 1)
    return index


def index_to_name(index: int) -> str:
    letters: list[str] = []
    while index > 0:
        digit = (index - 1) % _ALPHABET
        letters.append(chr(ord("A") + digit))
        index = (index - 1 - digit) // _ALPHABET
    return "".join(reversed(letters))


def split_reference(reference: str) -> tuple[str, int]:
    match = _REFERENCE_RE.match(str(reference or "").strip())
    if match is None:
        raise InvalidCellReferenceError(f"Invalid cell reference: {reference!r}")
    return match.group(1).upper(), int(match.group(2))


def format_reference(column: str | int, row: int) -> str:
    name = index_to_name(column) if isinstance(column, int) else str(column).upper()
    return f"{name}{row}"
