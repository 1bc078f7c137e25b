"""Decoding of raw worksheet cell values.

Numbers carry no type of their own. Whether ``42732`` is a count or the
28th of December 2016 depends on the number format referenced by the cell
style, so the decoder needs the raw value, the type tag, the resolved
shared string and the format code together.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import Protocol

from sheetcache.core.errors import DecodeError, MalformedDateError
from sheetcache.core.number_formats import GENERAL_FORMAT_CODE
from sheetcache.domain.models.cell import CellType, DecodedValue

SECONDS_PER_DAY = 86_400
SECONDS_PER_HOUR = 3_600
SECONDS_PER_MINUTE = 60

# Excel treats 1900 as a leap year (KB 214326), so every serial past the
# fictitious 1900-02-29 is one day ahead of the real calendar.
LEAP_YEAR_BUG_SERIAL = 60

SERIAL_DATE_ANCHOR = datetime(1899, 12, 31)

DATE_TIME_MARKERS = ("e", "d", "h", "m", "s", "yy")

_BRACKETED_DIRECTIVE_RE = re.compile(r"(?<!\\)\[.+?(?<!\\)\]")


class RawCell(Protocol):
    type: str | None
    raw_value: str | None
    shared_text: str | None
    format_code: str | None


class ValueDecoder:
    def __init__(self) -> None:
        self._date_time_formats: dict[str, bool] = {}

    def decode(self, cell: RawCell) -> DecodedValue:
        cell_type = CellType.from_tag(cell.type)

        if cell_type is CellType.BOOLEAN:
            return cell.raw_value == "1"
        if cell_type is CellType.DATE:
            return self._decode_iso_date(cell.raw_value)
        if cell_type is CellType.NUMBER:
            return self._decode_number(cell.raw_value, cell.format_code)
        if cell_type is CellType.SHARED_STRING:
            return cell.shared_text
        return cell.raw_value

    def is_date_time_format(self, format_code: str) -> bool:
        cached = self._date_time_formats.get(format_code)
        if cached is None:
            stripped = _BRACKETED_DIRECTIVE_RE.sub("", format_code)
            cached = any(marker in stripped for marker in DATE_TIME_MARKERS)
            self._date_time_formats[format_code] = cached
        return cached

    def clear_cache(self) -> None:
        self._date_time_formats.clear()

    def _decode_number(self, raw_value: str | None, format_code: str | None) -> DecodedValue:
        """Decode a numeric cell, as a date/time when its format says so.

        ``General`` counts as no format at all even though it contains an
        ``e``, so plain numbers are never read as dates.
        """
        if raw_value is None:
            return None
        if (
            format_code is not None
            and format_code != GENERAL_FORMAT_CODE
            and self.is_date_time_format(format_code)
        ):
            return decode_serial_date_time(_parse_float(raw_value))
        if "." not in raw_value:
            try:
                return int(raw_value)
            except ValueError:
                # Exponent notation such as "1E+20".
                return _parse_float(raw_value)
        return _parse_float(raw_value)

    @staticmethod
    def _decode_iso_date(raw_value: str | None) -> datetime:
        try:
            return datetime.fromisoformat(str(raw_value).strip())
        except ValueError as exc:
            raise MalformedDateError(f"Invalid ISO 8601 date value: {raw_value!r}") from exc


def decode_serial_date_time(value: float) -> datetime | timedelta:
    if math.ceil(value) > LEAP_YEAR_BUG_SERIAL:
        value -= 1
    if value >= 1:
        return decode_serial_date(value)
    return decode_serial_time(value)


def decode_serial_date(value: float) -> datetime:
    days = int(value)
    seconds = _round_half_away(SECONDS_PER_DAY * (value - days))
    return SERIAL_DATE_ANCHOR + timedelta(days=days, seconds=seconds)


def decode_serial_time(value: float) -> timedelta:
    seconds = _round_half_away(SECONDS_PER_DAY * value)

    hours = seconds // SECONDS_PER_HOUR
    seconds -= hours * SECONDS_PER_HOUR

    minutes = seconds // SECONDS_PER_MINUTE
    seconds -= minutes * SECONDS_PER_MINUTE

    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def _parse_float(raw_value: str) -> float:
    try:
        return float(raw_value)
    except ValueError as exc:
        raise DecodeError(f"Invalid numeric cell value: {raw_value!r}") from exc


def _round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)
