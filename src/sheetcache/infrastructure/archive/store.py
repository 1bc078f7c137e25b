from __future__ import annotations

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Callable

from sheetcache.core.errors import InvalidArchiveError, MissingPartError

logger = logging.getLogger(__name__)

WORKBOOK_PART = "xl/workbook.xml"
WORKBOOK_RELATIONSHIPS_PART = "xl/_rels/workbook.xml.rels"
SHARED_STRINGS_PART = "xl/sharedStrings.xml"
STYLES_PART = "xl/styles.xml"

EntryOpener = Callable[[], BinaryIO]


class WorkbookArchive:
    def __init__(self, path: Path, archive: zipfile.ZipFile) -> None:
        self.path = path
        self._archive: zipfile.ZipFile | None = archive
        self._names = set(archive.namelist())

    @classmethod
    def open(cls, path: Path | str) -> WorkbookArchive:
        resolved = Path(path).expanduser()
        if not resolved.is_file():
            raise InvalidArchiveError(f"Workbook file not found: {resolved}")
        if not zipfile.is_zipfile(resolved):
            raise InvalidArchiveError(f"Workbook is not a zip archive: {resolved}")
        try:
            archive = zipfile.ZipFile(resolved, "r")
        except (zipfile.BadZipFile, OSError) as exc:
            raise InvalidArchiveError(f"Workbook archive could not be opened: {resolved}") from exc
        logger.debug("Opened workbook archive %s (%d entries)", resolved, len(archive.namelist()))
        return cls(resolved, archive)

    def __enter__(self) -> WorkbookArchive:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._archive is None

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    def has_entry(self, name: str) -> bool:
        return name in self._names

    def open_entry(self, name: str) -> BinaryIO:
        if self._archive is None:
            raise InvalidArchiveError(f"Workbook archive is closed: {self.path}")
        if name not in self._names:
            raise MissingPartError(f"Entry {name!r} does not exist in workbook archive {self.path}")
        return self._archive.open(name, "r")

    def opener(self, name: str) -> EntryOpener:
        def _open() -> BinaryIO:
            return self.open_entry(name)

        return _open


def resolve_part_target(target: str, base_dir: str = "xl") -> str:
    normalized = target.replace("\\", "/").strip()
    if normalized.startswith("/"):
        normalized = normalized.lstrip("/")
    elif not normalized.startswith(f"{base_dir}/"):
        normalized = f"{base_dir}/{normalized}"
    parts: list[str] = []
    for segment in PurePosixPath(normalized).parts:
        if segment == "..":
            if parts:
                parts.pop()
        elif segment != ".":
            parts.append(segment)
    return "/".join(parts)


def default_worksheet_part(index: int) -> str:
    return f"xl/worksheets/sheet{index}.xml"
