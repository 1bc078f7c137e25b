from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from sheetcache.application.worksheet import Worksheet
from sheetcache.core.config import StagingSettings, load_settings
from sheetcache.core.decoder import ValueDecoder
from sheetcache.core.errors import MissingPartError, NoSuchWorksheetError, WorkbookClosedError
from sheetcache.domain.models.workbook import RelationshipRecord, WorksheetRecord
from sheetcache.infrastructure.archive.store import (
    SHARED_STRINGS_PART,
    STYLES_PART,
    WORKBOOK_PART,
    WORKBOOK_RELATIONSHIPS_PART,
    WorkbookArchive,
    default_worksheet_part,
    resolve_part_target,
)
from sheetcache.infrastructure.db.repos.cell_repo import CellRepo
from sheetcache.infrastructure.db.repos.number_format_repo import NumberFormatRepo
from sheetcache.infrastructure.db.repos.shared_string_repo import SharedStringRepo
from sheetcache.infrastructure.db.repos.style_repo import CellStyleRepo, StylesImporter
from sheetcache.infrastructure.db.repos.worksheet_repo import WorksheetRepo
from sheetcache.infrastructure.db.sqlite import StagingDatabase, open_staging_database
from sheetcache.infrastructure.readers.relationships_reader import RelationshipsReader
from sheetcache.infrastructure.readers.shared_strings_reader import SharedStringsReader
from sheetcache.infrastructure.readers.styles_reader import StylesReader
from sheetcache.infrastructure.readers.workbook_reader import WorkbookReader
from sheetcache.infrastructure.readers.worksheet_reader import WorksheetReader

logger = logging.getLogger(__name__)

SHARED_STRINGS_RELATIONSHIP = "sharedStrings"
STYLES_RELATIONSHIP = "styles"


class Workbook:
    """Read access to one ``.xlsx`` archive, backed by a private staging database.

    Opening a workbook only imports the worksheet listing. Styles, shared
    strings and a worksheet's cells are imported the first time that
    worksheet is fetched, and every later lookup is answered from the
    staging database.
    """

    def __init__(self, path: Path | str, settings: StagingSettings | None = None) -> None:
        self.settings = settings or load_settings()
        self.archive = WorkbookArchive.open(path)
        self.path = self.archive.path
        self._database: StagingDatabase | None = None
        try:
            if not self.archive.has_entry(WORKBOOK_PART):
                raise MissingPartError(f"Workbook manifest {WORKBOOK_PART} is missing from {self.path}")
            self._database = open_staging_database(self.settings)
            self._worksheets_repo = WorksheetRepo(self._database)
            self._formats = NumberFormatRepo(self._database)
            self._styles = CellStyleRepo(self._database)
            self._strings = SharedStringRepo(self._database)
            self._cells = CellRepo(self._database)
            self._decoder = ValueDecoder()
            self._formats.seed_builtin()

            self._relationships = self._read_relationships()
            self._worksheets_repo.import_records(self._read_manifest())
        except BaseException:
            self._teardown()
            raise

        self._styles_imported = False
        self._strings_imported = False
        self._materialized: dict[int, Worksheet] = {}
        logger.info("Opened workbook %s with %d worksheet(s)", self.path, self.count_worksheets())

    def __enter__(self) -> Workbook:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Workbook(path={str(self.path)!r}, closed={self.closed!r})"

    @property
    def closed(self) -> bool:
        return self._database is None

    @property
    def database(self) -> StagingDatabase:
        self._ensure_open()
        assert self._database is not None
        return self._database

    def close(self) -> None:
        if self._database is None:
            return
        self._teardown()
        self._materialized.clear()
        logger.debug("Closed workbook %s", self.path)

    def count_worksheets(self) -> int:
        self._ensure_open()
        return self._worksheets_repo.count()

    def has_worksheet_by_index(self, index: int) -> bool:
        self._ensure_open()
        return self._worksheets_repo.has_index(index)

    def has_worksheet_by_name(self, name: str) -> bool:
        self._ensure_open()
        return self._worksheets_repo.has_name(name)

    def list_worksheets(self) -> dict[int, str]:
        self._ensure_open()
        return self._worksheets_repo.list_names()

    def worksheet_records(self) -> list[WorksheetRecord]:
        self._ensure_open()
        return self._worksheets_repo.list_records()

    def get_worksheet_by_index(self, index: int) -> Worksheet:
        self._ensure_open()
        cached = self._materialized.get(index)
        if cached is not None:
            return cached
        record = self._worksheets_repo.get_by_index(index)
        if record is None:
            raise NoSuchWorksheetError(f"No worksheet with index {index} in {self.path}")
        return self._materialize(record)

    def get_worksheet_by_name(self, name: str) -> Worksheet:
        self._ensure_open()
        index = self._worksheets_repo.get_index_by_name(name)
        if index is None:
            raise NoSuchWorksheetError(f'No worksheet named "{name}" in {self.path}')
        return self.get_worksheet_by_index(index)

    def iterate_worksheets(self) -> Iterator[tuple[int, Worksheet]]:
        for index in self.list_worksheets():
            yield index, self.get_worksheet_by_index(index)

    def _materialize(self, record: WorksheetRecord) -> Worksheet:
        self._import_styles()
        self._import_shared_strings()

        part = record.part_path or default_worksheet_part(record.index)
        if not self.archive.has_entry(part):
            raise MissingPartError(f'Worksheet "{record.name}" part {part} is missing from {self.path}')
        with self._reader(WorksheetReader, part) as reader:
            self._cells.import_cells(record.index, reader)

        worksheet = Worksheet(record.index, record.name, self._cells, self._decoder, self._ensure_open)
        self._materialized[record.index] = worksheet
        logger.debug('Materialised worksheet "%s" (index %d) from %s', record.name, record.index, part)
        return worksheet

    def _import_styles(self) -> None:
        if self._styles_imported:
            return
        part = self._related_part(STYLES_RELATIONSHIP, STYLES_PART)
        if self.archive.has_entry(part):
            with self._reader(StylesReader, part) as reader:
                StylesImporter(self._formats, self._styles).import_records(reader)
        else:
            logger.info("No styles part in %s; numbers decode without formats", self.path)
        self._styles_imported = True

    def _import_shared_strings(self) -> None:
        if self._strings_imported:
            return
        part = self._related_part(SHARED_STRINGS_RELATIONSHIP, SHARED_STRINGS_PART)
        if self.archive.has_entry(part):
            with self._reader(SharedStringsReader, part) as reader:
                self._strings.import_records(reader)
        else:
            logger.info("No shared strings part in %s", self.path)
        self._strings_imported = True

    def _read_relationships(self) -> dict[str, RelationshipRecord]:
        if not self.archive.has_entry(WORKBOOK_RELATIONSHIPS_PART):
            logger.debug("No workbook relationships in %s; using default part names", self.path)
            return {}
        with self._reader(RelationshipsReader, WORKBOOK_RELATIONSHIPS_PART) as reader:
            return {relationship.id: relationship for relationship in reader}

    def _read_manifest(self) -> Iterator[WorksheetRecord]:
        with self._reader(WorkbookReader, WORKBOOK_PART) as reader:
            for record in reader:
                relationship = self._relationships.get(record.relationship_id or "")
                if relationship is not None:
                    record.part_path = resolve_part_target(relationship.target)
                else:
                    record.part_path = default_worksheet_part(record.index)
                yield record

    def _related_part(self, type_name: str, default: str) -> str:
        for relationship in self._relationships.values():
            if relationship.type_name == type_name:
                return resolve_part_target(relationship.target)
        return default

    def _reader(self, reader_cls, part: str):
        return reader_cls(
            self.archive.opener(part),
            source=part,
            chunk_size=self.settings.xml_chunk_bytes,
        )

    def _ensure_open(self) -> None:
        if self._database is None:
            raise WorkbookClosedError(f"Workbook {self.path} is closed.")

    def _teardown(self) -> None:
        try:
            if self._database is not None:
                self._database.close()
        finally:
            self._database = None
            self.archive.close()


def open_workbook(path: Path | str, settings: StagingSettings | None = None) -> Workbook:
    return Workbook(path, settings)
