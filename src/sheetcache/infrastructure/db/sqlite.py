"""Disposable SQLite staging database.

Every workbook handle owns one ``StagingDatabase`` in a private temporary
file. Statements are checked out as ``StatementHandle`` tokens and must be
released before the same statement can be used again, so one result cursor
is never shared between two consumers.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
import tempfile
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from sheetcache.core.config import StagingSettings, load_settings
from sheetcache.core.errors import (
    ConfigurationError,
    NoSuchResultColumnError,
    StagingStoreError,
    StatementExecutionError,
    StatementInUseError,
    StatementPrepareError,
    TransactionBeginError,
    TransactionCommitError,
    TransactionRollbackError,
)
from sheetcache.core.files import ensure_directory, remove_quietly

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_SCHEMA_CHANGE_RE = re.compile(r"\b(CREATE|DROP|ALTER)\b", re.IGNORECASE)
_STAGING_FILE_SUFFIXES = ("", "-journal", "-wal", "-shm")

Parameters = Mapping[str, Any] | Sequence[Any]
T = TypeVar("T")


@dataclass(slots=True, eq=False)
class StatementHandle:
    sql: str
    cursor: sqlite3.Cursor

    def fetchone(self) -> sqlite3.Row | None:
        return self.cursor.fetchone()

    def fetchall(self) -> list[sqlite3.Row]:
        return self.cursor.fetchall()

    def __iter__(self) -> Iterator[sqlite3.Row]:
        return iter(self.cursor)


def _configure_connection(conn: sqlite3.Connection, settings: StagingSettings) -> None:
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute(f"PRAGMA journal_mode = {settings.journal_mode};")
    conn.execute(f"PRAGMA synchronous = {settings.synchronous};")
    conn.execute(f"PRAGMA cache_size = -{settings.cache_kib};")


def get_connection(db_path: Path, settings: StagingSettings | None = None) -> sqlite3.Connection:
    # Autocommit mode: transactions are opened explicitly with BEGIN.
    conn = sqlite3.connect(db_path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    _configure_connection(conn, settings or load_settings())
    return conn


def remove_staging_files(db_path: Path) -> None:
    for suffix in _STAGING_FILE_SUFFIXES:
        remove_quietly(db_path.with_name(db_path.name + suffix))


def _changes_schema(sql: str) -> bool:
    return _SCHEMA_CHANGE_RE.search(sql) is not None


def _describe_parameters(parameters: Parameters | None) -> str:
    if parameters is None:
        return "[]"
    if isinstance(parameters, Mapping):
        return json.dumps(dict(parameters), default=str)
    return json.dumps(list(parameters), default=str)


class StagingDatabase:
    def __init__(self, db_path: Path, connection: sqlite3.Connection) -> None:
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = connection
        self._compiled: set[str] = set()
        self._in_use: dict[str, StatementHandle] = {}

    @classmethod
    def create(cls, settings: StagingSettings | None = None) -> StagingDatabase:
        settings = settings or load_settings()
        if settings.staging_dir is not None:
            if settings.staging_dir.exists() and not settings.staging_dir.is_dir():
                raise ConfigurationError(f"Staging directory is not a directory: {settings.staging_dir}")
            ensure_directory(settings.staging_dir)
        handle = tempfile.NamedTemporaryFile(
            prefix="sheetcache-",
            suffix=".sqlite",
            dir=settings.staging_dir,
            delete=False,
        )
        handle.close()
        db_path = Path(handle.name)
        try:
            connection = get_connection(db_path, settings)
        except sqlite3.Error as exc:
            remove_staging_files(db_path)
            raise StagingStoreError(f"Staging database could not be created at {db_path}: {exc}") from exc
        logger.debug("Created staging database %s", db_path)
        return cls(db_path, connection)

    def __enter__(self) -> StagingDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._connection is None

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None and self._connection.in_transaction

    @property
    def checked_out(self) -> list[str]:
        return list(self._in_use)

    def prepare(self, sql: str) -> StatementHandle:
        conn = self._require_connection()
        if _changes_schema(sql):
            self._compiled.clear()
        if sql not in self._compiled:
            self._compile(conn, sql)
            self._compiled.add(sql)
        if sql in self._in_use:
            raise StatementInUseError(f'The prepared SQL statement "{sql}" is already in use.')

        handle = StatementHandle(sql=sql, cursor=conn.cursor())
        self._in_use[sql] = handle
        return handle

    def release(self, handle: StatementHandle) -> None:
        if self._in_use.get(handle.sql) is handle:
            del self._in_use[handle.sql]
        # Cursors of a closed connection were already closed by close().
        if self._connection is not None:
            handle.cursor.close()

    def execute(self, sql: str, parameters: Parameters | None = None) -> StatementHandle:
        handle = self.prepare(sql)
        try:
            handle.cursor.execute(sql, {} if parameters is None else parameters)
        except sqlite3.Error as exc:
            self.release(handle)
            raise StatementExecutionError(
                f'The SQL statement "{sql}" could not be executed with {_describe_parameters(parameters)}: {exc}'
            ) from exc
        return handle

    def execute_many(self, sql: str, rows: Iterable[Parameters]) -> int:
        handle = self.prepare(sql)
        try:
            handle.cursor.executemany(sql, rows)
            return handle.cursor.rowcount
        except sqlite3.Error as exc:
            raise StatementExecutionError(f'The SQL statement "{sql}" failed during a batch: {exc}') from exc
        finally:
            self.release(handle)

    def execute_script(self, script: str) -> None:
        conn = self._require_connection()
        if _changes_schema(script):
            self._compiled.clear()
        try:
            conn.executescript(script)
        except sqlite3.Error as exc:
            raise StatementExecutionError(f"The SQL script could not be executed: {exc}") from exc

    def row(self, sql: str, parameters: Parameters | None = None) -> sqlite3.Row | None:
        handle = self.execute(sql, parameters)
        try:
            return handle.fetchone()
        finally:
            self.release(handle)

    def column(self, sql: str, parameters: Parameters | None = None) -> Any:
        row = self.row(sql, parameters)
        return None if row is None else row[0]

    def all(
        self,
        sql: str,
        parameters: Parameters | None = None,
        *,
        key: str | None = None,
        value: str | None = None,
    ) -> list[sqlite3.Row] | dict[Any, Any]:
        handle = self.execute(sql, parameters)
        try:
            if key is None:
                return handle.fetchall()
            columns = [description[0] for description in handle.cursor.description or ()]
            if key not in columns:
                raise NoSuchResultColumnError(f'The column "{key}" is used as a key but does not exist.')
            if value is not None and value not in columns:
                raise NoSuchResultColumnError(f'The column "{value}" is used as a value but does not exist.')
            if value is None:
                return {row[key]: row for row in handle}
            return {row[key]: row[value] for row in handle}
        finally:
            self.release(handle)

    def iterate(self, sql: str, parameters: Parameters | None = None) -> Iterator[sqlite3.Row]:
        handle = self.execute(sql, parameters)
        try:
            yield from handle
        finally:
            self.release(handle)

    def begin(self) -> None:
        try:
            self.release(self.execute("BEGIN"))
        except StagingStoreError as exc:
            raise TransactionBeginError(f"The transaction could not begin: {exc}") from exc

    def commit(self) -> None:
        try:
            self.release(self.execute("COMMIT"))
        except StagingStoreError as exc:
            raise TransactionCommitError(f"The transaction could not be committed: {exc}") from exc

    def rollback(self) -> None:
        try:
            self.release(self.execute("ROLLBACK"))
        except StagingStoreError as exc:
            raise TransactionRollbackError(f"The transaction could not be rolled back: {exc}") from exc

    def transactional(self, unit: Callable[[StagingDatabase], T]) -> T:
        self.begin()
        try:
            result = unit(self)
        except BaseException as exc:
            try:
                self.rollback()
            except TransactionRollbackError as rollback_exc:
                raise rollback_exc from exc
            raise
        self.commit()
        return result

    def close(self) -> None:
        if self._connection is None:
            return
        leaked = list(self._in_use.values())
        if leaked:
            logger.debug("Releasing %d statement(s) still in use on close", len(leaked))
        for handle in leaked:
            handle.cursor.close()
        self._in_use.clear()
        self._compiled.clear()
        try:
            self._connection.close()
        finally:
            self._connection = None
            remove_staging_files(self.db_path)
            logger.debug("Removed staging database %s", self.db_path)

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StagingStoreError(f"Staging database is closed: {self.db_path}")
        return self._connection

    @staticmethod
    def _compile(conn: sqlite3.Connection, sql: str) -> None:
        try:
            conn.execute(f"EXPLAIN {sql}", {}).close()
        except sqlite3.ProgrammingError:
            # Compiled; parameters are only bound when the statement runs.
            return
        except sqlite3.Error as exc:
            raise StatementPrepareError(f'The SQL statement "{sql}" could not be prepared: {exc}') from exc


def initialize_schema(database: StagingDatabase, schema_path: Path = SCHEMA_PATH) -> None:
    database.execute_script(schema_path.read_text(encoding="utf-8"))


def open_staging_database(settings: StagingSettings | None = None) -> StagingDatabase:
    database = StagingDatabase.create(settings)
    try:
        initialize_schema(database)
    except BaseException:
        database.close()
        raise
    return database
