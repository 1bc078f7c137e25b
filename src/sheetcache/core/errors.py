class SheetCacheError(Exception):
    """Base error for all user-facing sheetcache exceptions."""


class ConfigurationError(SheetCacheError):
    """Raised when configuration is invalid or incomplete."""


class ValidationError(SheetCacheError):
    """Raised when caller input fails basic invariants."""


class InvalidCellReferenceError(ValidationError):
    """Raised when a column name or cell reference cannot be parsed."""


class ArchiveError(SheetCacheError):
    """Raised when the workbook archive cannot be read."""


class InvalidArchiveError(ArchiveError):
    """Raised when the workbook file is missing or is not a zip archive."""


class MissingPartError(ArchiveError):
    """Raised when a required entry is absent from the workbook archive."""


class ReaderError(SheetCacheError):
    """Raised when a part reader cannot produce records."""


class InvalidReaderStateError(ReaderError):
    """Raised when a reader is advanced before it has been started."""


class MalformedPartError(ReaderError):
    """Raised when an archive entry is not well-formed XML."""


class DecodeError(SheetCacheError):
    """Raised when a raw cell value cannot be decoded."""


class MalformedDateError(DecodeError):
    """Raised when an ISO 8601 cell value cannot be parsed."""


class StagingStoreError(SheetCacheError):
    """Raised when the staging database fails."""


class StatementPrepareError(StagingStoreError):
    """Raised when an SQL statement cannot be compiled."""


class StatementExecutionError(StagingStoreError):
    """Raised when a prepared SQL statement fails to execute."""


class StatementInUseError(StagingStoreError):
    """Raised when a statement is checked out while still in use."""


class NoSuchResultColumnError(StagingStoreError):
    """Raised when a result set is keyed by a column it does not contain."""


class TransactionError(StagingStoreError):
    """Raised when transaction control fails."""


class TransactionBeginError(TransactionError):
    """Raised when a transaction cannot begin."""


class TransactionCommitError(TransactionError):
    """Raised when a transaction cannot be committed."""


class TransactionRollbackError(TransactionError):
    """Raised when a failed transaction cannot be rolled back."""


class WorkbookError(SheetCacheError):
    """Raised when workbook operations fail."""


class NoSuchWorksheetError(WorkbookError):
    """Raised when a worksheet index or name is not in the workbook."""


class WorkbookClosedError(WorkbookError):
    """Raised when a closed workbook handle is used."""


class WorksheetError(SheetCacheError):
    """Raised when worksheet queries fail."""


class NoSuchCellError(WorksheetError):
    """Raised when a cell does not exist in a worksheet."""


class NoSuchRowError(WorksheetError):
    """Raised when a row has no cells in a worksheet."""


class NoSuchColumnError(WorksheetError):
    """Raised when a column has no cells in a worksheet."""
