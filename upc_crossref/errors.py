"""
Error taxonomy for UPC cross-referencing.

Every error carries enough context (source file, row, field, sku) to
find the offending input line without re-running anything.
"""

from typing import Optional


class CrossrefError(Exception):
    """Base class for every error raised by upc_crossref."""


class ConfigError(CrossrefError, ValueError):
    """Configuration file is present but not usable."""


class FileIOError(CrossrefError):
    """A file could not be opened, read or written."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot access {path}: {reason}")


class IncompleteRecordError(CrossrefError, ValueError):
    """A product was constructed without one of its required attributes."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Record is missing required field '{field}'")


class IngestError(CrossrefError, ValueError):
    """Base for row-level ingestion failures."""

    def __init__(self, message: str, source: Optional[str] = None, row: Optional[int] = None):
        self.source = source
        self.row = row
        location = f"{source} row {row}" if source else f"row {row}"
        super().__init__(f"{location}: {message}")


class ExportLayoutError(CrossrefError, ValueError):
    """A vendor export cannot be read as a product table."""

    def __init__(self, source, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class MissingFieldError(IngestError):
    """A required column is absent or blank at a row."""

    def __init__(self, row: int, field: str, source: Optional[str] = None):
        self.field = field
        super().__init__(f"missing required field '{field}'", source, row)


class MalformedValueError(IngestError):
    """A column is present but its text cannot be parsed."""

    def __init__(self, row: int, field: str, raw: str, source: Optional[str] = None):
        self.field = field
        self.raw = raw
        super().__init__(f"malformed value for '{field}': {raw!r}", source, row)


class MissingBaseRecordError(IngestError):
    """A posted row references a sku the item file never produced."""

    def __init__(self, sku: str, row: int, source: Optional[str] = None):
        self.sku = sku
        super().__init__(f"missing base record for sku '{sku}'", source, row)


class SkuCollisionError(IngestError):
    """Upper-casing a posted sku would merge two distinct item records."""

    def __init__(self, sku: str, other: str, row: int, source: Optional[str] = None):
        self.sku = sku
        self.other = other
        super().__init__(
            f"posted sku '{sku}' collides with item sku '{other}' once upper-cased", source, row
        )


class AutomationError(CrossrefError):
    """Raised by an inventory edit port when an operation fails."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class FixupError(CrossrefError):
    """A fix-up step failed for one matched item."""

    def __init__(self, sku: str, step: str, cause: Exception):
        self.sku = sku
        self.step = step
        self.cause = cause
        super().__init__(f"Fix-up of {sku} failed at step '{step}': {cause}")


class SessionBusyError(CrossrefError, RuntimeError):
    """The edit port is already owned by another session."""
