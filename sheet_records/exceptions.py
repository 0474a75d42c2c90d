"""
Custom exception hierarchy for sheet-records.

Why a custom hierarchy:
- Callers can catch specific exceptions (e.g., FieldNotFoundError vs
  InvalidNumberError) without relying on generic ValueError/RuntimeError.
- Cell-level errors carry the sheet coordinates (column letter + row
  number) of the offending cell, so a user can jump straight to it in
  the spreadsheet without re-scanning.

Row numbers are spreadsheet row numbers: the header row is row 1 and
the first data row is row 2.
"""

from __future__ import annotations


class SheetRecordsError(Exception):
    """Base exception for all sheet-records errors.

    Attributes:
        table: Name of the sheet/table being parsed, once known.  The
            pipeline attaches it while the error propagates.
    """

    def __init__(self, message: str = "", *, table: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.table = table

    def with_table(self, table: str) -> SheetRecordsError:
        """Attach table context (only if none was set) and return self."""
        if self.table is None:
            self.table = table
        return self

    def __str__(self) -> str:
        if self.table:
            return f"{self.table}: {self.message}"
        return self.message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(SheetRecordsError):
    """Raised when the pipeline configuration is incomplete or invalid."""


class MissingSourceIDError(ConfigurationError):
    """Raised when no spreadsheet / source identifier is configured.

    Always raised before any fetch is attempted.
    """

    def __init__(self) -> None:
        super().__init__("no spreadsheet id provided")


class MissingTableNameError(ConfigurationError):
    """Raised when the effective sheet name resolves to an empty string."""

    def __init__(self) -> None:
        super().__init__("no sheet name provided")


class ConfigValidationError(ConfigurationError):
    """Raised when a config YAML file is empty or structurally unusable."""


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class SchemaError(SheetRecordsError):
    """Raised when a record type cannot be described as a RecordType."""


class UnsupportedTypeError(SchemaError):
    """Raised when a record field declares a type the engine cannot coerce.

    This is a schema error, not a data error: it fires at schema
    registration time, independent of the rows being parsed.
    """

    def __init__(self, type_name: str, field_name: str | None = None) -> None:
        self.type_name = type_name
        self.field_name = field_name
        detail = f"unsupported type: {type_name}"
        if field_name:
            detail += f" (field '{field_name}')"
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Located (cell-level) errors
# ---------------------------------------------------------------------------

class LocatedError(SheetRecordsError):
    """An error tied to a specific cell of the sheet.

    Attributes:
        column: Spreadsheet column letter (``"A"``, ``"B"``, ... ``"AA"``).
        row: Spreadsheet row number (header row is 1).
        cell: The raw cell text that failed.
    """

    reason = "invalid value"

    def __init__(
        self,
        column: str,
        row: int,
        cell: str,
        *,
        table: str | None = None,
    ) -> None:
        self.column = column
        self.row = row
        self.cell = cell
        super().__init__(f"{column}{row}: {self.reason}: {cell!r}", table=table)

    @property
    def location(self) -> str:
        """A1-style cell reference, e.g. ``"B7"``."""
        return f"{self.column}{self.row}"


class FieldNotFoundError(LocatedError):
    """Raised when a header cell matches neither a field alias nor a field name."""

    reason = "field not found in record type"

    @property
    def header(self) -> str:
        return self.cell


class InvalidValueError(LocatedError):
    """Base class for cells whose text cannot be coerced to the field type."""


class InvalidNumberError(InvalidValueError):
    """Raised for non-numeric or out-of-range text in a numeric field."""

    reason = "invalid number"


class InvalidBooleanError(InvalidValueError):
    """Raised for text outside the accepted boolean lexicon."""

    reason = "invalid boolean"


class InvalidDateTimeError(InvalidValueError):
    """Raised when no configured datetime format parses the cell."""

    reason = "invalid datetime format"


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class TransportError(SheetRecordsError):
    """Raised when the fetch collaborator fails.

    The collaborator's original exception is chained as ``__cause__``;
    only the table name is added as context.
    """


class EmptyTableError(SheetRecordsError):
    """Raised when the fetched grid has no rows at all (not even a header)."""
