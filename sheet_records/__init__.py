"""
sheet-records: map spreadsheet rows onto typed Python records.

Public API surface:

- ``parse_sheet(record_cls, config, fetcher)`` -- **recommended entry
  point**.  Fetches one sheet, resolves its header row against the
  record's fields (column alias first, then field name), coerces every
  cell to the field's type, and returns the records in row order.

- ``parse_into(...)`` -- same call, named after the generic
  ``parse_into[Record](config)`` usage.

- ``records_to_frame(records, record_cls)`` -- pandas DataFrame with one
  column per record field, for analysis after parsing.

Record types are dataclasses or pydantic models (see ``schema`` for the
supported annotations), or explicit ``RecordType`` descriptions.

Example::

    from dataclasses import dataclass
    from datetime import datetime

    import sheet_records
    from sheet_records import SheetConfig, UInt, column
    from sheet_records.fetchers import CsvDirectoryFetcher

    @dataclass
    class User:
        ID: UInt = 0
        Name: str = ""
        CreatedAt: datetime | None = column("Created At", default=None)

    users = sheet_records.parse_sheet(
        User,
        SheetConfig(spreadsheet_id="exports/crm", datetime_formats=["%d.%m.%Y"]),
        CsvDirectoryFetcher(),
    )   # reads exports/crm/Users.csv
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import pandas as pd

from sheet_records.coercion import DEFAULT_DATETIME_FORMATS, DatetimeFormatSet, coerce_cell
from sheet_records.config import SheetConfig, load_config, save_config
from sheet_records.exceptions import (
    ConfigurationError,
    ConfigValidationError,
    EmptyTableError,
    FieldNotFoundError,
    InvalidBooleanError,
    InvalidDateTimeError,
    InvalidNumberError,
    InvalidValueError,
    LocatedError,
    MissingSourceIDError,
    MissingTableNameError,
    SchemaError,
    SheetRecordsError,
    TransportError,
    UnsupportedTypeError,
)
from sheet_records.fetchers.base import BaseFetcher, CancelToken
from sheet_records.headers import FieldMapping, resolve_headers
from sheet_records.naming import column_name, pluralize
from sheet_records.pipeline import PipelineResult, SheetPipeline
from sheet_records.schema import FieldKind, FieldSpec, RecordType, UInt, column, record_type

__all__ = [
    "parse_sheet",
    "parse_into",
    "records_to_frame",
    # configuration
    "SheetConfig",
    "load_config",
    "save_config",
    "DatetimeFormatSet",
    "DEFAULT_DATETIME_FORMATS",
    # schema
    "FieldKind",
    "FieldSpec",
    "RecordType",
    "UInt",
    "column",
    "record_type",
    # engine pieces
    "FieldMapping",
    "PipelineResult",
    "SheetPipeline",
    "coerce_cell",
    "column_name",
    "pluralize",
    "resolve_headers",
    # errors
    "ConfigurationError",
    "ConfigValidationError",
    "EmptyTableError",
    "FieldNotFoundError",
    "InvalidBooleanError",
    "InvalidDateTimeError",
    "InvalidNumberError",
    "InvalidValueError",
    "LocatedError",
    "MissingSourceIDError",
    "MissingTableNameError",
    "SchemaError",
    "SheetRecordsError",
    "TransportError",
    "UnsupportedTypeError",
]

logger = logging.getLogger(__name__)


def parse_sheet(
    target: type | RecordType,
    config: SheetConfig,
    fetcher: BaseFetcher,
    *,
    cancel: CancelToken | None = None,
) -> list[Any]:
    """Parse one sheet into a list of *target* records.

    Args:
        target: Record class (dataclass / pydantic model) or ``RecordType``.
        config: Spreadsheet id, optional sheet name, extra datetime formats.
        fetcher: Collaborator that returns the raw grid.
        cancel: Optional cancel token passed to the fetcher unchanged.

    Returns:
        One record per data row, in sheet order.

    Raises:
        SheetRecordsError: Any pipeline failure (see ``SheetPipeline.run``).
    """
    return SheetPipeline(fetcher).run(target, config, cancel=cancel).records


parse_into = parse_sheet


def records_to_frame(records: Iterable[Any], target: type | RecordType) -> pd.DataFrame:
    """Tabulate parsed records, one column per field in declaration order.

    Works for dataclass instances, pydantic models and dict records
    produced by a builder ``RecordType``.
    """
    record = record_type(target)
    names = record.field_names
    rows = []
    for item in records:
        if isinstance(item, dict):
            rows.append([item.get(name) for name in names])
        else:
            rows.append([getattr(item, name) for name in names])
    return pd.DataFrame(rows, columns=names)
