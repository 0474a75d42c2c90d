"""
Sheet-to-records pipeline for sheet-records.

Runs one sheet through the full sequence:

1. **Schema**: describe the record type (``UnsupportedTypeError`` fires
   here, before any data is touched).
2. **Validate**: resolve the sheet name (explicit or pluralized record
   name) and check the spreadsheet id / sheet name are present.
3. **Fetch**: ask the injected fetcher for the raw grid.  Fetcher
   failures surface as ``TransportError``.
4. **Headers**: map header cells to record fields.
5. **Normalize**: pad every row to the widest row with empty cells.
6. **Coerce**: convert every mapped cell of every data row.
7. **Assemble**: build one record per data row, in row order.

Any failure aborts the whole call; no partial record list is returned.
Errors raised past this point carry the sheet name as context.

The pipeline is **stateless**: the fetcher is its only dependency and
nothing is cached between ``run()`` calls, so one instance can serve
concurrent calls as long as the fetcher can.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sheet_records.coercion import DatetimeFormatSet, coerce_cell
from sheet_records.config import SheetConfig
from sheet_records.exceptions import (
    EmptyTableError,
    MissingSourceIDError,
    MissingTableNameError,
    SheetRecordsError,
    TransportError,
)
from sheet_records.fetchers.base import BaseFetcher, CancelToken, RawTable
from sheet_records.headers import FieldMapping, resolve_headers
from sheet_records.schema import RecordType, record_type

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of one pipeline run.

    Attributes:
        records: Parsed records, one per data row, in sheet order.
        table_name: The sheet that was read.
        mapping: The header mapping that was applied.
        width: Row width after normalization.
    """

    records: list[Any] = field(default_factory=list)
    table_name: str = ""
    mapping: list[FieldMapping] = field(default_factory=list)
    width: int = 0


def normalize_rows(rows: RawTable) -> int:
    """Pad every row in place to the widest row's length.

    Returns:
        The common width after padding.
    """
    width = max((len(row) for row in rows), default=0)
    for row in rows:
        if len(row) < width:
            row.extend([""] * (width - len(row)))
    return width


def parse_rows(
    record: RecordType,
    mapping: list[FieldMapping],
    rows: RawTable,
    formats: DatetimeFormatSet,
    *,
    empty_as_zero: bool = False,
) -> list[Any]:
    """Coerce and assemble the data rows (``rows[1:]``) of a normalized grid.

    Row numbers in errors are spreadsheet row numbers: the first data
    row is row 2.
    """
    records: list[Any] = []
    for row_number, row in enumerate(rows[1:], start=2):
        values = {
            m.field.name: coerce_cell(
                m.field, row[m.column], formats, m.column, row_number,
                empty_as_zero=empty_as_zero,
            )
            for m in mapping
        }
        records.append(record.new_record(values))
    return records


class SheetPipeline:
    """Orchestrates fetch -> headers -> normalize -> coerce -> assemble.

    Args:
        fetcher: The collaborator that returns raw grids.  Passed in
            explicitly; there is no module-level client.
    """

    def __init__(self, fetcher: BaseFetcher) -> None:
        self.fetcher = fetcher

    def run(
        self,
        target: type | RecordType,
        config: SheetConfig,
        *,
        cancel: CancelToken | None = None,
    ) -> PipelineResult:
        """Parse one sheet into records of *target*.

        Args:
            target: A dataclass, a pydantic model or a ``RecordType``.
            config: Spreadsheet id, optional sheet name, datetime formats.
            cancel: Optional cancel token handed to the fetcher unchanged.

        Returns:
            ``PipelineResult`` with the records and the applied mapping.

        Raises:
            UnsupportedTypeError: If the record type declares an
                unsupported field type.
            MissingSourceIDError: If ``config.spreadsheet_id`` is empty.
            MissingTableNameError: If no sheet name can be resolved.
            TransportError: If the fetcher fails.
            EmptyTableError: If the sheet has no header row.
            FieldNotFoundError: If a header matches no field.
            InvalidNumberError, InvalidBooleanError, InvalidDateTimeError:
                If a cell cannot be coerced.
        """
        # -- Step 1: Schema ------------------------------------------------
        record = record_type(target)

        # -- Step 2: Validate configuration --------------------------------
        table_name = config.resolve_sheet_name(record.name)
        if not config.spreadsheet_id:
            raise MissingSourceIDError()
        if not table_name:
            raise MissingTableNameError()
        formats = config.datetime_format_set()

        logger.info(
            "Parsing sheet '%s' of %s into %s",
            table_name, config.spreadsheet_id, record.name,
        )

        # -- Step 3: Fetch -------------------------------------------------
        rows = self._fetch(config.spreadsheet_id, table_name, cancel)
        if not rows:
            raise EmptyTableError("sheet has no header row", table=table_name)

        try:
            # -- Step 4: Headers -------------------------------------------
            mapping = resolve_headers(record, rows[0])

            # -- Step 5: Normalize widths ----------------------------------
            width = normalize_rows(rows)

            # -- Step 6/7: Coerce + assemble -------------------------------
            records = parse_rows(
                record, mapping, rows, formats,
                empty_as_zero=config.empty_cells_as_zero,
            )
        except SheetRecordsError as exc:
            raise exc.with_table(table_name)

        logger.info(
            "Parsed %d %s record(s) from '%s' (%d mapped column(s))",
            len(records), record.name, table_name, len(mapping),
        )
        return PipelineResult(
            records=records,
            table_name=table_name,
            mapping=mapping,
            width=width,
        )

    def _fetch(
        self,
        source_id: str,
        table_name: str,
        cancel: CancelToken | None,
    ) -> RawTable:
        try:
            rows = self.fetcher.fetch(source_id, table_name, cancel=cancel)
        except SheetRecordsError as exc:
            raise exc.with_table(table_name)
        except Exception as exc:
            logger.error("Fetch failed for '%s': %s", table_name, exc)
            raise TransportError(str(exc) or type(exc).__name__, table=table_name) from exc
        # Work on a private copy so padding never mutates the fetcher's data
        return [[str(cell) for cell in row] for row in rows]
