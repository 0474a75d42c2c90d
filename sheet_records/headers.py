"""
Header resolution for sheet-records.

Turns the header row of a sheet into a ``FieldMapping`` list: one entry
per header cell, pairing the column index with the record field it
feeds.

Resolution rules, applied to each header cell left to right:

1. An empty header cell ends the mapping.  Columns to its right are
   ignored (they still count when rows are padded to equal width).
2. A field whose alias equals the header text wins.  If several fields
   declare the same alias, the first declared one wins.
3. Otherwise a field whose name equals the header text.
4. Otherwise ``FieldNotFoundError`` for that column on row 1.

Matching is exact: no trimming, no case folding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sheet_records.exceptions import FieldNotFoundError
from sheet_records.naming import column_name
from sheet_records.schema import FieldSpec, RecordType

logger = logging.getLogger(__name__)

HEADER_ROW_NUMBER = 1


@dataclass(frozen=True)
class FieldMapping:
    """A header column resolved to a record field."""

    column: int
    field: FieldSpec

    @property
    def column_letter(self) -> str:
        return column_name(self.column)


def resolve_field(record: RecordType, header: str) -> FieldSpec | None:
    """Find the field a header cell refers to (alias first, then name)."""
    return record.field_by_alias(header) or record.field_by_name(header)


def resolve_headers(record: RecordType, header_row: list[str]) -> list[FieldMapping]:
    """Build the column-to-field mapping for *header_row*.

    Args:
        record: The target record description.
        header_row: Row 0 of the sheet.

    Returns:
        One ``FieldMapping`` per leading non-empty header cell, in
        header order.

    Raises:
        FieldNotFoundError: If a header cell matches no alias or field name.
    """
    mappings: list[FieldMapping] = []
    for col_idx, header in enumerate(header_row):
        if header == "":
            break
        spec = resolve_field(record, header)
        if spec is None:
            raise FieldNotFoundError(column_name(col_idx), HEADER_ROW_NUMBER, header)
        mappings.append(FieldMapping(column=col_idx, field=spec))

    logger.debug(
        "Resolved %d/%d header columns for %s",
        len(mappings), len(header_row), record.name,
    )
    return mappings
