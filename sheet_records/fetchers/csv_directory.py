"""
CSV directory fetcher for sheet-records.

Treats a directory as a spreadsheet and each ``<sheet name>.csv`` inside
it as one sheet, which is what "Download as CSV" per sheet produces.

The file is read with pandas as all-string cells (``dtype=str``,
``keep_default_na=False``) so nothing is coerced before the pipeline
sees it.  The widest row (not the header row) sets the column count,
so data rows may run past the header.  Trailing empty cells are
trimmed from each row, matching the row shape remote spreadsheet APIs
return; the pipeline pads rows back to equal width.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd

from sheet_records.fetchers.base import (
    BaseFetcher,
    CancelToken,
    RawTable,
    TableNotFound,
    check_cancelled,
)

logger = logging.getLogger(__name__)


def _trim_trailing_empty(row: list[str]) -> list[str]:
    end = len(row)
    while end > 0 and row[end - 1] == "":
        end -= 1
    return row[:end]


def _max_width(path: Path, encoding: str) -> int:
    """Number of fields in the widest record (quoted delimiters respected)."""
    with open(path, "r", encoding=encoding, newline="") as f:
        return max((len(record) for record in csv.reader(f)), default=0)


class CsvDirectoryFetcher(BaseFetcher):
    """Fetch sheets from ``<source_id>/<table_name>.csv`` files.

    Args:
        root: Optional base directory; relative source ids are resolved
            against it.
        encoding: File encoding (``utf-8-sig`` strips a BOM if present).
    """

    def __init__(self, root: str | Path | None = None, encoding: str = "utf-8-sig") -> None:
        self.root = Path(root) if root is not None else None
        self.encoding = encoding

    def table_path(self, source_id: str, table_name: str) -> Path:
        directory = Path(source_id)
        if self.root is not None and not directory.is_absolute():
            directory = self.root / directory
        return directory / f"{table_name}.csv"

    def fetch(
        self,
        source_id: str,
        table_name: str,
        *,
        cancel: CancelToken | None = None,
    ) -> RawTable:
        path = self.table_path(source_id, table_name)
        if not path.is_file():
            raise TableNotFound(f"Sheet file not found: {path}")

        check_cancelled(cancel)
        logger.info("Reading sheet %s", path)
        width = _max_width(path, self.encoding)
        if width == 0:
            logger.warning("Sheet file is empty: %s", path)
            return []

        df = pd.read_csv(
            path,
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            encoding=self.encoding,
        )

        # Short rows come back as NaN even with keep_default_na=False
        df = df.fillna("")
        rows = [_trim_trailing_empty(list(values)) for values in df.itertuples(index=False)]
        logger.info("Read %d rows x %d columns from %s", len(rows), len(df.columns), path)
        return rows
