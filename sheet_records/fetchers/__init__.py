"""
Fetchers sub-package for sheet-records.

A fetcher is the collaborator that hands the pipeline a raw grid of
string cells for ``(source_id, table_name)``.  Authentication, network
access and retries all live behind this seam; the pipeline only
consumes the returned rows.

Design: Strategy Pattern
- base.py defines the BaseFetcher ABC (protocol).
- memory.py implements MemoryFetcher for grids held in memory (tests,
  callers that already downloaded the values).
- csv_directory.py implements CsvDirectoryFetcher for sheets exported as
  ``<directory>/<sheet name>.csv``.

A remote spreadsheet API client is implemented by subclassing
BaseFetcher in the calling application.
"""

from sheet_records.fetchers.base import BaseFetcher, FetchCancelled, RawTable, TableNotFound
from sheet_records.fetchers.csv_directory import CsvDirectoryFetcher
from sheet_records.fetchers.memory import MemoryFetcher

__all__ = [
    "BaseFetcher",
    "CsvDirectoryFetcher",
    "FetchCancelled",
    "MemoryFetcher",
    "RawTable",
    "TableNotFound",
]
