"""In-memory fetcher: grids keyed by source id and sheet name."""

from __future__ import annotations

import logging

from sheet_records.fetchers.base import (
    BaseFetcher,
    CancelToken,
    RawTable,
    TableNotFound,
    check_cancelled,
)

logger = logging.getLogger(__name__)


class MemoryFetcher(BaseFetcher):
    """Serve grids from a ``{source_id: {table_name: rows}}`` mapping.

    Returned grids are copies, so the pipeline's row padding never
    leaks back into the stored data.
    """

    def __init__(self, sources: dict[str, dict[str, RawTable]] | None = None) -> None:
        self.sources: dict[str, dict[str, RawTable]] = sources or {}
        self.calls: list[tuple[str, str]] = []

    def add_table(self, source_id: str, table_name: str, rows: RawTable) -> None:
        self.sources.setdefault(source_id, {})[table_name] = rows

    def fetch(
        self,
        source_id: str,
        table_name: str,
        *,
        cancel: CancelToken | None = None,
    ) -> RawTable:
        check_cancelled(cancel)
        self.calls.append((source_id, table_name))
        try:
            rows = self.sources[source_id][table_name]
        except KeyError:
            raise TableNotFound(
                f"No table '{table_name}' in source '{source_id}'"
            ) from None
        logger.debug("Serving %d rows for %s/%s", len(rows), source_id, table_name)
        return [list(row) for row in rows]
