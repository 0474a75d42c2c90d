"""
Base fetcher protocol / ABC for sheet-records.

All fetchers implement ``fetch(source_id, table_name, *, cancel=None)``
and return the sheet as a list of rows of strings, header row first.
Rows may have different lengths (remote sheet APIs drop trailing empty
cells); the pipeline pads them.

Cancellation: ``cancel`` is any object with an ``is_set()`` method
(typically a ``threading.Event``).  The pipeline passes it through
unchanged; fetchers call ``check_cancelled(cancel)`` before doing
blocking work.

Any exception a fetcher raises is reported by the pipeline as a
``TransportError`` with the original chained as ``__cause__``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

RawTable = list[list[str]]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class FetchCancelled(Exception):
    """Raised by a fetcher when its cancel token is set."""


class TableNotFound(LookupError):
    """Raised when a source or a table within it does not exist."""


def check_cancelled(cancel: CancelToken | None) -> None:
    """Raise ``FetchCancelled`` if *cancel* has been set."""
    if cancel is not None and cancel.is_set():
        raise FetchCancelled("fetch cancelled")


class BaseFetcher(ABC):
    """Abstract base class for sheet fetchers."""

    @abstractmethod
    def fetch(
        self,
        source_id: str,
        table_name: str,
        *,
        cancel: CancelToken | None = None,
    ) -> RawTable:
        """Return the raw grid for one sheet.

        Args:
            source_id: Spreadsheet / source identifier.
            table_name: Sheet name within the source.
            cancel: Optional cancel token, checked before blocking work.

        Returns:
            Rows of string cells; row 0 is the header row.
        """
