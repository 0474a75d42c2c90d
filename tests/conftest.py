"""
Shared test fixtures for sheet-records tests.

Record types used by the tests are declared at module level in each
test module (type hints are resolved against module globals).
"""

from __future__ import annotations

import pytest

from sheet_records.fetchers import MemoryFetcher

SPREADSHEET_ID = "15PTbwnLdGJXb4kgLVVBtZ7HbK3QEj-olOxsY7XTzvCc"

# A "Users" sheet as a remote sheet API returns it: trailing empty cells
# are dropped, so rows have different lengths.
USERS_GRID = [
    ["ID", "Username", "Name", "Email", "Password", "Locale", "Weight", "Created At"],
    ["1", "ada", "Ada Lovelace", "ada@example.com", "", "en", "61", "10.12.2021"],
    ["2", "grace", "Grace Hopper", "grace@example.com", "hunter2", "en_US"],
    ["3", "alan", "Alan Turing", "alan@example.com", "", "en_GB", "", "23.06.2022 08:30:00"],
]


@pytest.fixture
def users_grid() -> list[list[str]]:
    return [list(row) for row in USERS_GRID]


@pytest.fixture
def memory_fetcher(users_grid) -> MemoryFetcher:
    return MemoryFetcher({SPREADSHEET_ID: {"Users": users_grid}})


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against CSV files on disk)",
    )
