"""
Demo script: parse a sheet exported as CSV into typed records and print them.

Usage:
    python scripts/print_records.py exports/crm            # reads exports/crm/Users.csv
    python scripts/print_records.py exports/crm Members    # reads exports/crm/Members.csv
    python scripts/print_records.py sheet.yaml             # spreadsheet_id etc. from YAML

The record type below mirrors a typical user sheet: a numeric ID, text
columns, an optional password and weight, and a "Created At" column
bound through a column alias.  Day-first dates (``2.1.2006``,
``02.01.2006 15:04:05``) are accepted on top of the ISO defaults.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import sheet_records
from sheet_records import SheetConfig, UInt, column
from sheet_records.fetchers import CsvDirectoryFetcher

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("print_records")

DATETIME_FORMATS = [
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M:%S",
]


# ---------------------------------------------------------------------------
# Record type
# ---------------------------------------------------------------------------

@dataclass
class User:
    ID: UInt = 0
    Username: str = ""
    Name: str = ""
    Email: str = ""
    Password: str | None = None
    Locale: str = ""
    Weight: UInt | None = None
    CreatedAt: datetime | None = column("Created At", default=None)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    if len(sys.argv) < 2:
        log.error("usage: print_records.py <directory | config.yaml> [sheet name]")
        return 2

    source = sys.argv[1]
    if Path(source).suffix.lower() in (".yaml", ".yml"):
        config = sheet_records.load_config(source)
    else:
        config = SheetConfig(
            spreadsheet_id=source,
            sheet_name=sys.argv[2] if len(sys.argv) > 2 else None,
            datetime_formats=DATETIME_FORMATS,
        )

    try:
        users = sheet_records.parse_sheet(User, config, CsvDirectoryFetcher())
    except sheet_records.SheetRecordsError as exc:
        log.error("Unable to parse sheet: %s", exc)
        return 1

    for user in users:
        print(user)
    log.info("Parsed %d user(s)", len(users))
    return 0


if __name__ == "__main__":
    sys.exit(main())
