"""
Configuration model and YAML I/O for sheet-records.

``SheetConfig`` is the per-call configuration bundle: which spreadsheet
to read, which sheet (defaults to the pluralized record type name), and
which datetime formats to accept.  It can be built in code or loaded
from a small YAML file::

    spreadsheet_id: 15PTbwnLdGJXb4kgLVVBtZ7HbK3QEj-olOxsY7XTzvCc
    sheet_name: Users            # optional
    datetime_formats:
      - "%d.%m.%Y"
      - "%d.%m.%Y %H:%M:%S"
    use_default_datetime_formats: true
    empty_cells_as_zero: false

Key functions:
- load_config(path) -> SheetConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Missing spreadsheet ids are *not* rejected here: the pipeline raises
``MissingSourceIDError`` for them so that callers see the same error
whether the config came from YAML or from code.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from sheet_records.coercion import DatetimeFormatSet
from sheet_records.exceptions import ConfigValidationError
from sheet_records.naming import pluralize

logger = logging.getLogger(__name__)


class SheetConfig(BaseModel):
    """Configuration for one sheet-to-records call."""

    spreadsheet_id: str = Field("", description="Spreadsheet / source identifier")
    sheet_name: str | None = Field(
        None,
        description="Sheet to read; defaults to the pluralized record type name",
    )
    datetime_formats: list[str] = Field(
        default_factory=list,
        description="strptime patterns tried before the built-in defaults",
    )
    use_default_datetime_formats: bool = Field(
        True, description="If True, append the built-in datetime formats"
    )
    empty_cells_as_zero: bool = Field(
        False,
        description=(
            "If True, empty cells in non-optional numeric/bool/datetime fields "
            "yield the zero value instead of failing"
        ),
    )

    @field_validator("datetime_formats")
    @classmethod
    def _check_formats_not_blank(cls, formats: list[str]) -> list[str]:
        for fmt in formats:
            if not fmt.strip():
                raise ValueError("datetime_formats must not contain blank patterns")
        return formats

    def datetime_format_set(self) -> DatetimeFormatSet:
        """Caller formats followed by the defaults, as an immutable set."""
        return DatetimeFormatSet.assemble(
            self.datetime_formats,
            include_defaults=self.use_default_datetime_formats,
        )

    def resolve_sheet_name(self, record_name: str) -> str:
        """Explicit sheet name if set, else the pluralized *record_name*."""
        if self.sheet_name:
            return self.sheet_name
        return pluralize(record_name)


def load_config(path: str | Path) -> SheetConfig:
    """Load and validate a YAML config file into a SheetConfig.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty or not a mapping.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"Config file must contain a mapping, got {type(raw).__name__}: {path}"
        )
    logger.info("Loaded config from %s", path)
    return SheetConfig.model_validate(raw)


def save_config(config: SheetConfig, path: str | Path) -> None:
    """Serialize a SheetConfig to YAML.

    An unset ``sheet_name`` is left out, so the file keeps following the
    record type name.  The header comment records which sheet that is.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)
    sheet = config.sheet_name or "<pluralized record type name>"
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"# sheet-records: {config.spreadsheet_id or '<no spreadsheet id>'} / {sheet}\n")
        f.write("# datetime_formats are strptime patterns, tried in order.\n\n")
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
    logger.info("Saved config for sheet %s to %s", sheet, path)
