"""
Unit tests for config model and YAML I/O (sheet_records.config).

Tests Pydantic model validation, sheet name resolution, datetime format
assembly, and YAML serialization round-trip.
"""

import pytest
from pydantic import ValidationError

from sheet_records.coercion import DEFAULT_DATETIME_FORMATS
from sheet_records.config import SheetConfig, load_config, save_config
from sheet_records.exceptions import ConfigValidationError


# ---------------------------------------------------------------------------
# SheetConfig
# ---------------------------------------------------------------------------

class TestSheetConfig:
    """Tests for SheetConfig defaults and validation."""

    def test_defaults(self):
        cfg = SheetConfig()
        assert cfg.spreadsheet_id == ""
        assert cfg.sheet_name is None
        assert cfg.datetime_formats == []
        assert cfg.use_default_datetime_formats is True
        assert cfg.empty_cells_as_zero is False

    def test_blank_datetime_format_rejected(self):
        with pytest.raises(ValidationError, match="blank patterns"):
            SheetConfig(datetime_formats=["%d.%m.%Y", "  "])

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError, match="datetime_formats"):
            SheetConfig(datetime_formats="%d.%m.%Y")


class TestResolveSheetName:
    """Explicit sheet name wins; otherwise the pluralized record name."""

    def test_explicit_name(self):
        cfg = SheetConfig(spreadsheet_id="x", sheet_name="Members")
        assert cfg.resolve_sheet_name("User") == "Members"

    def test_pluralized_default(self):
        cfg = SheetConfig(spreadsheet_id="x")
        assert cfg.resolve_sheet_name("User") == "Users"
        assert cfg.resolve_sheet_name("Person") == "People"

    def test_empty_explicit_name_falls_back(self):
        cfg = SheetConfig(spreadsheet_id="x", sheet_name="")
        assert cfg.resolve_sheet_name("Category") == "Categories"

    def test_empty_record_name(self):
        assert SheetConfig().resolve_sheet_name("") == ""


class TestDatetimeFormatSet:
    """Tests for SheetConfig.datetime_format_set()."""

    def test_caller_formats_then_defaults(self):
        cfg = SheetConfig(datetime_formats=["%d.%m.%Y", "%d.%m.%Y %H:%M:%S"])
        fs = cfg.datetime_format_set()
        assert fs.formats == ("%d.%m.%Y", "%d.%m.%Y %H:%M:%S") + DEFAULT_DATETIME_FORMATS

    def test_defaults_disabled(self):
        cfg = SheetConfig(datetime_formats=["%d.%m.%Y"], use_default_datetime_formats=False)
        assert cfg.datetime_format_set().formats == ("%d.%m.%Y",)

    def test_config_not_mutated(self):
        cfg = SheetConfig(datetime_formats=["%d.%m.%Y"])
        cfg.datetime_format_set()
        cfg.datetime_format_set()
        assert cfg.datetime_formats == ["%d.%m.%Y"]


# ---------------------------------------------------------------------------
# YAML round-trip: save_config -> load_config
# ---------------------------------------------------------------------------

class TestYamlRoundTrip:
    """Tests for save_config / load_config round-trip fidelity."""

    def test_round_trip(self, tmp_path):
        original = SheetConfig(
            spreadsheet_id="15PTbwnLdGJXb4kgLVVBtZ7HbK3QEj-olOxsY7XTzvCc",
            sheet_name="Users",
            datetime_formats=["%d.%m.%Y", "%d.%m.%Y %H:%M:%S"],
            empty_cells_as_zero=True,
        )
        yaml_path = tmp_path / "sheet.yaml"
        save_config(original, yaml_path)
        assert load_config(yaml_path) == original

    def test_save_writes_header_comment(self, tmp_path):
        yaml_path = tmp_path / "nested" / "sheet.yaml"
        save_config(SheetConfig(spreadsheet_id="abc"), yaml_path)
        text = yaml_path.read_text(encoding="utf-8")
        assert text.startswith("# sheet-records: abc / <pluralized record type name>\n")
        assert "spreadsheet_id: abc" in text
        assert "sheet_name" not in text

    def test_save_names_explicit_sheet(self, tmp_path):
        yaml_path = tmp_path / "sheet.yaml"
        save_config(SheetConfig(spreadsheet_id="abc", sheet_name="Members"), yaml_path)
        text = yaml_path.read_text(encoding="utf-8")
        assert text.startswith("# sheet-records: abc / Members\n")
        assert "sheet_name: Members" in text

    def test_partial_yaml_uses_defaults(self, tmp_path):
        yaml_path = tmp_path / "sheet.yaml"
        yaml_path.write_text("spreadsheet_id: abc\n", encoding="utf-8")
        cfg = load_config(yaml_path)
        assert cfg.spreadsheet_id == "abc"
        assert cfg.sheet_name is None
        assert cfg.datetime_formats == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        yaml_path = tmp_path / "empty.yaml"
        yaml_path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="empty"):
            load_config(yaml_path)

    def test_non_mapping_file(self, tmp_path):
        yaml_path = tmp_path / "list.yaml"
        yaml_path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="mapping"):
            load_config(yaml_path)

    def test_invalid_field_type(self, tmp_path):
        yaml_path = tmp_path / "bad.yaml"
        yaml_path.write_text("spreadsheet_id: abc\nempty_cells_as_zero: maybe\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="empty_cells_as_zero"):
            load_config(yaml_path)
