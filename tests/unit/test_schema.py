"""
Unit tests for record type descriptions (sheet_records.schema).

Tests registration of dataclasses and pydantic models, annotation to
kind mapping, alias handling, defaults, and the builder API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Optional

import numpy as np
import pytest
from pydantic import BaseModel, Field

from sheet_records.exceptions import SchemaError, UnsupportedTypeError
from sheet_records.schema import (
    FieldKind,
    FieldSpec,
    RecordType,
    UInt,
    column,
    record_type,
    zero_value,
)


@dataclass
class User:
    ID: UInt
    Username: str
    Password: str | None
    Weight: Optional[UInt]
    Score: float
    Active: bool
    CreatedAt: datetime | None = column("Created At", default=None)


@dataclass
class Measurement:
    tiny: np.int8
    small: np.int16
    medium: np.int32
    large: np.int64
    utiny: np.uint8
    usmall: np.uint16
    umedium: np.uint32
    ularge: np.uint64
    single: np.float32
    double: np.float64
    plain: int
    taken_at: datetime


@dataclass
class Address:
    street: str


@dataclass
class Customer:
    name: str
    address: Address


@dataclass
class Tagged:
    tags: list[str]


@dataclass
class Defaults:
    name: str = "unknown"
    labels: list = field(default_factory=list, metadata={"sheets": "Labels"})


@dataclass
class WithDefaults:
    name: str = "unknown"
    count: int = 7
    note: str = column("Note", default_factory=lambda: "n/a")


@dataclass
class Computed:
    name: str
    slug: str = field(init=False, default="")


class Product(BaseModel):
    sku: str
    price: float = 0.0
    stock: Annotated[int, FieldKind.UINT] = 0
    released: datetime | None = Field(None, alias="Release Date")


# ---------------------------------------------------------------------------
# Dataclass registration
# ---------------------------------------------------------------------------

class TestDataclassRegistration:
    """Tests for record_type() on dataclasses."""

    def test_fields_in_declaration_order(self):
        rt = record_type(User)
        assert rt.name == "User"
        assert rt.field_names == [
            "ID", "Username", "Password", "Weight", "Score", "Active", "CreatedAt",
        ]

    def test_kinds_and_optional_flags(self):
        rt = record_type(User)
        specs = {s.name: s for s in rt.fields}
        assert specs["ID"].kind is FieldKind.UINT
        assert specs["ID"].optional is False
        assert specs["Username"].kind is FieldKind.STRING
        assert specs["Password"].kind is FieldKind.STRING
        assert specs["Password"].optional is True
        assert specs["Weight"].kind is FieldKind.UINT
        assert specs["Weight"].optional is True
        assert specs["Score"].kind is FieldKind.FLOAT64
        assert specs["Active"].kind is FieldKind.BOOL
        assert specs["CreatedAt"].kind is FieldKind.DATETIME
        assert specs["CreatedAt"].optional is True

    def test_column_alias(self):
        rt = record_type(User)
        assert rt.field_by_alias("Created At").name == "CreatedAt"
        assert rt.field_by_name("CreatedAt").alias == "Created At"
        assert rt.field_by_name("ID").alias is None

    def test_numpy_widths(self):
        rt = record_type(Measurement)
        kinds = [s.kind for s in rt.fields]
        assert kinds == [
            FieldKind.INT8, FieldKind.INT16, FieldKind.INT32, FieldKind.INT64,
            FieldKind.UINT8, FieldKind.UINT16, FieldKind.UINT32, FieldKind.UINT64,
            FieldKind.FLOAT32, FieldKind.FLOAT64, FieldKind.INT, FieldKind.DATETIME,
        ]

    def test_registration_is_cached(self):
        assert record_type(User) is record_type(User)

    def test_record_type_passes_through(self):
        rt = RecordType.build("Thing", [FieldSpec("a", FieldKind.STRING)])
        assert record_type(rt) is rt

    def test_init_false_fields_skipped(self):
        assert record_type(Computed).field_names == ["name"]

    def test_new_record_builds_instance(self):
        rt = record_type(User)
        user = rt.new_record({"ID": 5, "Username": "ada", "Active": True})
        assert isinstance(user, User)
        assert user.ID == 5
        assert user.Username == "ada"
        assert user.Active is True
        # Unmapped fields: zero value, None for optionals
        assert user.Password is None
        assert user.Weight is None
        assert user.Score == 0.0
        assert user.CreatedAt is None

    def test_declared_defaults_used_for_unmapped_fields(self):
        rt = record_type(WithDefaults)
        record = rt.new_record({})
        assert record == WithDefaults(name="unknown", count=7, note="n/a")
        assert rt.field_by_alias("Note").name == "note"


# ---------------------------------------------------------------------------
# Unsupported types
# ---------------------------------------------------------------------------

class TestUnsupportedTypes:
    """Unsupported annotations fail at registration, before any data."""

    def test_nested_record_names_the_type(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            record_type(Customer)
        assert exc_info.value.type_name == "Address"
        assert exc_info.value.field_name == "address"
        assert "unsupported type: Address" in str(exc_info.value)

    def test_container_type(self):
        with pytest.raises(UnsupportedTypeError, match="list"):
            record_type(Tagged)

    def test_untyped_default_factory_container(self):
        with pytest.raises(UnsupportedTypeError, match="list"):
            record_type(Defaults)

    def test_not_a_record_class(self):
        with pytest.raises(SchemaError, match="expected a dataclass"):
            record_type(int)

    def test_field_spec_rejects_unknown_kind(self):
        with pytest.raises(UnsupportedTypeError, match="decimal"):
            FieldSpec("amount", "decimal")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class TestPydanticRegistration:
    """Tests for record_type() on pydantic models."""

    def test_fields_and_alias(self):
        rt = record_type(Product)
        assert rt.field_names == ["sku", "price", "stock", "released"]
        assert rt.field_by_alias("Release Date").name == "released"

    def test_annotated_kind_override(self):
        rt = record_type(Product)
        assert rt.field_by_name("stock").kind is FieldKind.UINT
        assert rt.field_by_name("released").optional is True

    def test_new_record_builds_model(self):
        rt = record_type(Product)
        product = rt.new_record({"sku": "A-1", "stock": 3})
        assert isinstance(product, Product)
        assert product.sku == "A-1"
        assert product.stock == 3
        assert product.price == 0.0
        assert product.released is None


# ---------------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------------

class TestBuilder:
    """Tests for RecordType.build()."""

    def test_dict_records_by_default(self):
        rt = RecordType.build("Row", [
            FieldSpec("id", FieldKind.INT),
            FieldSpec("label", FieldKind.STRING, alias="Label"),
            FieldSpec("seen", FieldKind.DATETIME, optional=True),
        ])
        assert rt.new_record({"id": 4}) == {"id": 4, "label": "", "seen": None}

    def test_custom_factory(self):
        rt = RecordType.build(
            "Pair",
            [FieldSpec("a", FieldKind.INT), FieldSpec("b", FieldKind.INT)],
            factory=lambda values: (values["a"], values["b"]),
        )
        assert rt.new_record({"a": 1, "b": 2}) == (1, 2)

    def test_duplicate_field_names_rejected(self):
        with pytest.raises(SchemaError, match="Duplicate field name 'a'"):
            RecordType.build("Bad", [
                FieldSpec("a", FieldKind.INT),
                FieldSpec("a", FieldKind.STRING),
            ])

    def test_duplicate_alias_first_declared_wins(self):
        rt = RecordType.build("Dup", [
            FieldSpec("first", FieldKind.STRING, alias="Name"),
            FieldSpec("second", FieldKind.STRING, alias="Name"),
        ])
        assert rt.field_by_alias("Name").name == "first"


class TestZeroValue:
    """Tests for zero_value()."""

    def test_scalars(self):
        assert zero_value(FieldKind.STRING) == ""
        assert zero_value(FieldKind.INT) == 0
        assert zero_value(FieldKind.BOOL) is False
        assert zero_value(FieldKind.FLOAT64) == 0.0
        assert zero_value(FieldKind.DATETIME) is None

    def test_sized_kinds_keep_their_width(self):
        assert isinstance(zero_value(FieldKind.INT8), np.int8)
        assert isinstance(zero_value(FieldKind.UINT32), np.uint32)
        assert isinstance(zero_value(FieldKind.FLOAT32), np.float32)
