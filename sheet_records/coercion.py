"""
Cell coercion for sheet-records.

Converts one string cell into the typed value a ``FieldSpec`` declares.
Dispatch is a lookup table ``FieldKind -> (coercer, error class)``; each
coercer raises ``ValueError`` on bad text and ``coerce_cell`` turns that
into the matching located error (column letter + row number + text).

Parsing rules:

- STRING: passed through unchanged, empty included.
- Optional fields: an empty cell is ``None``; anything else is parsed as
  the inner kind.
- Integers: strict base 10 (``[+-]?[0-9]+``; unsigned kinds accept no
  sign at all), range-checked against the kind's width.
- Floats: strict decimal with optional exponent, plus ``inf``,
  ``infinity`` and ``nan`` in any case.  Finite text that overflows the
  kind's width is rejected.
- Booleans (case-insensitive): ``1 t true y yes`` / ``0 f false n no``.
- Datetimes: each pattern of the ``DatetimeFormatSet`` in order; the
  first that parses wins.  ``strptime`` does not require zero padding,
  so ``%Y-%m-%d`` also accepts ``2024-1-5`` and ``%H`` accepts ``8``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator

import numpy as np

from sheet_records.exceptions import (
    InvalidBooleanError,
    InvalidDateTimeError,
    InvalidNumberError,
    InvalidValueError,
    UnsupportedTypeError,
)
from sheet_records.naming import column_name
from sheet_records.schema import SCALAR_TYPES, FieldKind, FieldSpec, zero_value

logger = logging.getLogger(__name__)

DEFAULT_DATETIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S %z",
)

_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

_TRUE_WORDS = frozenset({"1", "t", "true", "y", "yes"})
_FALSE_WORDS = frozenset({"0", "f", "false", "n", "no"})

# Platform-width kinds use 64-bit bounds
_INT_BOUNDS: dict[FieldKind, tuple[int, int]] = {
    kind: (int(np.iinfo(dtype).min), int(np.iinfo(dtype).max))
    for kind, dtype in {
        FieldKind.INT: np.int64,
        FieldKind.INT8: np.int8,
        FieldKind.INT16: np.int16,
        FieldKind.INT32: np.int32,
        FieldKind.INT64: np.int64,
        FieldKind.UINT: np.uint64,
        FieldKind.UINT8: np.uint8,
        FieldKind.UINT16: np.uint16,
        FieldKind.UINT32: np.uint32,
        FieldKind.UINT64: np.uint64,
    }.items()
}


@dataclass(frozen=True)
class DatetimeFormatSet:
    """Ordered, immutable list of ``strptime`` patterns tried in sequence."""

    formats: tuple[str, ...] = DEFAULT_DATETIME_FORMATS

    @classmethod
    def assemble(
        cls,
        extra: Iterable[str] = (),
        include_defaults: bool = True,
    ) -> DatetimeFormatSet:
        """Caller formats first, then the built-in defaults (duplicates dropped)."""
        ordered = list(extra)
        if include_defaults:
            ordered.extend(DEFAULT_DATETIME_FORMATS)
        return cls(formats=tuple(dict.fromkeys(ordered)))

    def parse(self, text: str) -> datetime:
        """Parse *text* with the first matching format.

        Raises:
            ValueError: If no format matches.
        """
        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        raise ValueError(f"{text!r} matches none of {list(self.formats)}")

    def __iter__(self) -> Iterator[str]:
        return iter(self.formats)

    def __len__(self) -> int:
        return len(self.formats)


# ---------------------------------------------------------------------------
# Per-kind coercers (raise ValueError on bad text)
# ---------------------------------------------------------------------------

def _to_string(text: str, kind: FieldKind, formats: DatetimeFormatSet) -> str:
    return text


def _to_int(text: str, kind: FieldKind, formats: DatetimeFormatSet) -> Any:
    pattern = _SIGNED_INT if kind.value.startswith("int") else _UNSIGNED_INT
    if not pattern.fullmatch(text):
        raise ValueError(f"not a base-10 integer: {text!r}")
    value = int(text)
    low, high = _INT_BOUNDS[kind]
    if not low <= value <= high:
        raise ValueError(f"{value} out of range for {kind.value}")
    return SCALAR_TYPES[kind](value)


def _to_float(text: str, kind: FieldKind, formats: DatetimeFormatSet) -> Any:
    if _FLOAT_SPECIAL.fullmatch(text):
        return SCALAR_TYPES[kind](float(text))
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"not a decimal number: {text!r}")
    # Rounds to the nearest representable value; overflow becomes inf
    with np.errstate(over="ignore"):
        value = SCALAR_TYPES[kind](float(text))
    if math.isinf(value):
        raise ValueError(f"{text!r} out of range for {kind.value}")
    return value


def _to_bool(text: str, kind: FieldKind, formats: DatetimeFormatSet) -> bool:
    word = text.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _to_datetime(text: str, kind: FieldKind, formats: DatetimeFormatSet) -> datetime:
    return formats.parse(text)


Coercer = Callable[[str, FieldKind, DatetimeFormatSet], Any]

_COERCERS: dict[FieldKind, tuple[Coercer, type[InvalidValueError]]] = {
    FieldKind.STRING: (_to_string, InvalidValueError),
    FieldKind.INT: (_to_int, InvalidNumberError),
    FieldKind.INT8: (_to_int, InvalidNumberError),
    FieldKind.INT16: (_to_int, InvalidNumberError),
    FieldKind.INT32: (_to_int, InvalidNumberError),
    FieldKind.INT64: (_to_int, InvalidNumberError),
    FieldKind.UINT: (_to_int, InvalidNumberError),
    FieldKind.UINT8: (_to_int, InvalidNumberError),
    FieldKind.UINT16: (_to_int, InvalidNumberError),
    FieldKind.UINT32: (_to_int, InvalidNumberError),
    FieldKind.UINT64: (_to_int, InvalidNumberError),
    FieldKind.FLOAT32: (_to_float, InvalidNumberError),
    FieldKind.FLOAT64: (_to_float, InvalidNumberError),
    FieldKind.BOOL: (_to_bool, InvalidBooleanError),
    FieldKind.DATETIME: (_to_datetime, InvalidDateTimeError),
}


def coerce_cell(
    spec: FieldSpec,
    cell: str,
    formats: DatetimeFormatSet,
    column: int,
    row: int,
    *,
    empty_as_zero: bool = False,
) -> Any:
    """Convert one cell to the value *spec* declares.

    Args:
        spec: Target field.
        cell: Raw cell text.
        formats: Datetime patterns for DATETIME fields.
        column: 0-based column index (reported as a letter on failure).
        row: Spreadsheet row number (reported on failure).
        empty_as_zero: If True, an empty cell in a non-optional,
            non-string field yields the kind's zero value instead of
            failing.

    Raises:
        InvalidNumberError / InvalidBooleanError / InvalidDateTimeError:
            If the text cannot be parsed as the field's kind.
        UnsupportedTypeError: If the kind has no coercer.
    """
    if cell == "":
        if spec.optional:
            return None
        if empty_as_zero and spec.kind is not FieldKind.STRING:
            return zero_value(spec.kind)

    entry = _COERCERS.get(spec.kind)
    # Reached only if a FieldKind is added without a coercer
    if entry is None:
        raise UnsupportedTypeError(str(spec.kind), spec.name)
    coercer, error_cls = entry

    try:
        return coercer(cell, spec.kind, formats)
    except ValueError as exc:
        raise error_cls(column_name(column), row, cell) from exc
