"""
Record type descriptions for sheet-records.

A ``RecordType`` is the static description the engine works from: an
ordered tuple of ``FieldSpec`` (name, optional column alias, scalar kind,
optional flag, default) plus a factory that assembles one record from a
``{field_name: value}`` dict.

Two ways to obtain one:

- **Registration** -- ``record_type(cls)`` describes a dataclass or a
  pydantic model once and caches the result, keyed by the class.  All
  type-hint inspection happens here, never per row.
- **Builder** -- ``RecordType.build(name, [FieldSpec(...), ...])`` for
  callers that want plain dicts (or their own factory) without a class.

Supported annotations:

=====================================  ==========================
Annotation                             Kind / produced value
=====================================  ==========================
``str``                                STRING / ``str``
``int``                                INT / ``int`` (64-bit range)
``UInt`` (``Annotated[int, UINT]``)    UINT / ``int`` (64-bit range)
``np.int8`` ... ``np.int64``           INT8 ... INT64 / numpy scalar
``np.uint8`` ... ``np.uint64``         UINT8 ... UINT64 / numpy scalar
``float``                              FLOAT64 / ``float``
``np.float32``                         FLOAT32 / ``np.float32``
``bool``                               BOOL / ``bool``
``datetime.datetime``                  DATETIME / ``datetime``
``X | None`` / ``Optional[X]``         kind of X, optional
``Annotated[X, FieldKind.K]``          K (explicit override)
=====================================  ==========================

Anything else (nested records, lists, dicts, unions) raises
``UnsupportedTypeError`` when the record type is registered.

Column aliases:

- dataclasses: ``created_at: datetime | None = column("Created At")``
- pydantic: ``created_at: datetime | None = Field(None, alias="Created At")``
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import types
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Callable, Iterable, Union, get_args, get_origin, get_type_hints

import numpy as np
from pydantic import BaseModel

from sheet_records.exceptions import SchemaError, UnsupportedTypeError

logger = logging.getLogger(__name__)

# Dataclass field metadata key holding the column alias
ALIAS_KEY = "sheets"


class FieldKind(str, Enum):
    """Scalar kinds the coercion engine knows how to produce."""

    STRING = "string"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    DATETIME = "datetime"


# Python type produced for each kind
SCALAR_TYPES: dict[FieldKind, type] = {
    FieldKind.STRING: str,
    FieldKind.INT: int,
    FieldKind.INT8: np.int8,
    FieldKind.INT16: np.int16,
    FieldKind.INT32: np.int32,
    FieldKind.INT64: np.int64,
    FieldKind.UINT: int,
    FieldKind.UINT8: np.uint8,
    FieldKind.UINT16: np.uint16,
    FieldKind.UINT32: np.uint32,
    FieldKind.UINT64: np.uint64,
    FieldKind.FLOAT32: np.float32,
    FieldKind.FLOAT64: float,
    FieldKind.BOOL: bool,
    FieldKind.DATETIME: datetime,
}

_ANNOTATION_KINDS: dict[Any, FieldKind] = {
    str: FieldKind.STRING,
    int: FieldKind.INT,
    float: FieldKind.FLOAT64,
    bool: FieldKind.BOOL,
    datetime: FieldKind.DATETIME,
    np.int8: FieldKind.INT8,
    np.int16: FieldKind.INT16,
    np.int32: FieldKind.INT32,
    np.int64: FieldKind.INT64,
    np.uint8: FieldKind.UINT8,
    np.uint16: FieldKind.UINT16,
    np.uint32: FieldKind.UINT32,
    np.uint64: FieldKind.UINT64,
    np.float32: FieldKind.FLOAT32,
    np.float64: FieldKind.FLOAT64,
}

# Platform-width unsigned integer (Python has no builtin for it)
UInt = Annotated[int, FieldKind.UINT]


def zero_value(kind: FieldKind) -> Any:
    """Value an unmapped, non-optional field takes when it has no default."""
    if kind is FieldKind.DATETIME:
        return None
    return SCALAR_TYPES[kind]()


def column(alias: str, **kwargs: Any) -> Any:
    """Declare a dataclass field bound to the column titled *alias*.

    Extra keyword arguments go to ``dataclasses.field`` (``default``,
    ``default_factory``, ...)::

        @dataclass
        class User:
            created_at: datetime | None = column("Created At", default=None)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ALIAS_KEY] = alias
    return field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """One field of a record type.

    Attributes:
        name: Attribute name on the record (also matched against headers).
        kind: Scalar kind to coerce cells into.
        optional: If True, an empty cell yields ``None``.
        alias: Explicit column title; takes precedence over ``name``.
        default_factory: Produces the value of the field when no column
            maps to it.  ``None`` means the kind's zero value (or ``None``
            for optional fields).
    """

    name: str
    kind: FieldKind
    optional: bool = False
    alias: str | None = None
    default_factory: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FieldKind):
            raise UnsupportedTypeError(str(self.kind), self.name)

    def default_value(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        if self.optional:
            return None
        return zero_value(self.kind)


def _as_dict(values: dict[str, Any]) -> dict[str, Any]:
    return dict(values)


@dataclass(frozen=True)
class RecordType:
    """Static description of a target record.

    Attributes:
        name: Record type name; pluralized into the default sheet name.
        fields: Fields in declaration order.
        factory: Builds one record from a complete ``{name: value}`` dict.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    factory: Callable[[dict[str, Any]], Any] = _as_dict
    _by_alias: dict[str, FieldSpec] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )
    _by_name: dict[str, FieldSpec] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        by_name: dict[str, FieldSpec] = {}
        by_alias: dict[str, FieldSpec] = {}
        for spec in self.fields:
            if spec.name in by_name:
                raise SchemaError(f"Duplicate field name '{spec.name}' in {self.name}")
            by_name[spec.name] = spec
            if spec.alias:
                if spec.alias in by_alias:
                    # First declared alias wins
                    logger.debug(
                        "%s: alias '%s' on '%s' shadowed by '%s'",
                        self.name, spec.alias, spec.name, by_alias[spec.alias].name,
                    )
                    continue
                by_alias[spec.alias] = spec
        self._by_name.update(by_name)
        self._by_alias.update(by_alias)

    @classmethod
    def build(
        cls,
        name: str,
        fields: Iterable[FieldSpec],
        factory: Callable[[dict[str, Any]], Any] | None = None,
    ) -> RecordType:
        """Builder entry point; records are plain dicts unless *factory* is given."""
        return cls(name=name, fields=tuple(fields), factory=factory or _as_dict)

    def field_by_alias(self, alias: str) -> FieldSpec | None:
        return self._by_alias.get(alias)

    def field_by_name(self, name: str) -> FieldSpec | None:
        return self._by_name.get(name)

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    def new_record(self, values: dict[str, Any]) -> Any:
        """Assemble a record; fields missing from *values* get their default."""
        complete = {
            spec.name: values[spec.name] if spec.name in values else spec.default_value()
            for spec in self.fields
        }
        return self.factory(complete)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

_REGISTRY: dict[type, RecordType] = {}
_REGISTRY_LOCK = threading.Lock()


def _type_name(annotation: Any) -> str:
    if get_origin(annotation) is not None:
        return str(annotation).replace("typing.", "")
    return getattr(annotation, "__name__", None) or repr(annotation)


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    """Unwrap ``X | None`` / ``Optional[X]`` into ``(X, True)``."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = get_args(annotation)
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return non_none[0], True
    return annotation, False


def _resolve_annotation(annotation: Any, field_name: str) -> tuple[FieldKind, bool]:
    """Map a type annotation to ``(kind, optional)``."""
    inner, optional = _strip_optional(annotation)

    if get_origin(inner) is Annotated:
        base, *extras = get_args(inner)
        explicit = next((e for e in extras if isinstance(e, FieldKind)), None)
        if explicit is not None:
            return explicit, optional or _strip_optional(base)[1]
        kind, base_optional = _resolve_annotation(base, field_name)
        return kind, optional or base_optional

    kind = _ANNOTATION_KINDS.get(inner)
    if kind is None:
        raise UnsupportedTypeError(_type_name(inner), field_name)
    return kind, optional


def _describe_dataclass(cls: type) -> RecordType:
    hints = get_type_hints(cls, include_extras=True)
    specs: list[FieldSpec] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        kind, optional = _resolve_annotation(hints[f.name], f.name)
        if f.default is not dataclasses.MISSING:
            default = f.default
            factory: Callable[[], Any] | None = lambda value=default: value
        elif f.default_factory is not dataclasses.MISSING:
            factory = f.default_factory
        else:
            factory = None
        specs.append(FieldSpec(
            name=f.name,
            kind=kind,
            optional=optional,
            alias=f.metadata.get(ALIAS_KEY),
            default_factory=factory,
        ))
    return RecordType(
        name=cls.__name__,
        fields=tuple(specs),
        factory=lambda values: cls(**values),
    )


def _construct_model(cls: type[BaseModel], values: dict[str, Any]) -> BaseModel:
    """Build *cls* from values keyed by field name, without validation.

    ``model_construct`` looks values up by alias first, so a field whose
    alias equals another field's name would pick up the wrong value.
    Values are already typed (numpy scalars included).
    """
    instance = cls.model_construct()
    instance.__dict__.update(values)
    object.__setattr__(instance, "__pydantic_fields_set__", set(values))
    return instance


def _describe_model(cls: type[BaseModel]) -> RecordType:
    specs: list[FieldSpec] = []
    for name, info in cls.model_fields.items():
        annotation = info.annotation
        # pydantic moves Annotated extras into ``metadata``
        explicit = next((m for m in info.metadata if isinstance(m, FieldKind)), None)
        if explicit is not None:
            kind, optional = explicit, _strip_optional(annotation)[1]
        else:
            kind, optional = _resolve_annotation(annotation, name)
        if info.default_factory is not None:
            factory: Callable[[], Any] | None = info.default_factory
        elif not info.is_required():
            default = info.default
            factory = lambda value=default: value
        else:
            factory = None
        specs.append(FieldSpec(
            name=name,
            kind=kind,
            optional=optional,
            alias=info.alias,
            default_factory=factory,
        ))
    return RecordType(
        name=cls.__name__,
        fields=tuple(specs),
        factory=lambda values: _construct_model(cls, values),
    )


def record_type(target: type | RecordType) -> RecordType:
    """Return the ``RecordType`` describing *target*.

    Dataclasses and pydantic models are described once and cached;
    a ``RecordType`` passes through unchanged.

    Raises:
        UnsupportedTypeError: If a field's annotation has no scalar kind.
        SchemaError: If *target* is neither a dataclass nor a pydantic model.
    """
    if isinstance(target, RecordType):
        return target

    with _REGISTRY_LOCK:
        cached = _REGISTRY.get(target)
        if cached is not None:
            return cached

        if isinstance(target, type) and issubclass(target, BaseModel):
            described = _describe_model(target)
        elif isinstance(target, type) and dataclasses.is_dataclass(target):
            described = _describe_dataclass(target)
        else:
            raise SchemaError(
                f"Cannot describe {_type_name(target)}: expected a dataclass, "
                "a pydantic model or a RecordType"
            )
        _REGISTRY[target] = described
        logger.debug(
            "Registered record type %s (%d fields)", described.name, len(described.fields)
        )
        return described
