"""Translate caller field descriptors into a pyiceberg schema.

Field identifiers come from one policy only: an explicit id on a field is
kept as given, every other field (top-level or nested, including synthetic
list elements and map keys/values) draws the next value from a single
counter. The counter starts above the highest explicit id found anywhere in
the input, so auto-assigned ids can never collide with pinned ones.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

from pyiceberg.schema import Schema
from pyiceberg.types import (
    BinaryType,
    BooleanType,
    DateType,
    DecimalType,
    DoubleType,
    FixedType,
    FloatType,
    IcebergType,
    IntegerType,
    ListType,
    LongType,
    MapType,
    NestedField,
    StringType,
    StructType,
    TimestampNanoType,
    TimestampType,
    TimestamptzNanoType,
    TimestamptzType,
    TimeType,
    UUIDType,
)

from icebridge.core.errors import SchemaBuildError
from icebridge.core.fields import (
    Decimal,
    FieldType,
    Fixed,
    ListOf,
    MapOf,
    NamedField,
    Primitive,
    PrimitiveKind,
    StructOf,
)

logger = logging.getLogger(__name__)

MAX_DECIMAL_PRECISION = 38

_PRIMITIVES: dict[PrimitiveKind, IcebergType] = {
    PrimitiveKind.BOOLEAN: BooleanType(),
    PrimitiveKind.INT: IntegerType(),
    PrimitiveKind.LONG: LongType(),
    PrimitiveKind.FLOAT: FloatType(),
    PrimitiveKind.DOUBLE: DoubleType(),
    PrimitiveKind.STRING: StringType(),
    PrimitiveKind.UUID: UUIDType(),
    PrimitiveKind.DATE: DateType(),
    PrimitiveKind.TIME: TimeType(),
    PrimitiveKind.TIMESTAMP: TimestampType(),
    PrimitiveKind.TIMESTAMPTZ: TimestamptzType(),
    PrimitiveKind.TIMESTAMP_NS: TimestampNanoType(),
    PrimitiveKind.TIMESTAMPTZ_NS: TimestamptzNanoType(),
    PrimitiveKind.BINARY: BinaryType(),
}


def _explicit_ids(fields: Iterable[NamedField]) -> Iterator[int]:
    """Yield every explicit identifier in the tree, depth-first."""
    for f in fields:
        if f.field_id is not None:
            yield f.field_id
        yield from _explicit_type_ids(f.field_type)


def _explicit_type_ids(field_type: FieldType) -> Iterator[int]:
    if isinstance(field_type, ListOf):
        if field_type.element_id is not None:
            yield field_type.element_id
        yield from _explicit_type_ids(field_type.element)
    elif isinstance(field_type, MapOf):
        if field_type.key_id is not None:
            yield field_type.key_id
        yield from _explicit_type_ids(field_type.key)
        if field_type.value_id is not None:
            yield field_type.value_id
        yield from _explicit_type_ids(field_type.value)
    elif isinstance(field_type, StructOf):
        yield from _explicit_ids(field_type.fields)


class FieldIdAllocator:
    """Hands out field ids and remembers which path claimed each one."""

    def __init__(self, explicit_ids: Iterable[int]) -> None:
        explicit = list(explicit_ids)
        for field_id in explicit:
            if isinstance(field_id, bool) or not isinstance(field_id, int) or field_id < 0:
                raise SchemaBuildError(
                    f"Field id must be a non-negative integer, got {field_id!r}."
                )
        self._next = max(explicit, default=0) + 1
        self._claimed: dict[int, str] = {}

    def claim(self, path: str, explicit: int | None = None) -> int:
        """Return `explicit` if given, otherwise the next counter value."""
        if explicit is None:
            field_id = self._next
            self._next += 1
        else:
            field_id = explicit
        owner = self._claimed.get(field_id)
        if owner is not None:
            raise SchemaBuildError(
                f"Field id {field_id} is used by both `{owner}` and `{path}`."
            )
        self._claimed[field_id] = path
        return field_id


class SchemaTranslator:
    """Depth-first translator from NamedField trees to pyiceberg NestedFields."""

    def __init__(self, fields: Sequence[NamedField]) -> None:
        self.fields = list(fields)
        self.ids = FieldIdAllocator(_explicit_ids(self.fields))

    def translate(self) -> list[NestedField]:
        if not self.fields:
            raise SchemaBuildError("Cannot build a schema from an empty field list.")
        return [self._field(f, parent="") for f in self.fields]

    def _field(self, named: NamedField, parent: str) -> NestedField:
        if not named.name:
            raise SchemaBuildError(f"Field under `{parent or '<root>'}` has an empty name.")
        path = f"{parent}.{named.name}" if parent else named.name
        field_id = self.ids.claim(path, named.field_id)
        return NestedField(
            field_id=field_id,
            name=named.name,
            field_type=self._type(named.field_type, path),
            required=named.required,
            doc=named.doc,
        )

    def _type(self, field_type: FieldType, path: str) -> IcebergType:
        if isinstance(field_type, Primitive):
            return _PRIMITIVES[PrimitiveKind(field_type.kind)]

        if isinstance(field_type, Decimal):
            if not 1 <= field_type.precision <= MAX_DECIMAL_PRECISION:
                raise SchemaBuildError(
                    f"Decimal precision for `{path}` must be between 1 and "
                    f"{MAX_DECIMAL_PRECISION}, got {field_type.precision}."
                )
            if not 0 <= field_type.scale <= field_type.precision:
                raise SchemaBuildError(
                    f"Decimal scale for `{path}` must be between 0 and the "
                    f"precision, got {field_type.scale}."
                )
            return DecimalType(field_type.precision, field_type.scale)

        if isinstance(field_type, Fixed):
            if field_type.length <= 0:
                raise SchemaBuildError(
                    f"Fixed length for `{path}` must be positive, got {field_type.length}."
                )
            return FixedType(field_type.length)

        if isinstance(field_type, ListOf):
            element_path = f"{path}.element"
            element_id = self.ids.claim(element_path, field_type.element_id)
            return ListType(
                element_id=element_id,
                element_type=self._type(field_type.element, element_path),
                element_required=field_type.element_required,
            )

        if isinstance(field_type, MapOf):
            key_path = f"{path}.key"
            key_id = self.ids.claim(key_path, field_type.key_id)
            key_type = self._type(field_type.key, key_path)
            value_path = f"{path}.value"
            value_id = self.ids.claim(value_path, field_type.value_id)
            return MapType(
                key_id=key_id,
                key_type=key_type,
                value_id=value_id,
                value_type=self._type(field_type.value, value_path),
                value_required=field_type.value_required,
            )

        if isinstance(field_type, StructOf):
            if not field_type.fields:
                raise SchemaBuildError(f"Struct `{path}` has no fields.")
            return StructType(*(self._field(f, parent=path) for f in field_type.fields))

        raise SchemaBuildError(f"Unsupported field type for `{path}`: {field_type!r}.")


def translate_fields(fields: Sequence[NamedField]) -> list[NestedField]:
    """Translate top-level fields, assigning ids to every node in the tree."""
    return SchemaTranslator(fields).translate()


def build_schema(fields: Sequence[NamedField], schema_id: int = 0) -> Schema:
    """Build a pyiceberg Schema from caller field descriptors."""
    schema = Schema(*translate_fields(fields), schema_id=schema_id)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Built schema %d with %d top-level field(s), field ids %s",
            schema_id,
            len(schema.fields),
            collect_field_ids(schema),
        )
    return schema


def collect_field_ids(schema: Schema) -> list[int]:
    """Return every field id in a schema, nested ones included, depth-first."""
    out: list[int] = []

    def walk(field_type: IcebergType) -> None:
        if isinstance(field_type, StructType):
            for f in field_type.fields:
                out.append(f.field_id)
                walk(f.field_type)
        elif isinstance(field_type, ListType):
            out.append(field_type.element_id)
            walk(field_type.element_type)
        elif isinstance(field_type, MapType):
            out.append(field_type.key_id)
            walk(field_type.key_type)
            out.append(field_type.value_id)
            walk(field_type.value_type)

    walk(schema.as_struct())
    return out
