"""Field descriptor tree supplied by callers when creating a table.

A descriptor is either a primitive, a parameterized primitive (decimal,
fixed) or a container (list, map, struct). Containers nest descriptors
recursively. The translator module turns this tree into a pyiceberg schema.

Callers that cannot build these objects directly may pass the marshaled
form understood by `parse_named_field`:

    {"name": "tags", "required": False,
     "type": {"type": "list", "element": "string", "element_required": True}}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Union

from icebridge.core.errors import SchemaBuildError


class PrimitiveKind(str, Enum):
    """Primitive field types without parameters."""

    BOOLEAN = "boolean"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    UUID = "uuid"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    TIMESTAMP_NS = "timestamp_ns"
    TIMESTAMPTZ_NS = "timestamptz_ns"
    BINARY = "binary"


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True)
class Decimal:
    precision: int
    scale: int


@dataclass(frozen=True)
class Fixed:
    length: int


@dataclass(frozen=True)
class ListOf:
    """List type. `element_id` optionally pins the element field id."""

    element: "FieldType"
    element_required: bool = False
    element_id: int | None = None


@dataclass(frozen=True)
class MapOf:
    """Map type. Keys are always required."""

    key: "FieldType"
    value: "FieldType"
    value_required: bool = False
    key_id: int | None = None
    value_id: int | None = None


@dataclass(frozen=True)
class StructOf:
    fields: tuple["NamedField", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


FieldType = Union[Primitive, Decimal, Fixed, ListOf, MapOf, StructOf]


@dataclass(frozen=True)
class NamedField:
    """
    A named, optionally id-pinned field.

    Attributes:
        name: Field name.
        field_type: Descriptor of the field's type.
        required: Whether the field is required.
        field_id: Explicit field identifier; assigned automatically when None.
        doc: Optional field documentation.
    """

    name: str
    field_type: FieldType
    required: bool = False
    field_id: int | None = None
    doc: str | None = None


BOOLEAN = Primitive(PrimitiveKind.BOOLEAN)
INT = Primitive(PrimitiveKind.INT)
LONG = Primitive(PrimitiveKind.LONG)
FLOAT = Primitive(PrimitiveKind.FLOAT)
DOUBLE = Primitive(PrimitiveKind.DOUBLE)
STRING = Primitive(PrimitiveKind.STRING)
UUID = Primitive(PrimitiveKind.UUID)
DATE = Primitive(PrimitiveKind.DATE)
TIME = Primitive(PrimitiveKind.TIME)
TIMESTAMP = Primitive(PrimitiveKind.TIMESTAMP)
TIMESTAMPTZ = Primitive(PrimitiveKind.TIMESTAMPTZ)
TIMESTAMP_NS = Primitive(PrimitiveKind.TIMESTAMP_NS)
TIMESTAMPTZ_NS = Primitive(PrimitiveKind.TIMESTAMPTZ_NS)
BINARY = Primitive(PrimitiveKind.BINARY)


def _optional_int(raw: Mapping[str, Any], key: str) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaBuildError(f"`{key}` must be an integer, got {value!r}.")
    return value


def _required_int(raw: Mapping[str, Any], key: str, type_name: str) -> int:
    value = _optional_int(raw, key)
    if value is None:
        raise SchemaBuildError(f"`{type_name}` type requires `{key}`.")
    return value


def parse_field_type(raw: Any) -> FieldType:
    """Parse a marshaled type descriptor (string or tagged mapping)."""
    if isinstance(raw, (Primitive, Decimal, Fixed, ListOf, MapOf, StructOf)):
        return raw

    if isinstance(raw, str):
        try:
            return Primitive(PrimitiveKind(raw.strip().lower()))
        except ValueError as exc:
            raise SchemaBuildError(f"Unknown field type {raw!r}.") from exc

    if not isinstance(raw, Mapping) or "type" not in raw:
        raise SchemaBuildError(f"Invalid field type descriptor: {raw!r}.")

    tag = str(raw["type"]).strip().lower()
    if tag == "decimal":
        return Decimal(
            precision=_required_int(raw, "precision", tag),
            scale=_required_int(raw, "scale", tag),
        )
    if tag == "fixed":
        return Fixed(length=_required_int(raw, "length", tag))
    if tag == "list":
        if "element" not in raw:
            raise SchemaBuildError("`list` type requires `element`.")
        return ListOf(
            element=parse_field_type(raw["element"]),
            element_required=bool(raw.get("element_required", False)),
            element_id=_optional_int(raw, "element_id"),
        )
    if tag == "map":
        if "key" not in raw or "value" not in raw:
            raise SchemaBuildError("`map` type requires `key` and `value`.")
        return MapOf(
            key=parse_field_type(raw["key"]),
            value=parse_field_type(raw["value"]),
            value_required=bool(raw.get("value_required", False)),
            key_id=_optional_int(raw, "key_id"),
            value_id=_optional_int(raw, "value_id"),
        )
    if tag == "struct":
        return StructOf(fields=tuple(parse_fields(raw.get("fields") or ())))

    # primitives may also arrive tagged: {"type": "long"}
    return parse_field_type(tag)


def parse_named_field(raw: NamedField | Mapping[str, Any]) -> NamedField:
    """Parse one marshaled field (`name`, `type`, `required`, `id`, `doc`)."""
    if isinstance(raw, NamedField):
        return raw
    if not isinstance(raw, Mapping):
        raise SchemaBuildError(f"Invalid field descriptor: {raw!r}.")

    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaBuildError(f"Field descriptor needs a non-empty `name`: {raw!r}.")
    if "type" not in raw and "field_type" not in raw:
        raise SchemaBuildError(f"Field {name!r} has no `type`.")

    return NamedField(
        name=name,
        field_type=parse_field_type(raw.get("type", raw.get("field_type"))),
        required=bool(raw.get("required", False)),
        field_id=_optional_int(raw, "id"),
        doc=raw.get("doc"),
    )


def parse_fields(raw: Iterable[NamedField | Mapping[str, Any]]) -> list[NamedField]:
    """Parse a list of marshaled fields, keeping input order."""
    return [parse_named_field(item) for item in raw]
