"""Core value objects: identifiers and metadata snapshots.

Identifiers are immutable and compared structurally. Both the dotted-string
and segment-list encodings of a namespace normalize to the same ordered tuple
of segments before anything reaches the catalog client.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from icebridge.core.errors import InvalidIdentifierError


def _split_dotted(value: str) -> tuple[str, ...]:
    """Split a dotted name, refusing empty segments instead of dropping them."""
    parts = tuple(value.strip().split("."))
    if any(not p for p in parts):
        raise InvalidIdentifierError(
            f"Invalid identifier {value!r}: empty name segment."
        )
    return parts


@dataclass(frozen=True)
class NamespaceIdent:
    """Ordered, non-empty sequence of namespace segments."""

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        parts = tuple(self.parts)
        if not parts:
            raise InvalidIdentifierError("Namespace must have at least one segment.")
        for p in parts:
            if not isinstance(p, str) or not p:
                raise InvalidIdentifierError(
                    f"Invalid namespace segment {p!r} in {list(parts)!r}."
                )
        object.__setattr__(self, "parts", parts)

    @classmethod
    def parse(cls, value: "NamespaceIdent | str | Sequence[str]") -> "NamespaceIdent":
        """Normalize a dotted string or a segment list into a NamespaceIdent."""
        if isinstance(value, NamespaceIdent):
            return value
        if isinstance(value, str):
            return cls(_split_dotted(value))
        if isinstance(value, Mapping):
            return cls.parse(value.get("parts", ()))
        return cls(tuple(value))

    def dotted(self) -> str:
        return ".".join(self.parts)

    def __str__(self) -> str:
        return self.dotted()


@dataclass(frozen=True)
class TableIdent:
    """A namespace plus a table name."""

    namespace: NamespaceIdent
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidIdentifierError("Table name must be a non-empty string.")

    @classmethod
    def of(cls, namespace: NamespaceIdent | str | Sequence[str], name: str) -> "TableIdent":
        return cls(NamespaceIdent.parse(namespace), name)

    @classmethod
    def parse(cls, value: "TableIdent | str | Mapping[str, Any] | Sequence[str]") -> "TableIdent":
        """
        Normalize a table identifier.

        Accepts a TableIdent, a dotted `ns1.ns2.table` string, a mapping with
        `namespace` and `name`, or a full segment sequence ending in the name.
        """
        if isinstance(value, TableIdent):
            return value
        if isinstance(value, str):
            parts = _split_dotted(value)
        elif isinstance(value, Mapping):
            if "namespace" not in value or "name" not in value:
                raise InvalidIdentifierError(
                    "Table identifier mapping needs `namespace` and `name`."
                )
            return cls.of(value["namespace"], value["name"])
        else:
            parts = tuple(value)
        if len(parts) < 2:
            raise InvalidIdentifierError(
                f"Table identifier {value!r} must include a namespace and a name."
            )
        return cls(NamespaceIdent(parts[:-1]), parts[-1])

    def to_tuple(self) -> tuple[str, ...]:
        """Return the flat identifier tuple used by pyiceberg."""
        return (*self.namespace.parts, self.name)

    def full_name(self) -> str:
        return f"{self.namespace.dotted()}.{self.name}"

    def __str__(self) -> str:
        return self.full_name()


@dataclass(frozen=True)
class FieldSummary:
    """One top-level schema field as reported in table metadata."""

    id: int
    name: str
    required: bool
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "required": self.required, "type": self.type}


@dataclass(frozen=True)
class MetadataSnapshot:
    """Cached view of a table's metadata."""

    table_uuid: str
    format_version: int
    location: str
    schema_id: int
    fields: tuple[FieldSummary, ...] = ()
    properties: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def to_dict(self) -> dict[str, str]:
        """Flat string map with the field list and properties JSON encoded."""
        return {
            "table_uuid": self.table_uuid,
            "format_version": str(self.format_version),
            "location": self.location,
            "schema_id": str(self.schema_id),
            "fields": json.dumps([f.to_dict() for f in self.fields]),
            "properties": json.dumps(dict(self.properties), sort_keys=True),
        }


@dataclass(frozen=True)
class InspectionSnapshot:
    """Uncached diagnostic view of a table."""

    identifier: TableIdent
    location: str
    table_uuid: str
    current_snapshot_id: int | None = None
    sequence_number: int | None = None

    def to_dict(self) -> dict[str, str]:
        out = {
            "identifier": self.identifier.full_name(),
            "location": self.location,
            "table_uuid": self.table_uuid,
        }
        if self.current_snapshot_id is not None:
            out["current_snapshot_id"] = str(self.current_snapshot_id)
        if self.sequence_number is not None:
            out["sequence_number"] = str(self.sequence_number)
        return out
