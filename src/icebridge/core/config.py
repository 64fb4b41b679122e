"""Connection descriptor for an Iceberg REST catalog.

A CatalogConfig is immutable. Every transient catalog client is built from a
fresh property map rendered by `catalog_properties()`, so nothing handed to the
client library can ever write back into the descriptor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from icebridge.core.errors import ConfigError

# attribute name -> catalog property name
_AUTH_PROPERTIES: tuple[tuple[str, str], ...] = (
    ("credential", "credential"),
    ("oauth2_server_uri", "oauth2-server-uri"),
    ("scope", "scope"),
    ("token", "token"),
    ("audience", "audience"),
    ("resource", "resource"),
)


@dataclass(frozen=True)
class CatalogConfig:
    """
    Connection descriptor for a REST catalog.

    Attributes:
        uri: Catalog endpoint (required).
        warehouse: Optional warehouse location or name.
        token: Optional bearer token.
        credential: Optional OAuth2 client credential (`client_id:secret`).
        oauth2_server_uri: Optional OAuth2 token endpoint.
        scope: Optional OAuth2 scope.
        audience: Optional OAuth2 audience.
        resource: Optional OAuth2 resource.
        timeout: Optional per-operation timeout in seconds.
        properties: Extra catalog properties passed through unchanged.
    """

    uri: str
    warehouse: str | None = None
    token: str | None = None
    credential: str | None = None
    oauth2_server_uri: str | None = None
    scope: str | None = None
    audience: str | None = None
    resource: str | None = None
    timeout: float | None = None
    properties: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def validate(self) -> None:
        """Reject descriptors that can never produce a working client."""
        if not isinstance(self.uri, str) or not self.uri.strip():
            raise ConfigError("Catalog config requires a non-empty `uri`.")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("Catalog config `timeout` must be a positive number.")

    def catalog_properties(self) -> dict[str, str]:
        """Return a new property map for constructing a catalog client."""
        props = {str(k): str(v) for k, v in self.properties.items()}
        for attr, key in _AUTH_PROPERTIES:
            value = getattr(self, attr)
            if value:
                props[key] = value
        props["uri"] = self.uri
        if self.warehouse:
            props["warehouse"] = self.warehouse
        return props

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CatalogConfig":
        """
        Build a config from a marshaled mapping.

        Keys may use snake_case (`oauth2_server_uri`) or the catalog property
        spelling (`oauth2-server-uri`). Unknown keys end up in `properties`.
        """
        known = {name for name in cls.__dataclass_fields__}
        values: dict[str, Any] = {}
        extra: dict[str, str] = {}

        for key, value in raw.items():
            attr = str(key).replace("-", "_")
            if attr == "properties":
                extra.update({str(k): str(v) for k, v in (value or {}).items()})
            elif attr in known:
                values[attr] = value
            elif value is not None:
                extra[str(key)] = str(value)

        if "uri" not in values:
            raise ConfigError("Catalog config requires a non-empty `uri`.")

        timeout = values.get("timeout")
        if timeout is not None:
            try:
                values["timeout"] = float(timeout)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Invalid timeout: {timeout!r}") from exc

        return cls(properties=extra, **values)
