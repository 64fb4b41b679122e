"""Catalog handles: namespace and table lifecycle over a REST catalog.

A CatalogHandle holds no live connection. Each operation renders the
property map from the immutable CatalogConfig, builds a transient client on
the handle's execution bridge and runs one request with it.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from icebridge.core.adapters.pyiceberg_rest import connect_rest_catalog
from icebridge.core.bridge import ExecutionBridge
from icebridge.core.client import ClientFactory, call_client
from icebridge.core.config import CatalogConfig
from icebridge.core.errors import IcebridgeError
from icebridge.core.fields import NamedField, parse_fields
from icebridge.core.models import NamespaceIdent, TableIdent
from icebridge.core.table import TableHandle
from icebridge.core.translator import build_schema

logger = logging.getLogger(__name__)


class CatalogHandle:
    """
    Reconstructable handle for one catalog connection.

    Args:
        config: Connection descriptor. Validated on construction.
        client_factory: Async factory building a client from the property
            map. Defaults to pyiceberg's REST catalog.
        bridge: Execution bridge to use. A private one is created by default,
            so handles never interfere with each other.
    """

    def __init__(
        self,
        config: CatalogConfig,
        *,
        client_factory: ClientFactory | None = None,
        bridge: ExecutionBridge | None = None,
    ) -> None:
        config.validate()
        self.config = config
        self.client_factory = client_factory or connect_rest_catalog
        self.bridge = bridge or ExecutionBridge(timeout=config.timeout)

    def __repr__(self) -> str:
        return f"CatalogHandle(uri={self.config.uri!r}, warehouse={self.config.warehouse!r})"

    def _call(self, method: str, *args: Any) -> Any:
        logger.debug("%s %s", method, ", ".join(str(a) for a in args))
        return call_client(self.bridge, self.client_factory, self.config, method, *args)

    def _table_handle(self, ident: TableIdent) -> TableHandle:
        return TableHandle(self.config, ident, self.bridge, self.client_factory)

    def close(self) -> None:
        """Release the execution bridge (also shared by derived table handles)."""
        self.bridge.close()

    def list_namespaces(self) -> list[NamespaceIdent]:
        """List top-level namespaces. An empty list is a valid result."""
        return [NamespaceIdent.parse(ns) for ns in self._call("list_namespaces")]

    def create_namespace(
        self,
        namespace: NamespaceIdent | str | Sequence[str],
        properties: Mapping[str, str] | None = None,
    ) -> NamespaceIdent:
        """Create a namespace. Fails with CatalogError if it already exists."""
        ns = NamespaceIdent.parse(namespace)
        created = self._call("create_namespace", ns, dict(properties or {}))
        return NamespaceIdent.parse(created) if created is not None else ns

    def table_exists(self, ident: TableIdent | str) -> bool:
        """
        Return True if the table exists.

        Any failure, including a catalog that could not be reached, reports
        False; callers cannot tell "absent" from "unknown".
        """
        try:
            table = TableIdent.parse(ident)
            return bool(self._call("table_exists", table))
        except IcebridgeError as exc:
            logger.warning("table_exists(%s) failed, reporting False: %s", ident, exc)
            return False

    def drop_table(self, ident: TableIdent | str) -> TableIdent:
        """Drop a table. Dropping a missing table fails."""
        table = TableIdent.parse(ident)
        self._call("drop_table", table)
        return table

    def create_table(
        self,
        ident: TableIdent | str,
        fields: Sequence[NamedField | Mapping[str, Any]],
        properties: Mapping[str, str] | None = None,
    ) -> TableHandle:
        """Translate `fields` into a schema, create the table, return its handle."""
        table = TableIdent.parse(ident)
        schema = build_schema(parse_fields(fields))
        self._call("create_table", table, schema, dict(properties or {}))
        return self._table_handle(table)

    def load_table(self, ident: TableIdent | str) -> TableHandle:
        """Check the table loads, then return a handle with a cold cache."""
        table = TableIdent.parse(ident)
        self._call("load_table", table)
        return self._table_handle(table)

    def rename_table(self, src: TableIdent | str, dst: TableIdent | str) -> None:
        """Rename a table; source and destination namespaces may differ."""
        self._call("rename_table", TableIdent.parse(src), TableIdent.parse(dst))
