"""Interface of the asynchronous catalog client consumed by the handles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Protocol

from pyiceberg.schema import Schema

from icebridge.core.models import NamespaceIdent, TableIdent

if TYPE_CHECKING:
    from icebridge.core.bridge import ExecutionBridge
    from icebridge.core.config import CatalogConfig


class CatalogClient(Protocol):
    """Asynchronous catalog operations used by catalog and table handles."""

    async def list_namespaces(self) -> list[NamespaceIdent]:
        """Return all top-level namespaces."""
        ...

    async def create_namespace(
        self, namespace: NamespaceIdent, properties: Mapping[str, str]
    ) -> NamespaceIdent:
        """Create a namespace and return its identifier."""
        ...

    async def table_exists(self, ident: TableIdent) -> bool:
        """Return True if the table exists."""
        ...

    async def drop_table(self, ident: TableIdent) -> None:
        """Drop a table."""
        ...

    async def create_table(
        self, ident: TableIdent, schema: Schema, properties: Mapping[str, str]
    ) -> Any:
        """Create a table and return the client library's table object."""
        ...

    async def load_table(self, ident: TableIdent) -> Any:
        """Load the client library's table object."""
        ...

    async def rename_table(self, src: TableIdent, dst: TableIdent) -> None:
        """Rename (and possibly move) a table."""
        ...


# Builds a fresh client from the full catalog property map.
ClientFactory = Callable[[Mapping[str, str]], Awaitable[CatalogClient]]


def call_client(
    bridge: ExecutionBridge,
    factory: ClientFactory,
    config: CatalogConfig,
    method: str,
    *args: Any,
) -> Any:
    """
    Build a transient client from `config` and run one of its methods.

    Both steps happen on the bridge, so a failure while constructing the
    client is reported exactly like a failure of the operation itself.
    """

    async def _op() -> Any:
        client = await factory(config.catalog_properties())
        return await getattr(client, method)(*args)

    _op.__qualname__ = method
    return bridge.run(_op)
