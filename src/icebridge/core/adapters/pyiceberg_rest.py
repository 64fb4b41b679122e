"""Asynchronous adapter around pyiceberg's REST catalog.

pyiceberg exposes a blocking API, so every call is pushed onto the running
loop's default executor (the execution bridge's worker pool). pyiceberg
exceptions are translated into icebridge errors at this seam.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Mapping, TypeVar

from pyiceberg.catalog import Catalog, load_catalog
from pyiceberg.exceptions import NoSuchTableError
from pyiceberg.schema import Schema
from pyiceberg.table import Table

from icebridge.core.errors import CatalogError, ConfigError, TableLoadError
from icebridge.core.models import NamespaceIdent, TableIdent

logger = logging.getLogger(__name__)

T = TypeVar("T")

CATALOG_NAME = "icebridge"


def _is_pyiceberg_error(exc: BaseException) -> bool:
    return type(exc).__module__.startswith("pyiceberg")


def translate_error(exc: Exception) -> Exception:
    """Map a pyiceberg or transport exception to an icebridge error."""
    if isinstance(exc, NoSuchTableError):
        return TableLoadError(str(exc) or type(exc).__name__)
    if _is_pyiceberg_error(exc) or isinstance(exc, OSError):
        return CatalogError(f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__)
    return exc


async def _offload(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
    except Exception as exc:
        mapped = translate_error(exc)
        if mapped is exc:
            raise
        raise mapped from exc


class AsyncRestCatalog:
    """CatalogClient implementation backed by a pyiceberg Catalog."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    async def list_namespaces(self) -> list[NamespaceIdent]:
        raw = await _offload(self.catalog.list_namespaces)
        return [NamespaceIdent(tuple(ns)) for ns in raw]

    async def create_namespace(
        self, namespace: NamespaceIdent, properties: Mapping[str, str]
    ) -> NamespaceIdent:
        await _offload(self.catalog.create_namespace, namespace.parts, dict(properties))
        return namespace

    async def table_exists(self, ident: TableIdent) -> bool:
        return bool(await _offload(self.catalog.table_exists, ident.to_tuple()))

    async def drop_table(self, ident: TableIdent) -> None:
        await _offload(self.catalog.drop_table, ident.to_tuple())

    async def create_table(
        self, ident: TableIdent, schema: Schema, properties: Mapping[str, str]
    ) -> Table:
        return await _offload(
            self.catalog.create_table,
            ident.to_tuple(),
            schema,
            properties=dict(properties),
        )

    async def load_table(self, ident: TableIdent) -> Table:
        return await _offload(self.catalog.load_table, ident.to_tuple())

    async def rename_table(self, src: TableIdent, dst: TableIdent) -> None:
        await _offload(self.catalog.rename_table, src.to_tuple(), dst.to_tuple())


def _load_rest_catalog(properties: Mapping[str, str]) -> Catalog:
    props = dict(properties)
    props.setdefault("type", "rest")
    try:
        return load_catalog(CATALOG_NAME, **props)
    except ValueError as exc:
        raise ConfigError(f"Invalid catalog configuration: {exc}") from exc


async def connect_rest_catalog(properties: Mapping[str, str]) -> AsyncRestCatalog:
    """Default client factory: build a fresh pyiceberg REST catalog."""
    logger.debug("Connecting to REST catalog at %s", properties.get("uri"))
    catalog = await _offload(_load_rest_catalog, properties)
    return AsyncRestCatalog(catalog)
