"""Boundary operations for host callers.

These functions never raise. Each returns an `Ok` or `Err` result (see
`icebridge.core.responses`), except `catalog_table_exists`, which folds
every failure into False, and `table_invalidate_cache`, which cannot fail.

Example:
    >>> result = catalog_new({"uri": "http://localhost:8181", "warehouse": "wh"})
    >>> catalog = result.unwrap()
    >>> catalog_list_namespaces(catalog)
    Ok(value=[NamespaceIdent(parts=('db',))])
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from icebridge.core.catalog import CatalogHandle
from icebridge.core.client import ClientFactory
from icebridge.core.config import CatalogConfig
from icebridge.core.fields import NamedField
from icebridge.core.models import (
    InspectionSnapshot,
    MetadataSnapshot,
    NamespaceIdent,
    TableIdent,
)
from icebridge.core.responses import Result, capture
from icebridge.core.table import TableHandle


def _new_handle(
    config: CatalogConfig | Mapping[str, Any],
    client_factory: ClientFactory | None,
) -> CatalogHandle:
    cfg = config if isinstance(config, CatalogConfig) else CatalogConfig.from_mapping(config)
    return CatalogHandle(cfg, client_factory=client_factory)


def catalog_new(
    config: CatalogConfig | Mapping[str, Any],
    *,
    client_factory: ClientFactory | None = None,
) -> Result[CatalogHandle]:
    """Create a catalog handle from a config object or marshaled mapping."""
    return capture("create catalog", _new_handle, config, client_factory)


def catalog_list_namespaces(catalog: CatalogHandle) -> Result[list[NamespaceIdent]]:
    return capture("list namespaces", catalog.list_namespaces)


def catalog_create_namespace(
    catalog: CatalogHandle,
    namespace: NamespaceIdent | str | Sequence[str],
    properties: Mapping[str, str] | None = None,
) -> Result[NamespaceIdent]:
    return capture("create namespace", catalog.create_namespace, namespace, properties)


def catalog_table_exists(catalog: CatalogHandle, ident: TableIdent | str) -> bool:
    """True if the table exists; False if absent or if the check failed."""
    result = capture("check table existence", catalog.table_exists, ident)
    return bool(result.ok and result.value)


def catalog_drop_table(catalog: CatalogHandle, ident: TableIdent | str) -> Result[TableIdent]:
    return capture("drop table", catalog.drop_table, ident)


def catalog_create_table(
    catalog: CatalogHandle,
    ident: TableIdent | str,
    fields: Sequence[NamedField | Mapping[str, Any]],
    properties: Mapping[str, str] | None = None,
) -> Result[TableHandle]:
    return capture("create table", catalog.create_table, ident, fields, properties)


def catalog_load_table(catalog: CatalogHandle, ident: TableIdent | str) -> Result[TableHandle]:
    return capture("load table", catalog.load_table, ident)


def _rename(catalog: CatalogHandle, src: TableIdent | str, dst: TableIdent | str) -> dict[str, str]:
    src_ident = TableIdent.parse(src)
    dst_ident = TableIdent.parse(dst)
    catalog.rename_table(src_ident, dst_ident)
    return {"renamed": f"{src_ident.full_name()} -> {dst_ident.full_name()}"}


def catalog_rename_table(
    catalog: CatalogHandle,
    src: TableIdent | str,
    dst: TableIdent | str,
) -> Result[dict[str, str]]:
    return capture("rename table", _rename, catalog, src, dst)


def table_metadata(table: TableHandle, *, use_cache: bool = True) -> Result[MetadataSnapshot]:
    """Table metadata, served from the handle's cache when populated."""
    return capture("load table metadata", table.get_metadata, use_cache)


def table_metadata_ref(table: TableHandle) -> Result[MetadataSnapshot]:
    """Same as `table_metadata`; kept for callers of the older binding name."""
    return table_metadata(table)


def table_inspect(table: TableHandle) -> Result[InspectionSnapshot]:
    """Fresh diagnostic view of a table; never cached."""
    return capture("inspect table", table.inspect)


def table_invalidate_cache(table: TableHandle) -> None:
    table.invalidate_cache()
