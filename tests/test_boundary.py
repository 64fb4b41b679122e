import pytest

from icebridge.boundary import (
    catalog_create_namespace,
    catalog_create_table,
    catalog_drop_table,
    catalog_list_namespaces,
    catalog_load_table,
    catalog_new,
    catalog_rename_table,
    catalog_table_exists,
    table_inspect,
    table_invalidate_cache,
    table_metadata,
    table_metadata_ref,
)
from icebridge.core.catalog import CatalogHandle
from icebridge.core.errors import CatalogError
from icebridge.core.models import NamespaceIdent
from icebridge.core.responses import Err, Ok
from icebridge.core.table import CACHE_COLD, CACHE_POPULATED


@pytest.fixture
def handle(fake_catalog):
    result = catalog_new(
        {"uri": "http://localhost:8181/api/catalog", "warehouse": "wh"},
        client_factory=fake_catalog.factory,
    )
    assert isinstance(result, Ok)
    yield result.value
    result.value.close()


def test_catalog_new_from_mapping(handle, fake_catalog):
    assert isinstance(handle, CatalogHandle)
    assert handle.config.warehouse == "wh"
    # construction itself never talks to the catalog
    assert fake_catalog.constructed_with == []


def test_catalog_new_rejects_missing_uri():
    result = catalog_new({"warehouse": "wh"})

    assert isinstance(result, Err)
    assert result.kind == "ConfigError"
    assert result.message.startswith("Failed to create catalog: ")


def test_namespace_round_trip(handle):
    assert catalog_list_namespaces(handle) == Ok([])
    assert catalog_create_namespace(handle, "db", {"owner": "eng"}) == Ok(NamespaceIdent(("db",)))
    assert catalog_list_namespaces(handle) == Ok([NamespaceIdent(("db",))])

    again = catalog_create_namespace(handle, ["db"])
    assert isinstance(again, Err)
    assert again.kind == "CatalogError"
    assert again.message == "Failed to create namespace: Namespace already exists: db"


def test_create_rename_and_check_existence(handle):
    catalog_create_namespace(handle, "staging")
    catalog_create_namespace(handle, "prod")
    created = catalog_create_table(
        handle,
        "staging.events",
        [{"name": "id", "type": "long", "required": True}, {"name": "payload", "type": "string"}],
    )
    assert isinstance(created, Ok)

    renamed = catalog_rename_table(handle, "staging.events", "prod.events")

    assert renamed == Ok({"renamed": "staging.events -> prod.events"})
    assert catalog_table_exists(handle, "staging.events") is False
    assert catalog_table_exists(handle, "prod.events") is True


def test_create_table_with_invalid_schema(handle):
    catalog_create_namespace(handle, "db")

    result = catalog_create_table(handle, "db.events", [{"name": "a", "type": "varchar"}])

    assert isinstance(result, Err)
    assert result.kind == "SchemaBuildError"
    assert result.message.startswith("Failed to create table: ")


def test_drop_missing_table(handle):
    result = catalog_drop_table(handle, "db.missing")

    assert isinstance(result, Err)
    assert result.kind == "TableLoadError"
    assert result.message.startswith("Failed to drop table: ")


def test_invalid_identifier_is_an_error_result(handle, fake_catalog):
    result = catalog_load_table(handle, "db..events")

    assert isinstance(result, Err)
    assert result.kind == "InvalidIdentifierError"
    assert fake_catalog.calls == []


def test_table_exists_collapses_failures_to_false(handle, fake_catalog):
    fake_catalog.add_table("db.events")
    fake_catalog.fail_with = CatalogError("401 Unauthorized")

    assert catalog_table_exists(handle, "db.events") is False
    assert catalog_table_exists(handle, "not a table") is False


def test_unexpected_factory_failure_is_a_panic_result(fake_catalog):
    async def _factory(properties):
        raise RuntimeError("tls handshake failed")

    handle = catalog_new({"uri": "http://localhost:8181"}, client_factory=_factory).unwrap()
    try:
        result = catalog_list_namespaces(handle)
    finally:
        handle.close()

    assert isinstance(result, Err)
    assert result.kind == "ExecutionPanic"
    assert "tls handshake failed" in result.message
    assert result.message.startswith("Failed to list namespaces: ")


def test_metadata_is_cached_until_invalidated(handle, fake_catalog):
    fake_catalog.add_table("db.events", properties={"k": "v"})
    table = catalog_load_table(handle, "db.events").unwrap()

    first = table_metadata(table)
    second = table_metadata_ref(table)

    assert first == second
    assert table.cache_state == CACHE_POPULATED
    assert fake_catalog.count("load_table") == 2

    table_invalidate_cache(table)
    assert table.cache_state == CACHE_COLD
    assert table_metadata(table) == first
    assert fake_catalog.count("load_table") == 3


def test_metadata_of_dropped_table(handle, fake_catalog):
    fake_catalog.add_table("db.events")
    table = catalog_load_table(handle, "db.events").unwrap()
    catalog_drop_table(handle, "db.events")

    result = table_metadata(table, use_cache=False)

    assert isinstance(result, Err)
    assert result.kind == "TableLoadError"
    assert result.message.startswith("Failed to load table metadata: ")


def test_inspect(handle, fake_catalog):
    fake_catalog.add_table("db.events")
    table = catalog_load_table(handle, "db.events").unwrap()

    info = table_inspect(table).unwrap()

    assert info.to_dict()["identifier"] == "db.events"
    assert table.cache_state == CACHE_COLD
