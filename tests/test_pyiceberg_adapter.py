from unittest.mock import MagicMock

import pytest
from pyiceberg.exceptions import (
    NamespaceAlreadyExistsError,
    NoSuchNamespaceError,
    NoSuchTableError,
)

from icebridge.core.adapters import pyiceberg_rest
from icebridge.core.adapters.pyiceberg_rest import (
    AsyncRestCatalog,
    connect_rest_catalog,
    translate_error,
)
from icebridge.core.errors import (
    CatalogError,
    ConfigError,
    ExecutionPanic,
    TableLoadError,
)
from icebridge.core.models import NamespaceIdent, TableIdent

EVENTS = TableIdent.of("db", "events")


@pytest.fixture
def pyiceberg_catalog():
    return MagicMock(name="RestCatalog")


@pytest.fixture
def client(pyiceberg_catalog):
    return AsyncRestCatalog(pyiceberg_catalog)


def test_identifiers_are_passed_as_flat_tuples(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.table_exists.return_value = True

    assert bridge.run(client.table_exists, EVENTS) is True
    bridge.run(client.rename_table, EVENTS, TableIdent.of("prod", "events"))

    pyiceberg_catalog.table_exists.assert_called_once_with(("db", "events"))
    pyiceberg_catalog.rename_table.assert_called_once_with(
        ("db", "events"), ("prod", "events")
    )


def test_list_namespaces_normalizes_tuples(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.list_namespaces.return_value = [("db",), ("raw", "landing")]

    assert bridge.run(client.list_namespaces) == [
        NamespaceIdent(("db",)),
        NamespaceIdent(("raw", "landing")),
    ]


def test_create_namespace_and_table(bridge, client, pyiceberg_catalog):
    schema = object()

    created = bridge.run(
        client.create_namespace, NamespaceIdent(("db",)), {"owner": "eng"}
    )
    bridge.run(client.create_table, EVENTS, schema, {"format-version": "2"})

    assert created == NamespaceIdent(("db",))
    pyiceberg_catalog.create_namespace.assert_called_once_with(("db",), {"owner": "eng"})
    pyiceberg_catalog.create_table.assert_called_once_with(
        ("db", "events"), schema, properties={"format-version": "2"}
    )


def test_missing_table_becomes_table_load_error(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.load_table.side_effect = NoSuchTableError("Table does not exist: db.events")

    with pytest.raises(TableLoadError, match="Table does not exist: db.events"):
        bridge.run(client.load_table, EVENTS)


def test_conflicts_become_catalog_errors(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.create_namespace.side_effect = NamespaceAlreadyExistsError(
        "Namespace already exists: db"
    )

    with pytest.raises(CatalogError, match="NamespaceAlreadyExistsError: Namespace already exists"):
        bridge.run(client.create_namespace, NamespaceIdent(("db",)), {})


def test_transport_errors_become_catalog_errors(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.drop_table.side_effect = ConnectionResetError("reset by peer")

    with pytest.raises(CatalogError, match="reset by peer"):
        bridge.run(client.drop_table, EVENTS)


def test_unknown_errors_still_panic(bridge, client, pyiceberg_catalog):
    pyiceberg_catalog.load_table.side_effect = ZeroDivisionError("oops")

    with pytest.raises(ExecutionPanic, match="ZeroDivisionError"):
        bridge.run(client.load_table, EVENTS)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (NoSuchTableError("gone"), TableLoadError),
        (NoSuchNamespaceError("gone"), CatalogError),
        (TimeoutError("slow"), CatalogError),
    ],
)
def test_translate_error(exc, expected):
    assert type(translate_error(exc)) is expected


def test_translate_error_leaves_foreign_errors_alone():
    exc = KeyError("x")
    assert translate_error(exc) is exc


def test_connect_builds_a_rest_catalog_from_properties(bridge, monkeypatch):
    calls = []

    def fake_load_catalog(name, **props):
        calls.append((name, props))
        return MagicMock(name="RestCatalog")

    monkeypatch.setattr(pyiceberg_rest, "load_catalog", fake_load_catalog)

    client = bridge.run(connect_rest_catalog, {"uri": "http://localhost:8181", "token": "t"})

    assert isinstance(client, AsyncRestCatalog)
    assert calls == [
        ("icebridge", {"uri": "http://localhost:8181", "token": "t", "type": "rest"})
    ]


def test_connect_rejects_invalid_configuration(bridge, monkeypatch):
    def fake_load_catalog(name, **props):
        raise ValueError("URI missing, please provide using --uri")

    monkeypatch.setattr(pyiceberg_rest, "load_catalog", fake_load_catalog)

    with pytest.raises(ConfigError, match="URI missing"):
        bridge.run(connect_rest_catalog, {"uri": ""})
