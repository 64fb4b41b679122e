from __future__ import annotations

import sys
import uuid
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Mapping

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from pyiceberg.schema import Schema  # noqa: E402
from pyiceberg.types import LongType, NestedField, StringType  # noqa: E402

from icebridge.core.bridge import ExecutionBridge  # noqa: E402
from icebridge.core.catalog import CatalogHandle  # noqa: E402
from icebridge.core.config import CatalogConfig  # noqa: E402
from icebridge.core.errors import CatalogError, TableLoadError  # noqa: E402
from icebridge.core.models import NamespaceIdent, TableIdent  # noqa: E402


def make_table(
    ident: TableIdent,
    schema: Schema,
    properties: Mapping[str, str] | None = None,
    snapshot: Any = None,
) -> SimpleNamespace:
    """Stand-in for a pyiceberg Table exposing the attributes the handles read."""
    metadata = SimpleNamespace(
        table_uuid=uuid.uuid4(),
        format_version=2,
        location="s3://warehouse/" + "/".join(ident.to_tuple()),
        current_schema_id=schema.schema_id,
        properties=dict(properties or {}),
        schema=lambda: schema,
    )
    return SimpleNamespace(metadata=metadata, current_snapshot=lambda: snapshot)


DEFAULT_SCHEMA = Schema(
    NestedField(field_id=1, name="id", field_type=LongType(), required=True),
    NestedField(field_id=2, name="name", field_type=StringType(), required=False),
    schema_id=0,
)


class FakeCatalog:
    """In-memory catalog shared by every transient client it hands out."""

    def __init__(self) -> None:
        self.namespaces: list[NamespaceIdent] = []
        self.tables: dict[TableIdent, SimpleNamespace] = {}
        self.schemas: dict[TableIdent, Schema] = {}
        self.constructed_with: list[dict[str, str]] = []
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    async def factory(self, properties: Mapping[str, str]) -> "_FakeClient":
        self.constructed_with.append(dict(properties))
        return _FakeClient(self)

    def count(self, method: str) -> int:
        return self.calls.count(method)

    def add_table(self, ident: TableIdent | str, **kwargs: Any) -> TableIdent:
        ident = TableIdent.parse(ident)
        if ident.namespace not in self.namespaces:
            self.namespaces.append(ident.namespace)
        self.tables[ident] = make_table(ident, DEFAULT_SCHEMA, **kwargs)
        return ident


class _FakeClient:
    def __init__(self, catalog: FakeCatalog) -> None:
        self.catalog = catalog

    def _enter(self, method: str) -> None:
        self.catalog.calls.append(method)
        if self.catalog.fail_with is not None:
            raise self.catalog.fail_with

    def _require(self, ident: TableIdent) -> SimpleNamespace:
        table = self.catalog.tables.get(ident)
        if table is None:
            raise TableLoadError(f"Table does not exist: {ident}")
        return table

    async def list_namespaces(self) -> list[NamespaceIdent]:
        self._enter("list_namespaces")
        return list(self.catalog.namespaces)

    async def create_namespace(self, namespace, properties) -> NamespaceIdent:
        self._enter("create_namespace")
        if namespace in self.catalog.namespaces:
            raise CatalogError(f"Namespace already exists: {namespace}")
        self.catalog.namespaces.append(namespace)
        return namespace

    async def table_exists(self, ident: TableIdent) -> bool:
        self._enter("table_exists")
        return ident in self.catalog.tables

    async def drop_table(self, ident: TableIdent) -> None:
        self._enter("drop_table")
        self._require(ident)
        del self.catalog.tables[ident]

    async def create_table(self, ident: TableIdent, schema: Schema, properties) -> Any:
        self._enter("create_table")
        if ident.namespace not in self.catalog.namespaces:
            raise CatalogError(f"Namespace does not exist: {ident.namespace}")
        if ident in self.catalog.tables:
            raise CatalogError(f"Table already exists: {ident}")
        table = make_table(ident, schema, properties)
        self.catalog.tables[ident] = table
        self.catalog.schemas[ident] = schema
        return table

    async def load_table(self, ident: TableIdent) -> Any:
        self._enter("load_table")
        return self._require(ident)

    async def rename_table(self, src: TableIdent, dst: TableIdent) -> None:
        self._enter("rename_table")
        self._require(src)
        if dst in self.catalog.tables:
            raise CatalogError(f"Table already exists: {dst}")
        if dst.namespace not in self.catalog.namespaces:
            raise CatalogError(f"Namespace does not exist: {dst.namespace}")
        self.catalog.tables[dst] = self.catalog.tables.pop(src)


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def config() -> CatalogConfig:
    return CatalogConfig(
        uri="http://localhost:8181/api/catalog",
        warehouse="test_warehouse",
        token="test_token",
    )


@pytest.fixture
def bridge():
    b = ExecutionBridge(timeout=10)
    yield b
    b.close()


@pytest.fixture
def catalog(config: CatalogConfig, fake_catalog: FakeCatalog, bridge: ExecutionBridge) -> CatalogHandle:
    return CatalogHandle(config, client_factory=fake_catalog.factory, bridge=bridge)
