"""Table handles with a lazily populated metadata cache.

A TableHandle stores identity only: the connection descriptor, the table
identifier and the shared execution bridge. The client library's table
object is loaded fresh for every call and never kept.

Cache states:
    cold       -> populated   first successful `get_metadata`
    populated  -> cold        `invalidate_cache`
    populated  -> populated   cached read, or forced refetch (overwrite)

There is no expiry; staleness is the caller's call.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from icebridge.core.bridge import ExecutionBridge
from icebridge.core.client import ClientFactory, call_client
from icebridge.core.config import CatalogConfig
from icebridge.core.errors import CatalogError, TableLoadError
from icebridge.core.models import (
    FieldSummary,
    InspectionSnapshot,
    MetadataSnapshot,
    TableIdent,
)

logger = logging.getLogger(__name__)

CACHE_COLD = "cold"
CACHE_POPULATED = "populated"


class MetadataCache:
    """Single optional snapshot guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: MetadataSnapshot | None = None

    def get(self) -> MetadataSnapshot | None:
        with self._lock:
            return self._snapshot

    def put(self, snapshot: MetadataSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None

    @property
    def state(self) -> str:
        with self._lock:
            return CACHE_COLD if self._snapshot is None else CACHE_POPULATED


def snapshot_from_table(table: Any) -> MetadataSnapshot:
    """Extract a MetadataSnapshot from a pyiceberg Table."""
    metadata = table.metadata
    schema = metadata.schema()
    fields = tuple(
        FieldSummary(
            id=f.field_id,
            name=f.name,
            required=f.required,
            type=str(f.field_type),
        )
        for f in schema.fields
    )
    return MetadataSnapshot(
        table_uuid=str(metadata.table_uuid),
        format_version=int(metadata.format_version),
        location=metadata.location,
        schema_id=metadata.current_schema_id,
        fields=fields,
        properties={str(k): str(v) for k, v in metadata.properties.items()},
    )


class TableHandle:
    """
    Reconstructable handle for one table.

    Args:
        config: Connection descriptor shared with the parent catalog handle.
        ident: Identifier of the table.
        bridge: Execution bridge shared with the parent catalog handle.
        client_factory: Async factory building a transient catalog client.
    """

    def __init__(
        self,
        config: CatalogConfig,
        ident: TableIdent,
        bridge: ExecutionBridge,
        client_factory: ClientFactory,
    ) -> None:
        self.config = config
        self.ident = ident
        self.bridge = bridge
        self.client_factory = client_factory
        self._cache = MetadataCache()

    def __repr__(self) -> str:
        return f"TableHandle({self.ident.full_name()!r}, uri={self.config.uri!r})"

    @property
    def cache_state(self) -> str:
        """`cold` or `populated`."""
        return self._cache.state

    def get_table(self) -> Any:
        """Load the table object from the catalog. Never cached."""
        try:
            return call_client(
                self.bridge, self.client_factory, self.config, "load_table", self.ident
            )
        except TableLoadError:
            raise
        except CatalogError as exc:
            raise TableLoadError(str(exc)) from exc

    def get_metadata(self, use_cache: bool = True) -> MetadataSnapshot:
        """Return table metadata, from the cache when allowed and present."""
        if use_cache:
            cached = self._cache.get()
            if cached is not None:
                return cached

        snapshot = snapshot_from_table(self.get_table())
        self._cache.put(snapshot)
        logger.debug("Cached metadata for %s (schema %s)", self.ident, snapshot.schema_id)
        return snapshot

    def inspect(self) -> InspectionSnapshot:
        """Fresh diagnostic view of the table; bypasses the cache."""
        table = self.get_table()
        metadata = table.metadata
        current = table.current_snapshot()
        return InspectionSnapshot(
            identifier=self.ident,
            location=metadata.location,
            table_uuid=str(metadata.table_uuid),
            current_snapshot_id=current.snapshot_id if current is not None else None,
            sequence_number=current.sequence_number if current is not None else None,
        )

    def invalidate_cache(self) -> None:
        self._cache.clear()
