"""Application context management for the CLI."""

from dataclasses import dataclass

from icebridge.boundary import catalog_new
from icebridge.cli.common.exits import die, exit_from_err
from icebridge.core.catalog import CatalogHandle
from icebridge.core.config import CatalogConfig
from icebridge.core.responses import Err


@dataclass
class CatalogAppContext:
    """Application context holding the connection config and catalog handle."""

    config: CatalogConfig
    catalog: CatalogHandle


def build_catalog_context(
    *,
    uri: str | None,
    warehouse: str | None = None,
    token: str | None = None,
    credential: str | None = None,
    oauth2_server_uri: str | None = None,
    scope: str | None = None,
    audience: str | None = None,
    resource: str | None = None,
    timeout: float | None = None,
) -> CatalogAppContext:
    """Build the catalog handle for this invocation or exit with an error.

    Args:
        uri: REST catalog endpoint (required).
        warehouse: Optional warehouse.
        token, credential, oauth2_server_uri, scope, audience, resource:
            Optional authentication properties.
        timeout: Optional per-operation timeout in seconds.

    Returns:
        CatalogAppContext: Context with the config and a ready catalog handle.
    """
    if not uri:
        die("Missing catalog URI. Pass --uri or set ICEBRIDGE_URI.", code=2)

    config = CatalogConfig(
        uri=uri,
        warehouse=warehouse,
        token=token,
        credential=credential,
        oauth2_server_uri=oauth2_server_uri,
        scope=scope,
        audience=audience,
        resource=resource,
        timeout=timeout,
    )
    result = catalog_new(config)
    if isinstance(result, Err):
        exit_from_err(result, code=2)
    return CatalogAppContext(config=config, catalog=result.value)
