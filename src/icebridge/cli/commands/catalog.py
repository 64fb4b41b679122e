"""Commands for Iceberg REST catalog namespaces and tables."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from icebridge.boundary import (
    catalog_create_namespace,
    catalog_create_table,
    catalog_drop_table,
    catalog_list_namespaces,
    catalog_load_table,
    catalog_rename_table,
    catalog_table_exists,
    table_inspect,
    table_metadata,
)
from icebridge.cli.common.context import CatalogAppContext, build_catalog_context
from icebridge.cli.common.exits import die, exit_from_err, exit_from_exc, warn_exit
from icebridge.cli.common.log_setup import setup_logging
from icebridge.cli.common.options import (
    AudienceOpt,
    CredentialOpt,
    DryRunOpt,
    OAuth2ServerUriOpt,
    PropertyOpt,
    ResourceOpt,
    ScopeOpt,
    TimeoutOpt,
    TokenOpt,
    UriOpt,
    VerboseOpt,
    WarehouseOpt,
    YesOpt,
)
from icebridge.cli.common.output import out
from icebridge.core.errors import InvalidIdentifierError
from icebridge.core.models import TableIdent
from icebridge.core.responses import Err

catalog_app = typer.Typer(
    help="Iceberg REST catalog operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@catalog_app.callback()
def _init(
    ctx: typer.Context,
    uri: str | None = UriOpt,
    warehouse: str | None = WarehouseOpt,
    token: str | None = TokenOpt,
    credential: str | None = CredentialOpt,
    oauth2_server_uri: str | None = OAuth2ServerUriOpt,
    scope: str | None = ScopeOpt,
    audience: str | None = AudienceOpt,
    resource: str | None = ResourceOpt,
    timeout: float | None = TimeoutOpt,
    verbose: bool = VerboseOpt,
):
    """Initialize the catalog context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    setup_logging(verbose)
    ctx.obj = build_catalog_context(
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


def parse_properties(items: list[str]) -> dict[str, str]:
    """Turn repeated `key=value` options into a property map."""
    props: dict[str, str] = {}
    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid property '{item}' (expected key=value)")
        key, value = item.split("=", 1)
        if not key:
            raise ValueError(f"Invalid property '{item}' (empty key)")
        props[key] = value
    return props


def _properties_or_exit(items: list[str]) -> dict[str, str]:
    try:
        return parse_properties(items)
    except ValueError as exc:
        exit_from_exc(exc, message=str(exc))


def _table_or_exit(value: str) -> TableIdent:
    """Validate a `namespace.table` argument."""
    try:
        return TableIdent.parse(value)
    except InvalidIdentifierError as exc:
        exit_from_exc(exc, message=str(exc))


def _load_fields_or_exit(path: Path) -> list:
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        exit_from_exc(exc, message=f"Cannot read schema file '{path}': {exc}")
    if isinstance(raw, dict):
        raw = raw.get("fields")
    if not isinstance(raw, list):
        die("Schema file must contain a list of fields (or {\"fields\": [...]}).", code=2)
    return raw


@catalog_app.command("namespaces-list")
def namespaces_list(ctx: typer.Context):
    """List namespaces."""
    appctx: CatalogAppContext = ctx.obj

    with out.status("Loading namespaces..."):
        result = catalog_list_namespaces(appctx.catalog)
    if isinstance(result, Err):
        exit_from_err(result)

    namespaces = result.value
    if not namespaces:
        out.warn("No namespaces found.")
        raise typer.Exit(0)

    out.header("Namespaces")
    out.info(f"Catalog: {appctx.config.uri} | Namespaces: {len(namespaces)}")
    out.namespaces_table(namespaces)


@catalog_app.command("namespaces-create")
def namespaces_create(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Namespace, dotted (e.g. db.schema)"),
    prop: list[str] = PropertyOpt,
):
    """Create a namespace."""
    appctx: CatalogAppContext = ctx.obj
    properties = _properties_or_exit(prop)

    with out.status("Creating namespace..."):
        result = catalog_create_namespace(appctx.catalog, namespace, properties)
    if isinstance(result, Err):
        exit_from_err(result)

    out.success(f"Namespace created: {result.value}")


@catalog_app.command("tables-exists")
def tables_exists(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form namespace.table"),
):
    """Check whether a table exists (exit code 1 when it does not)."""
    appctx: CatalogAppContext = ctx.obj
    ident = _table_or_exit(table)

    with out.status("Checking table..."):
        exists = catalog_table_exists(appctx.catalog, ident)

    if not exists:
        out.warn(f"Table not found (or not reachable): {ident}")
        raise typer.Exit(1)
    out.success(f"Table exists: {ident}")


@catalog_app.command("tables-create")
def tables_create(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form namespace.table"),
    schema_file: Path = typer.Option(
        ..., "--schema-file", help="JSON file with the list of field descriptors"
    ),
    prop: list[str] = PropertyOpt,
):
    """Create a table from a JSON field list."""
    appctx: CatalogAppContext = ctx.obj
    ident = _table_or_exit(table)
    properties = _properties_or_exit(prop)
    fields = _load_fields_or_exit(schema_file)

    with out.status("Creating table..."):
        result = catalog_create_table(appctx.catalog, ident, fields, properties)
    if isinstance(result, Err):
        exit_from_err(result)

    out.success(f"Table created: {ident}")


@catalog_app.command("tables-metadata")
def tables_metadata(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form namespace.table"),
    as_json: bool = typer.Option(False, "--json", help="Print the flat metadata map as JSON"),
):
    """Show table metadata (uuid, format version, location, schema, properties)."""
    appctx: CatalogAppContext = ctx.obj
    ident = _table_or_exit(table)

    with out.status("Loading metadata..."):
        loaded = catalog_load_table(appctx.catalog, ident)
        if isinstance(loaded, Err):
            exit_from_err(loaded)
        result = table_metadata(loaded.value)
    if isinstance(result, Err):
        exit_from_err(result)

    if as_json:
        typer.echo(json.dumps(result.value.to_dict(), indent=2, sort_keys=True))
        return
    _print_metadata(str(ident), result.value)


def _print_metadata(name: str, snapshot) -> None:
    out.header(f"Table {name}")
    out.kv(
        {
            "uuid": snapshot.table_uuid,
            "format version": snapshot.format_version,
            "location": snapshot.location,
            "schema id": snapshot.schema_id,
        }
    )
    out.fields_table(snapshot.fields, title="Schema")
    if snapshot.properties:
        out.properties_table(snapshot.properties)


@catalog_app.command("tables-inspect")
def tables_inspect(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form namespace.table"),
):
    """Show uncached diagnostic info, including the current snapshot."""
    appctx: CatalogAppContext = ctx.obj
    ident = _table_or_exit(table)

    with out.status("Inspecting table..."):
        loaded = catalog_load_table(appctx.catalog, ident)
        if isinstance(loaded, Err):
            exit_from_err(loaded)
        result = table_inspect(loaded.value)
    if isinstance(result, Err):
        exit_from_err(result)

    info = result.value
    out.header(f"Table {info.identifier}")
    out.kv(info.to_dict())
    if info.current_snapshot_id is None:
        out.warn("Table has no current snapshot.")


@catalog_app.command("tables-drop")
def tables_drop(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form namespace.table"),
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
):
    """Drop a table."""
    appctx: CatalogAppContext = ctx.obj
    ident = _table_or_exit(table)

    out.info(f"Table: {ident}")
    if dry_run:
        warn_exit("DRY RUN: no changes will be made.")

    if not yes:
        if not out.confirm(f"Drop table {ident}?"):
            warn_exit("Cancelled.")

    with out.status("Dropping table..."):
        result = catalog_drop_table(appctx.catalog, ident)
    if isinstance(result, Err):
        exit_from_err(result)

    out.success(f"Table dropped: {result.value}")


@catalog_app.command("tables-rename")
def tables_rename(
    ctx: typer.Context,
    src: str = typer.Argument(..., help="Source table (namespace.table)"),
    dst: str = typer.Argument(..., help="Destination table (namespace.table)"),
    yes: bool = YesOpt,
):
    """Rename a table; the destination may be in another namespace."""
    appctx: CatalogAppContext = ctx.obj
    src_ident = _table_or_exit(src)
    dst_ident = _table_or_exit(dst)

    if not yes:
        if not out.confirm(f"Rename {src_ident} to {dst_ident}?"):
            warn_exit("Cancelled.")

    with out.status("Renaming table..."):
        result = catalog_rename_table(appctx.catalog, src_ident, dst_ident)
    if isinstance(result, Err):
        exit_from_err(result)

    out.success(f"Renamed: {result.value['renamed']}")
