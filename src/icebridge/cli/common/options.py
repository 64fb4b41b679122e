"""Common CLI options for the CLI."""

import typer

UriOpt = typer.Option(
    None,
    "--uri",
    envvar="ICEBRIDGE_URI",
    help="REST catalog endpoint",
)

WarehouseOpt = typer.Option(
    None,
    "--warehouse",
    "-w",
    envvar="ICEBRIDGE_WAREHOUSE",
    help="Warehouse location or name",
)

TokenOpt = typer.Option(
    None,
    "--token",
    envvar="ICEBRIDGE_TOKEN",
    help="Bearer token",
    show_default=False,
)

CredentialOpt = typer.Option(
    None,
    "--credential",
    envvar="ICEBRIDGE_CREDENTIAL",
    help="OAuth2 client credential (client_id:client_secret)",
    show_default=False,
)

OAuth2ServerUriOpt = typer.Option(
    None,
    "--oauth2-server-uri",
    envvar="ICEBRIDGE_OAUTH2_SERVER_URI",
    help="OAuth2 token endpoint",
)

ScopeOpt = typer.Option(
    None,
    "--scope",
    envvar="ICEBRIDGE_SCOPE",
    help="OAuth2 scope",
)

AudienceOpt = typer.Option(
    None,
    "--audience",
    envvar="ICEBRIDGE_AUDIENCE",
    help="OAuth2 audience",
)

ResourceOpt = typer.Option(
    None,
    "--resource",
    envvar="ICEBRIDGE_RESOURCE",
    help="OAuth2 resource",
)

TimeoutOpt = typer.Option(
    None,
    "--timeout",
    envvar="ICEBRIDGE_TIMEOUT",
    help="Per-operation timeout in seconds",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log bridged catalog operations",
)

PropertyOpt = typer.Option(
    [],
    "--property",
    help="Property (key=value). This is reusable.",
    show_default=False,
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show what would change, but do nothing",
)

YesOpt = typer.Option(False, "--yes", help="Skip confirmation prompt")
