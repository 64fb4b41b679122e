"""CLI application for Iceberg catalog operations."""

import typer

from icebridge.cli.commands.catalog import catalog_app

app = typer.Typer(
    help="icebridge - Iceberg REST catalog tooling",
    no_args_is_help=True,
)

app.add_typer(
    catalog_app,
    name="catalog",
    help="Namespaces, tables and metadata in a REST catalog.",
)


if __name__ == "__main__":
    app()
