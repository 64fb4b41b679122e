"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from icebridge.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}", highlight=False)

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def print(self, msg: str) -> None:
        """Print a raw Rich-formatted message to the console."""
        console.print(msg)

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation before a destructive catalog change.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = questionary.confirm(
            f"[icebridge] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def namespaces_table(self, namespaces: Iterable[Any], title: str = "Namespaces") -> None:
        """Render namespaces (objects with `.parts`, or dotted strings)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Namespace", style="ok")
        t.add_column("Depth", style="meta", justify="right")

        for ns in namespaces:
            parts = getattr(ns, "parts", None) or tuple(str(ns).split("."))
            t.add_row(".".join(parts), str(len(parts)))

        console.print(t)

    def fields_table(self, fields: Iterable[Any], title: str = "Fields") -> None:
        """
        Render schema fields.

        Expects objects with `.id`, `.name`, `.required`, `.type`
        (e.g. icebridge.core.models.FieldSummary).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("ID", style="ok", no_wrap=True, justify="right")
        t.add_column("Name")
        t.add_column("Type", style="meta")
        t.add_column("Required")

        for f in fields:
            t.add_row(str(f.id), f.name, f.type, "yes" if f.required else "no")

        console.print(t)

    def properties_table(self, properties: Mapping[str, str], title: str = "Properties") -> None:
        """Render a key/value property map, sorted by key."""
        t = Table(title=title, show_lines=False)
        t.add_column("Key", style="meta")
        t.add_column("Value")

        for k in sorted(properties):
            t.add_row(k, str(properties[k]))

        console.print(t)


out = Out()
