"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from bitabledb.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM

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


def _cell(value: Any) -> str:
    """Render a record value for a table cell."""
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return escape(json.dumps(value, ensure_ascii=False))
    return escape(str(value))


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be BITABLE-DB consistent."""
        return f"[BITABLE-DB] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {escape(msg)}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {escape(msg)}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {escape(msg)}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
            pointer="❯",
        )
        return bool(prompt.ask())

    def tables_table(
        self, names: Iterable[str], title: str = "Tables", column: str = "Table"
    ) -> None:
        """Render a single-column table of names (tables, record ids)."""
        t = Table(title=title, show_lines=False)
        t.add_column(column, style="ok")

        for name in names:
            t.add_row(escape(str(name)))

        console.print(t)

    def records_table(self, records: list[Mapping[str, Any]], title: str = "Records") -> None:
        """
        Render records as a table.

        The `id` column comes first; other columns follow in first-seen order.
        """
        columns: list[str] = ["id"]
        for r in records:
            for k in r:
                if k not in columns:
                    columns.append(k)

        t = Table(title=title, show_lines=False)
        for c in columns:
            t.add_column(c, style="ok" if c == "id" else None, no_wrap=c == "id")

        for r in records:
            t.add_row(*(_cell(r.get(c)) for c in columns))

        console.print(t)

    def field_changes_table(self, changes: Iterable[Any], title: str = "Field changes") -> None:
        """
        Render a reconcile report.

        Expects objects with `.kind`, `.name`, `.type`, `.ok` and optional `.error`
        (e.g. bitabledb.core.schema.FieldChange).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Field", style="ok")
        t.add_column("Change", style="meta")
        t.add_column("Type", style="meta")
        t.add_column("Result")

        for c in changes:
            kind = getattr(c.kind, "value", str(c.kind))
            previous = getattr(c, "previous_name", None)
            name = escape(f"{previous} → {c.name}" if previous else c.name)
            result = "[ok]OK[/]" if c.ok else f"[err]FAIL[/] {escape(str(c.error))}"
            t.add_row(name, kind, str(c.type), result)

        console.print(t)


out = Out()
