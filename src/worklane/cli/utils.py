"""
CLI utility helpers — reference resolution and output formatting.
"""

from __future__ import annotations

import importlib
import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from worklane.core.errors import ConfigError

console = Console()
err_console = Console(stderr=True)


# ── Reference resolution ─────────────────────────────────────────────────


def resolve_ref(ref: str) -> Any:
    """Import and return the object identified by ``'module:qualname'``.

    Raises:
        ConfigError: If the reference is malformed or cannot be imported.
    """
    module_path, _, attr_path = ref.partition(":")
    if not module_path or not attr_path:
        raise ConfigError(f"Invalid reference (expected 'module:attr'): {ref!r}")
    try:
        obj: Any = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigError(f"Cannot import module {module_path!r}", cause=e) from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"{ref!r} has no attribute {part!r}", cause=e) from e
    return obj


def load_list(ref: str) -> list[Any]:
    """Resolve ``ref`` to a list, calling it first when it is a factory."""
    obj = resolve_ref(ref)
    if callable(obj):
        obj = obj()
    if not isinstance(obj, (list, tuple)):
        raise ConfigError(f"{ref!r} must be a list or return one, got {type(obj).__name__}")
    return list(obj)


# ── Output helpers ───────────────────────────────────────────────────────


def fail(message: str) -> None:
    """Print an error line and exit with code 1."""
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=1)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    return value if isinstance(value, str) else repr(value)


def output_rows(
    rows: list[dict[str, Any]],
    *,
    columns: list[str],
    as_json: bool = False,
    title: str = "",
    summary: dict[str, Any] | None = None,
) -> None:
    """Render rows as a Rich table, or as JSON with an optional summary."""
    if as_json:
        payload: dict[str, Any] = dict(summary or {})
        payload["rows"] = rows
        console.print_json(json.dumps(payload, default=repr))
        return

    table = Table(title=title or None)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*[_cell(row.get(c)) for c in columns])
    console.print(table)
    for key, value in (summary or {}).items():
        console.print(f"[bold]{key}[/bold]: {value!r}")
