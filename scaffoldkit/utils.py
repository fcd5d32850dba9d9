"""Shared utility functions for scaffoldkit.

Provides YAML/JSON file I/O, naming helpers, and Rich-based console output.
Engine code reports recoverable problems through :func:`print_warning` and
keeps going; nothing here raises except the I/O helpers, which let the
underlying error propagate with its original message.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Iterable

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

_verbose = False

# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


def strip_package_scope(package_name: str) -> str:
    """Return the folder name for a package name, dropping any npm scope.

    Examples::

        strip_package_scope("@acme/web-app") -> "web-app"
        strip_package_scope("web-app")       -> "web-app"
    """
    if "/" in package_name:
        return package_name.split("/", 1)[1]
    return package_name


# ---------------------------------------------------------------------------
# YAML / JSON I/O
# ---------------------------------------------------------------------------


def load_yaml(path: str | Path) -> Any:
    """Load and parse a YAML file with ``yaml.safe_load``.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    raw = Path(path).read_text(encoding="utf-8")
    return yaml.safe_load(raw)


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Non-object payloads are wrapped as ``{"_root": data}`` so callers can
    always treat the result as a mapping.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically and the write runs in a
    worker thread.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"

    def _write() -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def set_verbose(enabled: bool) -> None:
    """Enable or disable :func:`print_debug` output."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    """Whether debug output is enabled."""
    return _verbose


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]", highlight=False)


def print_debug(message: str) -> None:
    """Print a dim debug line, only when verbose output is enabled."""
    if is_verbose():
        console.print(f"[dim]{escape(message)}[/dim]", highlight=False)


def print_file_table(
    created: Iterable[str],
    preserved: Iterable[str],
    title: str = "Scaffolded files",
) -> None:
    """Print a table of created and preserved file paths."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Status", no_wrap=True)
    table.add_column("Path")

    for path in created:
        table.add_row("[green]created[/green]", escape(path))
    for path in preserved:
        table.add_row("[yellow]preserved[/yellow]", escape(path))

    console.print(table)
    console.print()
