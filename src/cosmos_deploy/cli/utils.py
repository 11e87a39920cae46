"""
CLI utility helpers: shared consoles and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def to_dict(obj: Any) -> dict[str, Any]:
    """Convert a pydantic model / dict to a JSON-safe plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as a two-column table."""
    table = Table(title=title or None, show_header=False, pad_edge=False)
    table.add_column("key", style="cyan")
    table.add_column("value", overflow="fold")
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        table.add_row(escape(str(key)), escape(str(value)))
    console.print(table)
