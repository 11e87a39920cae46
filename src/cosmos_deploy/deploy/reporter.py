"""Colored operator output: the ``[INFO]`` / ``[SUCCESS]`` / ``[WARNING]`` /
``[ERROR]`` status lines printed while the pipeline runs.

Structured events go to structlog. This is only the human-facing stream.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape


class StatusReporter:
    """Prints labelled status lines to a rich ``Console``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def _label(self, style: str, label: str, message: str) -> None:
        self.console.print(f"[{style}]\\[{label}][/{style}] {escape(message)}", highlight=False)

    def info(self, message: str) -> None:
        self._label("blue", "INFO", message)

    def success(self, message: str) -> None:
        self._label("green", "SUCCESS", message)

    def warning(self, message: str) -> None:
        self._label("yellow", "WARNING", message)

    def error(self, message: str) -> None:
        self._label("red", "ERROR", message)

    def echo(self, message: str = "") -> None:
        self.console.print(escape(message), highlight=False)


__all__ = ["StatusReporter"]
