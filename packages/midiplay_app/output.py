"""Output formatting for the midiplay CLI"""

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Prints CLI results as rich text, or as JSON documents with --json"""

    def __init__(self, json_mode: bool = False, console: Console | None = None):
        self.json_mode = json_mode
        self.console = console or Console()

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Report a successful command, with optional key/value details"""
        if self.json_mode:
            _print_json({"status": "success", "message": message, "data": data})
            return
        self.console.print(f"[green]✓[/green] {message}")
        for key, value in (data or {}).items():
            self.console.print(f"  {key}: {value}")

    def error(self, message: str, details: str | None = None) -> None:
        """Report a failure on stderr"""
        if self.json_mode:
            _print_json({"status": "error", "message": message, "details": details}, file=sys.stderr)
            return
        err_console = Console(stderr=True)
        err_console.print(f"[red]✗[/red] {message}")
        if details:
            err_console.print(f"  {details}")

    def info(self, message: str) -> None:
        """Human mode only"""
        if not self.json_mode:
            self.console.print(f"[blue]ℹ[/blue] {message}")

    def table(self, title: str, columns: list[str], rows: list[list[Any]]) -> None:
        """Print rows as a table, or as a list of objects in JSON mode"""
        if self.json_mode:
            _print_json([dict(zip(columns, row)) for row in rows])
            return

        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*("-" if cell is None else str(cell) for cell in row))
        self.console.print(table)


def _print_json(payload: Any, file: Any = None) -> None:
    print(json.dumps(payload, indent=2), file=file or sys.stdout)
