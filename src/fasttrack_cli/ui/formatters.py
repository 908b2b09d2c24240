"""Output formatters for FastTrack CLI."""

import json
from typing import Any

import yaml
from rich.table import Table

from fasttrack_cli.utils.ui.console import get_console

console = get_console()


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    else:
        format_table(data)


def format_table(data: Any) -> None:
    """Render a dict (or list of flat dicts) as a two-column or wide table."""
    if isinstance(data, dict):
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(str(key), _stringify(value))
        console.print(table)
        return

    if isinstance(data, list) and data and isinstance(data[0], dict):
        table = Table(show_header=True, header_style="bold")
        columns = list(data[0].keys())
        for column in columns:
            table.add_column(column.replace("_", " ").title())
        for row in data:
            table.add_row(*(_stringify(row.get(column)) for column in columns))
        console.print(table)
        return

    console.print(data)


def _stringify(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items())
    return str(value)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")
