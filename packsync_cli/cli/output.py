"""Output formatting utilities for packsync.

This module provides standardized output formatting for command results,
in human-readable form through Rich or as JSON for scripting.
"""

import json
from typing import Any, Dict, List

from rich.console import Console
from rich.json import JSON as RichJSON
from rich.markup import escape
from rich.table import Table

# Default console for output
console = Console()


def print_json(data: Any, console_instance: Console | None = None) -> None:
    """Print data as formatted JSON.

    Args:
        data: Data to print (must be JSON-serializable)
        console_instance: Optional custom console instance
    """
    prog_console = console_instance or console
    json_str = json.dumps(data, indent=2, default=str)
    # No wrapping: output must stay valid JSON
    prog_console.print(RichJSON(json_str), soft_wrap=True)


def print_table(
    data: List[Dict[str, Any]],
    columns: List[str],
    title: str | None = None,
    column_styles: Dict[str, str] | None = None,
    console_instance: Console | None = None,
) -> None:
    """Print data as a formatted table.

    Args:
        data: List of dictionaries containing row data
        columns: List of column keys to display
        title: Optional table title
        column_styles: Optional dict mapping column names to Rich styles
        console_instance: Optional custom console instance

    Example:
        print_table(
            [{"repository": "acme/foo", "state": "present"}],
            ["repository", "state"],
            title="Plugins",
        )
    """
    prog_console = console_instance or console
    column_styles = column_styles or {}

    table = Table(title=title)

    for col in columns:
        header = col.replace("_", " ").title()
        table.add_column(header, style=column_styles.get(col))

    for row in data:
        values = []
        for col in columns:
            value = row.get(col, "")
            if value is None:
                value = ""
            values.append(escape(str(value)))
        table.add_row(*values)

    prog_console.print(table)


def print_result(
    success: bool,
    message: str,
    details: Dict[str, Any] | None = None,
    console_instance: Console | None = None,
) -> None:
    """Print operation result with appropriate styling.

    Args:
        success: Whether the operation succeeded
        message: Result message
        details: Optional dictionary of additional details
        console_instance: Optional custom console instance

    Example:
        print_result(True, "added: acme/foo", {"group": "start"})
    """
    prog_console = console_instance or console

    icon = "[green]✓[/green]" if success else "[yellow]•[/yellow]"
    prog_console.print(f"{icon} {escape(message)}", highlight=False)

    if details:
        for key, value in details.items():
            if value is not None:
                prog_console.print(f"  [dim]{key}:[/dim] {escape(str(value))}", highlight=False)


def print_step(
    label: str,
    name: str,
    style: str = "green",
    console_instance: Console | None = None,
) -> None:
    """Print one line of a multi-step operation, e.g. ``removed: foo``.

    Args:
        label: What happened to the item
        name: The item
        style: Rich style for the label
        console_instance: Optional custom console instance
    """
    prog_console = console_instance or console
    prog_console.print(f"  [{style}]{label}[/{style}]: {escape(name)}", highlight=False)


def print_section(title: str, console_instance: Console | None = None) -> None:
    """Print a section header such as ``[start] gc``."""
    prog_console = console_instance or console
    prog_console.print(f"[bold]{escape(title)}[/bold]", highlight=False)
