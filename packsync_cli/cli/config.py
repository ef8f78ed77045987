"""packsync config command - Inspect configuration."""

import typer
from rich.syntax import Syntax
from rich.table import Table

from packsync_cli.cli.context import get_app_context
from packsync_cli.cli.error_handler import handle_errors
from packsync_cli.cli.output import console
from packsync_cli.config import DEFAULT_CONFIG_FILE, _config_to_dict, export_config_json, export_config_yaml

app = typer.Typer(help="Inspect packsync configuration.")


@app.command("show")
@handle_errors
def show_config(
    ctx: typer.Context,
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format (table, yaml, json).",
    ),
) -> None:
    """Show the effective configuration.

    Example:
        packsync config show
        packsync config show --format yaml
    """
    app_ctx = get_app_context(ctx)
    config = app_ctx.config

    if format == "yaml":
        console.print(Syntax(export_config_yaml(config), "yaml", theme="monokai"))
        return
    if format == "json" or app_ctx.json_output:
        console.print(Syntax(export_config_json(config), "json", theme="monokai"))
        return

    for section, values in _config_to_dict(config).items():
        if not isinstance(values, dict):
            continue
        table = Table(title=section.capitalize())
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in values.items():
            table.add_row(key, "" if value is None else str(value))
        console.print(table)

    console.print()
    console.print(f"[bold]config_dir:[/bold] {config.config_dir}", highlight=False)
    console.print(f"[bold]manifest_path:[/bold] {app_ctx.manifest_path}", highlight=False)
    console.print(f"[bold]pack_name:[/bold] {config.pack_name}", highlight=False)


@app.command("path")
@handle_errors
def show_paths(ctx: typer.Context) -> None:
    """Show where the config file and the plugin manifest are read from.

    Example:
        packsync config path
    """
    app_ctx = get_app_context(ctx)
    config = app_ctx.config
    config_file = app_ctx.config_file or config.config_dir / DEFAULT_CONFIG_FILE

    console.out(f"config:   {config_file}", highlight=False)
    console.out(f"manifest: {app_ctx.manifest_path}", highlight=False)
