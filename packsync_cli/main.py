"""Main CLI entry point for packsync."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from packsync_cli import __app_name__, __version__
from packsync_cli.cli import config, plugins, sync
from packsync_cli.cli.context import AppContext
from packsync_cli.cli.error_handler import ConfigurationError, handle_errors
from packsync_cli.cli.exit_codes import ExitCode
from packsync_cli.config import load_config

# Create the main Typer app
app = typer.Typer(
    name=__app_name__,
    help="packsync - declarative plugin manager for Neovim packages.",
    add_completion=True,
    no_args_is_help=False,
    rich_markup_mode="rich",
)

# Console for CLI output
console = Console()
error_console = Console(stderr=True)

# Exit code of parser errors (unknown command, bad or missing argument)
USAGE_ERROR_EXIT_CODE = 2

# Register commands
app.command("sync")(sync.sync_plugins)
app.command("add")(plugins.add_plugin)
app.command("rm")(plugins.remove_plugin)
app.command("list")(plugins.list_plugins)
app.command("status")(plugins.plugin_status)
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"{__app_name__} v{__version__}")
        raise typer.Exit(code=ExitCode.SUCCESS)


def _setup_logging(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
    default_level: str = "WARNING",
    format_str: Optional[str] = None,
) -> None:
    """Set up logging configuration based on CLI options.

    Args:
        verbose: Enable INFO level logging
        debug: Enable DEBUG level logging
        quiet: Suppress everything below ERROR
        log_file: Optional log file path
        default_level: Level used when no flag is given
        format_str: Log format for non-debug output
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.getLevelName(default_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if debug:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    elif format_str is None:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = []

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        handlers.append(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file else level,
        format=format_str,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured: level={logging.getLevelName(level)}, debug={debug}")


@handle_errors
def _build_context(
    config_file: Optional[Path],
    manifest: Optional[Path],
    json_output: bool,
    quiet: bool,
) -> AppContext:
    """Load configuration and apply command-line overrides."""
    if config_file is not None and not config_file.exists():
        raise ConfigurationError("Config file not found", details={"path": config_file})
    try:
        cfg = load_config(config_file)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if manifest is not None:
        cfg.manifest_path = manifest

    return AppContext(config=cfg, json_output=json_output, quiet=quiet, config_file=config_file)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output (INFO level logging).",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode (DEBUG level logging).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format where applicable.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log to file (logs DEBUG level regardless of console settings).",
    ),
    manifest: Optional[Path] = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Plugin manifest to use instead of the default location.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="packsync config file (default: ~/.config/packsync/config.toml).",
    ),
) -> None:
    """packsync - declarative plugin manager for Neovim packages.

    Plugins are declared in a YAML manifest and installed from source
    archives into Neovim's [cyan]pack/packsync/start[/cyan] and
    [cyan]pack/packsync/opt[/cyan] directories.

    [bold]Commands:[/bold]

    • [cyan]sync[/cyan] - Remove undeclared plugins and install missing ones
    • [cyan]add[/cyan] - Add a plugin to 'start' or 'opt' from a zip URL
    • [cyan]rm[/cyan] - Remove a plugin from the manifest
    • [cyan]list[/cyan] - Print the manifest
    • [cyan]status[/cyan] - Show the install state of each plugin

    [bold]Examples:[/bold]

        packsync add start https://github.com/user/repo/archive/refs/heads/main.zip
        packsync sync
        packsync rm start user/repo
        packsync list
    """
    if quiet and verbose:
        error_console.print("[red]Error:[/red] --quiet and --verbose are mutually exclusive")
        raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    if quiet and debug:
        error_console.print("[red]Error:[/red] --quiet and --debug are mutually exclusive")
        raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    app_ctx = _build_context(config_file, manifest, json_output, quiet)
    ctx.obj = app_ctx

    _setup_logging(
        verbose=verbose,
        debug=debug,
        quiet=quiet,
        log_file=log_file or app_ctx.config.logging.file,
        default_level=app_ctx.config.logging.level,
        format_str=app_ctx.config.logging.format,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"packsync v{__version__} starting")
    logger.debug(f"Options: verbose={verbose}, debug={debug}, json={json_output}, quiet={quiet}")

    if ctx.invoked_subcommand is None:
        error_console.print("[red]Error:[/red] Please specify a command")
        error_console.print(f"Run '{__app_name__} help' for usage.", highlight=False)
        raise typer.Exit(code=ExitCode.GENERAL_ERROR)


@app.command("version")
def show_version() -> None:
    """Show the packsync version."""
    console.print(f"{__app_name__} v{__version__}", highlight=False)


@app.command("help")
def show_help(ctx: typer.Context) -> None:
    """Show usage information."""
    parent = ctx.parent if ctx.parent is not None else ctx
    # Rich help is printed directly and comes back empty
    help_text = parent.get_help()
    if help_text:
        console.out(help_text, highlight=False)


def run() -> None:
    """Console entry point.

    The parser reports usage errors itself and exits with code 2; they
    exit with code 1 like every other failure.
    """
    try:
        app()
    except SystemExit as e:
        if e.code == USAGE_ERROR_EXIT_CODE:
            sys.exit(ExitCode.GENERAL_ERROR)
        raise


__all__ = [
    "app",
    "console",
    "run",
]


if __name__ == "__main__":
    run()
