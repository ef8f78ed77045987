"""Global exception handling for packsync.

This module provides centralized error handling through custom exception
classes and a decorator that ensures consistent error reporting and
exit codes across all CLI commands.
"""

from functools import wraps
from typing import Callable, TypeVar, Any
import logging

import typer
from rich.console import Console
from rich.markup import escape

from packsync_cli.cli.exit_codes import ExitCode
from packsync_cli.pack.exceptions import PackError

# Console for error output (stderr)
console = Console(stderr=True)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PacksyncError(Exception):
    """Base exception for command-level errors.

    Attributes:
        message: Error message
        exit_code: Exit code to use when exiting
        details: Optional dictionary of additional error details
    """

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(PacksyncError):
    """Configuration-related error.

    Examples:
        - Invalid value in config.toml or a PACKSYNC_* variable
        - Install root cannot be determined
    """


class ValidationError(PacksyncError):
    """Validation error for user input.

    Examples:
        - Malformed archive URL
        - Unknown plugin group
    """


class NotFoundError(PacksyncError):
    """Resource not found error.

    Examples:
        - Manifest file does not exist
    """


def _report(message: str, details: dict[str, Any] | None = None) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    for key, value in (details or {}).items():
        console.print(f"  [dim]{key}:[/dim] {escape(str(value))}", highlight=False)


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling across CLI commands.

    - PacksyncError: message and details, with the error's exit code
    - PackError: message from the plugin pack layer, exit code 1
    - KeyboardInterrupt: cancellation message, exit code 130
    - Other exceptions: generic message, exit code 1

    Example:
        @app.command()
        @handle_errors
        def my_command():
            raise ValidationError("Invalid URL")
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PacksyncError as e:
            logger.error(
                f"PacksyncError: {e.message}",
                extra={"exit_code": e.exit_code, "details": e.details},
            )
            _report(e.message, e.details)
            raise typer.Exit(code=e.exit_code)

        except PackError as e:
            logger.error(f"{type(e).__name__}: {e}")
            _report(str(e))
            raise typer.Exit(code=ExitCode.GENERAL_ERROR)

        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user.[/yellow]")
            logger.info("Operation cancelled by user (KeyboardInterrupt)")
            raise typer.Exit(code=ExitCode.CANCELLED)

        except typer.Exit:
            raise

        except Exception as e:
            logger.exception("Unexpected error occurred")
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}", highlight=False)
            console.print("[dim]Run with --debug for more details[/dim]")
            raise typer.Exit(code=ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]
