"""CLI command modules for packsync.

This package contains the CLI command implementations and supporting
utilities for error handling, progress display and output formatting.
"""

from packsync_cli.cli import config, plugins, sync

from packsync_cli.cli.exit_codes import ExitCode
from packsync_cli.cli.error_handler import (
    PacksyncError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    handle_errors,
)
from packsync_cli.cli.context import AppContext, get_app_context
from packsync_cli.cli.progress import spinner
from packsync_cli.cli.output import (
    print_json,
    print_table,
    print_result,
    print_step,
    print_section,
)

__all__ = [
    # Command modules
    "config",
    "plugins",
    "sync",
    # Exit codes
    "ExitCode",
    # Error handling
    "PacksyncError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "handle_errors",
    # Context
    "AppContext",
    "get_app_context",
    # Progress
    "spinner",
    # Output
    "print_json",
    "print_table",
    "print_result",
    "print_step",
    "print_section",
]
