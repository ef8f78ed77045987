"""Progress indicators for packsync.

Spinners for operations whose duration is unknown, such as waiting for
the editor or for a download.
"""

from collections.abc import Generator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

# Default console for progress output
console = Console()


@contextmanager
def spinner(
    message: str,
    transient: bool = True,
    enabled: bool = True,
    console_instance: Console | None = None,
) -> Generator[None, None, None]:
    """Show a spinner for indeterminate operations.

    Output printed on the same console while the spinner runs appears
    above it.

    Args:
        message: The message to display next to the spinner
        transient: If True, remove the spinner after completion
        enabled: If False, run the block without a spinner (quiet/JSON output)
        console_instance: Optional custom console instance

    Example:
        with spinner("Syncing plugins..."):
            reconciler.sync(plugin_set, roots)
    """
    if not enabled:
        yield
        return

    prog_console = console_instance or console

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=transient,
        console=prog_console,
    ) as progress:
        progress.add_task(description=message, total=None)
        yield
