"""packsync sync command - Reconcile installed plugins with the manifest."""

import logging

import typer

from packsync_cli.cli.context import get_app_context
from packsync_cli.cli.error_handler import handle_errors
from packsync_cli.cli.output import console, print_json, print_section, print_step
from packsync_cli.cli.progress import spinner
from packsync_cli.pack.manifest import load_manifest
from packsync_cli.pack.reconciler import ActionKind, InstallState, Reconciler, SyncAction

logger = logging.getLogger(__name__)

# kind -> (label, dry-run label, style)
_ACTION_LABELS = {
    ActionKind.REMOVE: ("removed from {group}", "would remove from {group}", "red"),
    ActionKind.INSTALL: ("installed to {group}", "would install to {group}", "green"),
    ActionKind.REINSTALL: ("reinstalled to {group}", "would reinstall to {group}", "green"),
}


def _print_action(action: SyncAction, dry_run: bool) -> None:
    group = action.group.value
    if action.kind is ActionKind.SKIP:
        if action.state is InstallState.PARTIAL:
            print_step(f"partial in {group}", action.name, style="yellow")
        return
    label, dry_label, style = _ACTION_LABELS[action.kind]
    print_step((dry_label if dry_run else label).format(group=group), action.name, style=style)


@handle_errors
def sync_plugins(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be removed and installed without changing anything.",
    ),
    retry_partial: bool = typer.Option(
        False,
        "--retry-partial",
        help="Delete and reinstall plugins whose extraction did not finish.",
    ),
) -> None:
    """Sync installed plugins with the manifest.

    Directories of plugins no longer in the manifest are deleted, then
    missing plugins are downloaded and extracted. Plugins already
    installed are left alone.

    Example:
        packsync sync
        packsync sync --dry-run
    """
    app_ctx = get_app_context(ctx)
    plugin_set = load_manifest(app_ctx.manifest_path)
    show = app_ctx.show_progress

    reconciler = Reconciler(
        app_ctx.fetcher(),
        retry_partial=retry_partial or app_ctx.config.sync.retry_partial,
        on_action=(lambda action: _print_action(action, dry_run)) if show else None,
    )

    with spinner("Syncing plugins...", enabled=show, console_instance=console):
        roots = app_ctx.pack_roots()
        logger.info(f"Install root: {roots.base}")
        if show:
            print_section(f"{'Planning' if dry_run else 'Syncing'} {len(plugin_set)} plugins in {roots.base}")
        report = reconciler.sync(plugin_set, roots, dry_run=dry_run)

    if app_ctx.json_output:
        print_json(report.to_dict())
        return
    if app_ctx.quiet:
        return

    if not report.changed:
        console.print("[green]Already in sync.[/green]")
    elif dry_run:
        console.print(
            f"[bold]Dry run:[/bold] {len(report.installed)} to install, {len(report.removed)} to remove"
        )
    else:
        console.print(
            f"[green]Sync complete:[/green] {len(report.installed)} installed, {len(report.removed)} removed"
        )
