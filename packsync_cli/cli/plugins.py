"""packsync manifest commands - add, rm, list and status."""

import logging
from typing import Optional

import typer

from packsync_cli.cli.context import get_app_context
from packsync_cli.cli.error_handler import NotFoundError, ValidationError, handle_errors
from packsync_cli.cli.output import console, print_json, print_result, print_table
from packsync_cli.pack.manifest import (
    Group,
    Plugin,
    load_manifest,
    repository_from_url,
    save_manifest,
    version_from_url,
)
from packsync_cli.pack.reconciler import InstallState, expected_names, observe

logger = logging.getLogger(__name__)


@handle_errors
def add_plugin(
    ctx: typer.Context,
    group: Group = typer.Argument(
        ...,
        help="Group to add the plugin to: 'start' (loaded at startup) or 'opt' (loaded on demand).",
        case_sensitive=False,
    ),
    url: str = typer.Argument(
        ...,
        help="URL of the plugin's source archive.",
    ),
    tag: Optional[str] = typer.Option(
        None,
        "--tag",
        "-t",
        help="Version label to record (default: derived from the archive name).",
    ),
) -> None:
    """Add a plugin to the manifest from a zip archive URL.

    The repository name is taken from the first two segments of the URL
    path. The plugin is installed by the next sync.

    Example:
        packsync add start https://github.com/acme/foo/archive/refs/heads/main.zip
        packsync add opt https://github.com/acme/bar/archive/refs/tags/v1.0.0.zip
    """
    app_ctx = get_app_context(ctx)

    try:
        repository = repository_from_url(url)
    except ValueError as e:
        raise ValidationError(str(e), details={"url": url}) from e

    plugin = Plugin(repository=repository, source_url=url, version=tag or version_from_url(url))
    manifest_path = app_ctx.manifest_path
    plugin_set = load_manifest(manifest_path)

    if not plugin_set.add(group, plugin):
        logger.info(f"{repository} already declared in {group.value}")
        if app_ctx.json_output:
            print_json({"added": None, "group": group.value, "repository": repository})
        elif not app_ctx.quiet:
            print_result(False, f"{repository} already exists in {group.value}")
        return

    save_manifest(plugin_set, manifest_path)
    logger.info(f"Added {plugin} to {group.value} in {manifest_path}")

    if app_ctx.json_output:
        print_json({"added": plugin.to_dict(), "group": group.value})
    elif not app_ctx.quiet:
        print_result(True, f"added: {plugin}", {"group": group.value, "url": url})


@handle_errors
def remove_plugin(
    ctx: typer.Context,
    group: Group = typer.Argument(
        ...,
        help="Group to remove the plugin from: 'start' or 'opt'.",
        case_sensitive=False,
    ),
    repository: str = typer.Argument(
        ...,
        help="Repository of the plugin, e.g. 'acme/foo'.",
    ),
) -> None:
    """Remove a plugin from the manifest.

    The installed directory is deleted by the next sync.

    Example:
        packsync rm start acme/foo
    """
    app_ctx = get_app_context(ctx)
    manifest_path = app_ctx.manifest_path
    plugin_set = load_manifest(manifest_path)

    removed = plugin_set.remove(group, repository)
    if removed is None:
        if app_ctx.json_output:
            print_json({"removed": None, "group": group.value, "repository": repository})
        elif not app_ctx.quiet:
            print_result(False, "removed: nothing")
        return

    save_manifest(plugin_set, manifest_path)
    logger.info(f"Removed {removed} from {group.value} in {manifest_path}")

    if app_ctx.json_output:
        print_json({"removed": removed.to_dict(), "group": group.value})
    elif not app_ctx.quiet:
        print_result(True, f"removed: {removed}", {"group": group.value})
        console.print("[dim]Run 'packsync sync' to delete the installed files.[/dim]")


@handle_errors
def list_plugins(ctx: typer.Context) -> None:
    """Print the plugin manifest.

    Example:
        packsync list
        packsync --json list
    """
    app_ctx = get_app_context(ctx)
    manifest_path = app_ctx.manifest_path

    if not manifest_path.exists():
        raise NotFoundError(
            "Manifest not found",
            details={"path": manifest_path, "hint": "add a plugin with 'packsync add'"},
        )

    if app_ctx.json_output:
        print_json(load_manifest(manifest_path).sorted().to_dict())
        return

    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        raise NotFoundError(f"Cannot read manifest: {e}", details={"path": manifest_path}) from e
    console.out(text.rstrip("\n"), highlight=False)


@handle_errors
def plugin_status(ctx: typer.Context) -> None:
    """Show the install state of every declared plugin.

    Plugins are 'present', 'absent' (installed by the next sync) or
    'partial' (an earlier extraction did not finish). Directories no
    plugin claims are listed as 'undeclared' and deleted by the next sync.

    Example:
        packsync status
    """
    app_ctx = get_app_context(ctx)
    plugin_set = load_manifest(app_ctx.manifest_path)
    roots = app_ctx.pack_roots()

    rows = []
    for group in Group:
        plugins = plugin_set.group(group)
        observed = observe(roots.for_group(group))
        for plugin in plugins:
            rows.append({
                "group": group.value,
                "repository": plugin.repository,
                "directory": plugin.dir_name,
                "version": plugin.version,
                "state": observed.get(plugin.dir_name, InstallState.ABSENT).value,
            })
        expected = expected_names(plugins)
        for name in sorted(observed):
            if name not in expected:
                rows.append({
                    "group": group.value,
                    "repository": None,
                    "directory": name,
                    "version": None,
                    "state": "undeclared",
                })

    if app_ctx.json_output:
        print_json({"pack_root": str(roots.base), "plugins": rows})
        return

    if not rows:
        console.print("[yellow]No plugins declared or installed.[/yellow]")
        return

    print_table(
        rows,
        ["group", "repository", "directory", "version", "state"],
        title=f"Plugins in {roots.base}",
        column_styles={"repository": "cyan", "state": "bold"},
    )
