"""
Plugin directory reconciliation.

Brings the ``start`` and ``opt`` install roots in line with the declared
plugin set. Each group is handled on its own, ``start`` first:

1. Garbage collection: every entry of the root whose name is not the
   directory name of a declared plugin is deleted.
2. Installation: the root is listed again and every declared plugin whose
   directory is missing is downloaded and extracted.

Installed plugins are identified by directory name only. Their version is
never compared with the manifest, so a plugin is fetched at most once.

While a plugin is being extracted its directory holds a marker file. A
directory still carrying the marker (for example after a crash) is
reported as ``partial``; it is skipped unless ``retry_partial`` is set, in
which case it is deleted and installed again.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from packsync_cli.pack.archive import extract_archive
from packsync_cli.pack.editor import PackRoots
from packsync_cli.pack.fetcher import ArchiveFetcher
from packsync_cli.pack.manifest import Group, Plugin, PluginSet

logger = logging.getLogger(__name__)

INCOMPLETE_MARKER = ".packsync-incomplete"


class InstallState(str, Enum):
    """Observed state of a plugin directory."""

    ABSENT = "absent"
    PRESENT = "present"
    PARTIAL = "partial"


class ActionKind(str, Enum):
    """Kind of reconciliation step."""

    REMOVE = "remove"
    INSTALL = "install"
    REINSTALL = "reinstall"
    SKIP = "skip"


@dataclass(frozen=True)
class SyncAction:
    """A single reconciliation step for one directory entry."""

    kind: ActionKind
    group: Group
    name: str
    plugin: Optional[Plugin] = None
    state: InstallState = InstallState.ABSENT

    def __post_init__(self) -> None:
        if self.kind in (ActionKind.INSTALL, ActionKind.REINSTALL) and self.plugin is None:
            raise ValueError(f"{self.kind.value} action for {self.name} needs a plugin")

    def require_plugin(self) -> Plugin:
        """Return the plugin of an install step."""
        if self.plugin is None:
            raise ValueError(f"{self.kind.value} action for {self.name} has no plugin")
        return self.plugin

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.kind.value,
            "group": self.group.value,
            "name": self.name,
            "repository": self.plugin.repository if self.plugin else None,
            "state": self.state.value,
        }


@dataclass
class SyncReport:
    """Actions carried out (or planned, for a dry run) by a sync."""

    actions: list[SyncAction] = field(default_factory=list)
    dry_run: bool = False

    def names(self, kind: ActionKind, group: Optional[Group] = None) -> list[str]:
        return [
            a.name for a in self.actions
            if a.kind is kind and (group is None or a.group is group)
        ]

    @property
    def removed(self) -> list[str]:
        return self.names(ActionKind.REMOVE)

    @property
    def installed(self) -> list[str]:
        return self.names(ActionKind.INSTALL) + self.names(ActionKind.REINSTALL)

    @property
    def partial(self) -> list[str]:
        return [
            a.name for a in self.actions
            if a.kind is ActionKind.SKIP and a.state is InstallState.PARTIAL
        ]

    @property
    def changed(self) -> bool:
        return any(a.kind is not ActionKind.SKIP for a in self.actions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "removed": self.removed,
            "installed": self.installed,
            "partial": self.partial,
            "actions": [a.to_dict() for a in self.actions],
        }


def expected_names(plugins: list[Plugin]) -> set[str]:
    """Directory names the declared plugins are installed under."""
    return {plugin.dir_name for plugin in plugins}


def install_state(path: Path) -> InstallState:
    """Classify the entry at ``path``."""
    if not path.exists() and not path.is_symlink():
        return InstallState.ABSENT
    if path.is_dir() and (path / INCOMPLETE_MARKER).exists():
        return InstallState.PARTIAL
    return InstallState.PRESENT


def observe(root: Path) -> dict[str, InstallState]:
    """Snapshot the entries of an install root, keyed by name."""
    if not root.is_dir():
        return {}
    return {entry.name: install_state(entry) for entry in sorted(root.iterdir())}


def plan_gc(group: Group, plugins: list[Plugin], observed: dict[str, InstallState]) -> list[SyncAction]:
    """Removal steps for every observed entry no declared plugin claims."""
    expected = expected_names(plugins)
    return [
        SyncAction(ActionKind.REMOVE, group, name, state=state)
        for name, state in sorted(observed.items())
        if name not in expected
    ]


def plan_install(
    group: Group,
    plugins: list[Plugin],
    observed: dict[str, InstallState],
    retry_partial: bool = False,
) -> list[SyncAction]:
    """Install or skip steps for the declared plugins, in declaration order."""
    actions: list[SyncAction] = []
    claimed: set[str] = set()
    for plugin in plugins:
        name = plugin.dir_name
        if name in claimed:
            logger.warning(
                f"{plugin.repository} shares directory '{name}' with another {group.value} plugin, skipping"
            )
            actions.append(SyncAction(ActionKind.SKIP, group, name, plugin, InstallState.PRESENT))
            continue
        claimed.add(name)

        state = observed.get(name, InstallState.ABSENT)
        if state is InstallState.ABSENT:
            kind = ActionKind.INSTALL
        elif state is InstallState.PARTIAL and retry_partial:
            kind = ActionKind.REINSTALL
        else:
            kind = ActionKind.SKIP
        actions.append(SyncAction(kind, group, name, plugin, state))
    return actions


def plan_sync(
    plugin_set: PluginSet,
    observed: dict[Group, dict[str, InstallState]],
    retry_partial: bool = False,
) -> list[SyncAction]:
    """Plan a whole sync without touching the filesystem.

    Args:
        plugin_set: Declared plugins
        observed: Current entries of each group root
        retry_partial: Reinstall plugins left partially extracted

    Returns:
        Steps in execution order: per group, removals then installs
    """
    actions: list[SyncAction] = []
    for group in Group:
        plugins = plugin_set.group(group)
        entries = observed.get(group, {})
        removals = plan_gc(group, plugins, entries)
        removed = {a.name for a in removals}
        remaining = {name: state for name, state in entries.items() if name not in removed}
        actions.extend(removals)
        actions.extend(plan_install(group, plugins, remaining, retry_partial))
    return actions


def _delete(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class Reconciler:
    """Executes syncs against the install roots.

    Any error aborts the sync at once. Nothing is rolled back: entries
    already removed stay removed and an interrupted extraction leaves a
    partial directory behind.
    """

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        retry_partial: bool = False,
        on_action: Optional[Callable[[SyncAction], None]] = None,
    ) -> None:
        self.fetcher = fetcher
        self.retry_partial = retry_partial
        self.on_action = on_action

    def _done(self, report: SyncReport, action: SyncAction) -> None:
        report.actions.append(action)
        if self.on_action is not None:
            self.on_action(action)

    def plan(self, plugin_set: PluginSet, roots: PackRoots) -> list[SyncAction]:
        observed = {group: observe(roots.for_group(group)) for group in Group}
        return plan_sync(plugin_set, observed, self.retry_partial)

    def sync(self, plugin_set: PluginSet, roots: PackRoots, dry_run: bool = False) -> SyncReport:
        """Reconcile both install roots with ``plugin_set``.

        Args:
            plugin_set: Declared plugins
            roots: Install roots
            dry_run: Only plan, do not touch the filesystem

        Returns:
            Report of the executed (or planned) actions

        Raises:
            FetchError: If a download fails
            ArchiveError: If an archive is invalid
            OSError: On filesystem errors
        """
        report = SyncReport(dry_run=dry_run)
        if dry_run:
            for action in self.plan(plugin_set, roots):
                self._done(report, action)
            return report

        for group in Group:
            self._sync_group(group, plugin_set.group(group), roots.for_group(group), report)
        return report

    def _sync_group(self, group: Group, plugins: list[Plugin], root: Path, report: SyncReport) -> None:
        root.mkdir(parents=True, exist_ok=True)

        logger.info(f"Collecting garbage in {root}")
        for action in plan_gc(group, plugins, observe(root)):
            _delete(root / action.name)
            logger.info(f"Removed {group.value}/{action.name}")
            self._done(report, action)

        logger.info(f"Installing {group.value} plugins into {root}")
        for action in plan_install(group, plugins, observe(root), self.retry_partial):
            if action.kind is ActionKind.SKIP:
                if action.state is InstallState.PARTIAL:
                    logger.warning(
                        f"{group.value}/{action.name} looks partially installed; "
                        "use --retry-partial to reinstall it"
                    )
                self._done(report, action)
                continue

            if action.kind is ActionKind.REINSTALL:
                _delete(root / action.name)
            self._install(action.require_plugin(), root)
            logger.info(f"Installed {group.value}/{action.name}")
            self._done(report, action)

    def _install(self, plugin: Plugin, root: Path) -> None:
        target = root / plugin.dir_name
        # Not <name>.zip: a declared plugin directory may carry that name
        fd, tmp_name = tempfile.mkstemp(prefix=f"{plugin.dir_name}.", suffix=".zip", dir=root)
        os.close(fd)
        archive = Path(tmp_name)

        self.fetcher.fetch(plugin.source_url, archive)

        target.mkdir(parents=True, exist_ok=True)
        marker = target / INCOMPLETE_MARKER
        marker.touch()
        extract_archive(archive, target)
        marker.unlink()

        archive.unlink()
