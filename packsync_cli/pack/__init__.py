"""Plugin pack management.

This package provides the manifest store, archive download and extraction,
and the reconciler that keeps Neovim's pack directories in sync with the
manifest.
"""

from packsync_cli.pack.archive import extract_archive, find_top_level_dir
from packsync_cli.pack.editor import PackRoots, query_packpath, resolve_pack_roots
from packsync_cli.pack.exceptions import (
    ArchiveError,
    EditorError,
    FetchError,
    ManifestError,
    PackError,
)
from packsync_cli.pack.fetcher import ArchiveFetcher
from packsync_cli.pack.manifest import (
    Group,
    Plugin,
    PluginSet,
    load_manifest,
    repository_from_url,
    save_manifest,
    version_from_url,
)
from packsync_cli.pack.reconciler import (
    ActionKind,
    InstallState,
    Reconciler,
    SyncAction,
    SyncReport,
    plan_sync,
)

__all__ = [
    # Exceptions
    "PackError",
    "ManifestError",
    "EditorError",
    "FetchError",
    "ArchiveError",
    # Manifest
    "Group",
    "Plugin",
    "PluginSet",
    "load_manifest",
    "save_manifest",
    "repository_from_url",
    "version_from_url",
    # Archives
    "ArchiveFetcher",
    "extract_archive",
    "find_top_level_dir",
    # Install roots
    "PackRoots",
    "query_packpath",
    "resolve_pack_roots",
    # Reconciliation
    "ActionKind",
    "InstallState",
    "Reconciler",
    "SyncAction",
    "SyncReport",
    "plan_sync",
]
