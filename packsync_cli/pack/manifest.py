"""
Plugin manifest storage.

The manifest is a YAML document listing the plugins that should be
installed, split into the ``start`` group (loaded at editor startup) and
the ``opt`` group (loaded on demand with ``:packadd``):

    schema_version: 2
    start:
      - repo: acme/foo
        url: https://github.com/acme/foo/archive/refs/heads/main.zip
        version: main
    opt: []

Files written by earlier releases carry no ``schema_version`` key and no
``version`` fields; they are upgraded in memory when loaded and persisted
in the current layout on the next write.
"""

from __future__ import annotations

import logging
import os
import posixpath
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import yaml

from packsync_cli.pack.exceptions import ManifestError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

ARCHIVE_EXTENSIONS = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".zip")


class Group(str, Enum):
    """Plugin load group, named after the pack subdirectory."""

    START = "start"
    OPT = "opt"


@dataclass
class Plugin:
    """A declared plugin."""

    repository: str
    source_url: str
    version: Optional[str] = None

    @property
    def dir_name(self) -> str:
        """Directory name the plugin is installed under."""
        return posixpath.basename(self.repository.rstrip("/"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"repo": self.repository, "url": self.source_url}
        if self.version:
            data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Plugin":
        if not isinstance(data, dict):
            raise ManifestError(f"Plugin entry must be a mapping, got {type(data).__name__}")
        repository = data.get("repo")
        source_url = data.get("url")
        if not repository or not isinstance(repository, str):
            raise ManifestError(f"Plugin entry is missing 'repo': {data}")
        if not source_url or not isinstance(source_url, str):
            raise ManifestError(f"Plugin '{repository}' is missing 'url'")
        version = data.get("version")
        return cls(
            repository=repository,
            source_url=source_url,
            version=str(version) if version is not None else None,
        )

    def __str__(self) -> str:
        if self.version:
            return f"{self.repository}@{self.version}"
        return self.repository


@dataclass
class PluginSet:
    """Declared plugins of both groups."""

    start: list[Plugin] = field(default_factory=list)
    opt: list[Plugin] = field(default_factory=list)

    def group(self, group: Group) -> list[Plugin]:
        """Return the (mutable) plugin list of a group."""
        return self.start if Group(group) is Group.START else self.opt

    def find(self, group: Group, repository: str) -> Optional[Plugin]:
        for plugin in self.group(group):
            if plugin.repository == repository:
                return plugin
        return None

    def add(self, group: Group, plugin: Plugin) -> bool:
        """Add a plugin to a group.

        Returns:
            False if the group already declares the same repository
        """
        if self.find(group, plugin.repository) is not None:
            return False
        self.group(group).append(plugin)
        return True

    def remove(self, group: Group, repository: str) -> Optional[Plugin]:
        """Remove a plugin by exact repository match and return it."""
        plugins = self.group(group)
        for index, plugin in enumerate(plugins):
            if plugin.repository == repository:
                return plugins.pop(index)
        return None

    def sorted(self) -> "PluginSet":
        """Return a copy with each group sorted by repository."""
        return PluginSet(
            start=sorted(self.start, key=lambda p: p.repository),
            opt=sorted(self.opt, key=lambda p: p.repository),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            Group.START.value: [p.to_dict() for p in self.start],
            Group.OPT.value: [p.to_dict() for p in self.opt],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PluginSet":
        plugin_set = cls()
        for group in Group:
            entries = data.get(group.value) or []
            if not isinstance(entries, list):
                raise ManifestError(f"Group '{group.value}' must be a list")
            for entry in entries:
                plugin = Plugin.from_dict(entry)
                if not plugin_set.add(group, plugin):
                    logger.warning(
                        f"Duplicate plugin {plugin.repository} in group {group.value}, keeping the first entry"
                    )
        return plugin_set

    def __len__(self) -> int:
        return len(self.start) + len(self.opt)


def repository_from_url(url: str) -> str:
    """Derive ``owner/repo`` from an archive URL such as
    ``https://github.com/owner/repo/archive/refs/heads/main.zip``.

    Raises:
        ValueError: If the URL is malformed or has fewer than two path segments
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid archive URL: {url}")
    segments = parsed.path.split("/")
    if len(segments) < 3 or not segments[1] or not segments[2]:
        raise ValueError(f"Invalid URL format: {url}")
    return posixpath.join(segments[1], segments[2])


def version_from_url(url: str) -> Optional[str]:
    """Derive a version label from the archive file name.

    ``.../archive/refs/tags/v1.2.0.zip`` gives ``v1.2.0`` and
    ``.../archive/refs/heads/main.zip`` gives ``main``.
    """
    name = posixpath.basename(urlparse(url).path)
    for ext in ARCHIVE_EXTENSIONS:
        if name.endswith(ext):
            name = name[: -len(ext)]
            break
    return name or None


# Schema upgrades, keyed by the version they upgrade from.

def _upgrade_v1(data: dict[str, Any]) -> dict[str, Any]:
    for group in Group:
        for entry in data.get(group.value) or []:
            if isinstance(entry, dict) and "version" not in entry and isinstance(entry.get("url"), str):
                entry["version"] = version_from_url(entry["url"])
    data["schema_version"] = 2
    return data


_UPGRADES: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _upgrade_v1,
}


def upgrade_manifest(data: dict[str, Any]) -> dict[str, Any]:
    """Bring raw manifest data up to the current schema version."""
    version = data.get("schema_version", 1)
    if not isinstance(version, int) or version < 1:
        raise ManifestError(f"Invalid schema_version: {version!r}")
    if version > SCHEMA_VERSION:
        raise ManifestError(
            f"Manifest schema version {version} is newer than supported ({SCHEMA_VERSION})"
        )
    while version < SCHEMA_VERSION:
        logger.info(f"Upgrading manifest schema from version {version}")
        data = _UPGRADES[version](data)
        version = data["schema_version"]
    return data


def load_manifest(path: Path) -> PluginSet:
    """Load the plugin manifest.

    A missing file is an empty plugin set.

    Raises:
        ManifestError: If the file cannot be read or is not a valid manifest
    """
    if not path.exists():
        logger.debug(f"Manifest {path} does not exist, using empty plugin set")
        return PluginSet()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in manifest: {e}", path=str(path)) from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest: {e}", path=str(path)) from e

    if data is None:
        return PluginSet()
    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a mapping with 'start' and 'opt' lists", path=str(path))

    try:
        return PluginSet.from_dict(upgrade_manifest(data))
    except ManifestError as e:
        if e.path is None:
            e.path = str(path)
        raise


def save_manifest(plugin_set: PluginSet, path: Path) -> None:
    """Write the manifest, sorting each group by repository.

    The file is replaced atomically.

    Raises:
        ManifestError: If the file cannot be written
    """
    content = yaml.safe_dump(
        plugin_set.sorted().to_dict(),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ManifestError(f"Cannot write manifest: {e}", path=str(path)) from e
    logger.debug(f"Wrote manifest with {len(plugin_set)} plugins to {path}")
