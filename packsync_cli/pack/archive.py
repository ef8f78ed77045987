"""Archive extraction for plugin source archives.

Source archives from code hosts usually wrap their contents in a single
directory (``repo-main/plugin/...``). ``extract_archive`` removes that
wrapper so the plugin files land directly in the destination directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
import zlib
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from packsync_cli.pack.exceptions import ArchiveError

logger = logging.getLogger(__name__)


def find_top_level_dir(names: Iterable[str]) -> Optional[str]:
    """Return the directory shared by every archive entry, if any.

    The candidate is accepted only if every entry is nested at least one
    level deep and all entries have the same first path segment. A single
    top-level file anywhere in the archive rejects it, and so does a
    first segment of ``.`` or ``..``.

    Args:
        names: Archive member names, ``/``-separated

    Returns:
        The common top-level directory name, or None
    """
    top_level: Optional[str] = None
    for name in names:
        parts = name.split("/")
        if len(parts) < 2 or parts[0] in ("", ".", ".."):
            return None
        if top_level is None:
            top_level = parts[0]
        elif parts[0] != top_level:
            return None
    return top_level


def _relative_path(name: str, top_level: Optional[str]) -> str:
    if top_level is not None and name.startswith(top_level + "/"):
        return name[len(top_level) + 1:]
    return name


def _safe_target(dest: Path, relative: str) -> Path:
    target = (dest / relative).resolve()
    root = dest.resolve()
    if target != root and root not in target.parents:
        raise ArchiveError(f"Archive entry escapes destination: {relative}", path=str(dest))
    return target


def extract_archive(archive_path: Path, dest: Path) -> list[Path]:
    """Extract a zip archive into ``dest``, stripping a common top-level directory.

    Directory entries are created with default permissions. Files are
    written over any existing file and get the Unix permission bits stored
    in the archive. Extraction stops at the first error; whatever was
    already written stays in place.

    Args:
        archive_path: Path to the zip archive
        dest: Destination directory (created if missing)

    Returns:
        Paths of the files written

    Raises:
        ArchiveError: If the archive is not a valid zip, a member is corrupt
            or an entry is unsafe
        OSError: If writing to the destination fails
    """
    try:
        zf = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveError(f"Not a valid zip archive: {e}", path=str(archive_path)) from e

    written: list[Path] = []
    with zf:
        infos = zf.infolist()
        top_level = find_top_level_dir(info.filename for info in infos)
        if top_level:
            logger.debug(f"Stripping top-level directory '{top_level}' from {archive_path.name}")

        dest.mkdir(parents=True, exist_ok=True)

        for info in infos:
            relative = _relative_path(info.filename, top_level)
            target = _safe_target(dest, relative)

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                with zf.open(info) as src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise ArchiveError(
                    f"Corrupt archive member {info.filename}: {e}", path=str(archive_path)
                ) from e

            # Archives created on non-Unix hosts carry no permission bits
            mode = stat.S_IMODE(info.external_attr >> 16)
            if mode:
                os.chmod(target, mode)
            written.append(target)

    logger.debug(f"Extracted {len(written)} files from {archive_path.name} to {dest}")
    return written
