"""Host editor queries.

The install roots live under the first entry of Neovim's ``packpath``:
``<packpath>/pack/<pack_name>/{start,opt}``.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from packsync_cli.pack.exceptions import EditorError
from packsync_cli.pack.manifest import Group

logger = logging.getLogger(__name__)

PACKPATH_LUA = "lua io.stdout:write(vim.o.packpath)"


@dataclass(frozen=True)
class PackRoots:
    """Installation roots of both plugin groups."""

    base: Path

    @property
    def start(self) -> Path:
        return self.base / Group.START.value

    @property
    def opt(self) -> Path:
        return self.base / Group.OPT.value

    def for_group(self, group: Group) -> Path:
        return self.base / Group(group).value


def query_packpath(command: str = "nvim", timeout: Optional[float] = 30.0) -> Path:
    """Ask the editor for the first directory of its ``packpath``.

    Raises:
        EditorError: If the editor cannot be run or reports nothing
    """
    args = [command, "--headless", "-c", PACKPATH_LUA, "-c", "qa"]
    logger.debug(f"Querying packpath: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise EditorError(f"Editor executable not found: {command}") from e
    except subprocess.TimeoutExpired as e:
        raise EditorError(f"Editor did not answer within {timeout} seconds") from e

    if result.returncode != 0:
        raise EditorError(
            "Failed to query packpath from editor",
            returncode=result.returncode,
            stderr=result.stderr.strip() or None,
        )

    first = result.stdout.split(",")[0].strip()
    if not first:
        raise EditorError("Editor reported an empty packpath")
    return Path(first)


def resolve_pack_roots(
    pack_name: str,
    command: str = "nvim",
    timeout: Optional[float] = 30.0,
    pack_root: Optional[Path] = None,
) -> PackRoots:
    """Resolve the install roots.

    Args:
        pack_name: Name of the package directory under ``pack/``
        command: Editor executable
        timeout: Seconds to wait for the editor
        pack_root: Explicit ``pack/<pack_name>`` directory; skips the editor query
    """
    if pack_root is not None:
        return PackRoots(base=Path(pack_root).expanduser())
    packpath = query_packpath(command, timeout)
    return PackRoots(base=packpath / "pack" / pack_name)
