"""Shared fixtures for packsync tests."""

import zipfile
from pathlib import Path
from typing import Callable, Optional

import pytest

from packsync_cli.pack.exceptions import FetchError


def write_zip(path: Path, entries: dict[str, Optional[bytes]], modes: Optional[dict[str, int]] = None) -> Path:
    """Write a zip archive.

    Entries mapped to None are stored as directories (name must end in '/').
    """
    modes = modes or {}
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            info = zipfile.ZipInfo(name)
            if data is None:
                info.external_attr = (0o40755 << 16) | 0x10
                zf.writestr(info, b"")
            else:
                info.external_attr = modes.get(name, 0o644) << 16
                zf.writestr(info, data)
    return path


class FakeFetcher:
    """Stands in for ArchiveFetcher, serving zip archives from memory."""

    def __init__(self, archives: Optional[dict[str, dict[str, Optional[bytes]]]] = None) -> None:
        self.archives = archives or {}
        self.calls: list[str] = []

    def fetch(self, url: str, dest: Path, on_progress=None) -> int:
        self.calls.append(url)
        if url not in self.archives:
            raise FetchError("Download failed: HTTP 404", url=url, status_code=404)
        write_zip(dest, self.archives[url])
        return dest.stat().st_size


@pytest.fixture
def zip_factory(tmp_path: Path) -> Callable[..., Path]:
    """Create zip archives under tmp_path."""
    counter = {"n": 0}

    def factory(entries: dict[str, Optional[bytes]], modes: Optional[dict[str, int]] = None) -> Path:
        counter["n"] += 1
        return write_zip(tmp_path / f"archive{counter['n']}.zip", entries, modes)

    return factory


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()
