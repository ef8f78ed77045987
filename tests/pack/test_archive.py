"""Tests for archive extraction."""

import os
import stat
import sys

import pytest

from packsync_cli.pack.archive import extract_archive, find_top_level_dir
from packsync_cli.pack.exceptions import ArchiveError


class TestFindTopLevelDir:
    """Tests for find_top_level_dir."""

    def test_common_directory(self):
        """All entries under one directory."""
        names = ["foo-main/", "foo-main/plugin/foo.lua", "foo-main/README.md"]
        assert find_top_level_dir(names) == "foo-main"

    def test_top_level_file_rejects(self):
        """A bare top-level file rejects stripping."""
        names = ["foo-main/plugin/foo.lua", "LICENSE"]
        assert find_top_level_dir(names) is None

    def test_mixed_directories_reject(self):
        """Entries under different directories reject stripping."""
        names = ["plugin/foo.lua", "doc/foo.txt"]
        assert find_top_level_dir(names) is None

    def test_empty_archive(self):
        """No entries, nothing to strip."""
        assert find_top_level_dir([]) is None

    def test_absolute_entry_rejects(self):
        """An empty first segment is never a candidate."""
        assert find_top_level_dir(["/etc/passwd"]) is None

    def test_parent_segment_rejects(self):
        assert find_top_level_dir(["../evil.txt", "../other.txt"]) is None


class TestExtractArchive:
    """Tests for extract_archive."""

    def test_strips_common_prefix(self, tmp_path, zip_factory):
        """Contents of the wrapper directory land directly in dest."""
        archive = zip_factory({
            "foo-main/": None,
            "foo-main/plugin/": None,
            "foo-main/plugin/foo.lua": b"print('foo')",
            "foo-main/README.md": b"# foo",
        })
        dest = tmp_path / "foo"

        extract_archive(archive, dest)

        assert (dest / "plugin" / "foo.lua").read_bytes() == b"print('foo')"
        assert (dest / "README.md").read_bytes() == b"# foo"
        assert not (dest / "foo-main").exists()

    def test_keeps_paths_without_common_prefix(self, tmp_path, zip_factory):
        """Mixed top-level entries are extracted verbatim."""
        archive = zip_factory({
            "plugin/foo.lua": b"a",
            "doc/foo.txt": b"b",
            "LICENSE": b"c",
        })
        dest = tmp_path / "foo"

        extract_archive(archive, dest)

        assert (dest / "plugin" / "foo.lua").read_bytes() == b"a"
        assert (dest / "doc" / "foo.txt").read_bytes() == b"b"
        assert (dest / "LICENSE").read_bytes() == b"c"

    def test_only_top_level_files(self, tmp_path, zip_factory):
        """Flat archives land directly in dest."""
        archive = zip_factory({"init.lua": b"x", "README": b"y"})
        dest = tmp_path / "flat"

        written = extract_archive(archive, dest)

        assert sorted(p.name for p in written) == ["README", "init.lua"]
        assert (dest / "init.lua").exists()

    def test_empty_archive_creates_dest(self, tmp_path, zip_factory):
        """An empty archive leaves an empty destination."""
        archive = zip_factory({})
        dest = tmp_path / "empty"

        assert extract_archive(archive, dest) == []
        assert dest.is_dir()
        assert list(dest.iterdir()) == []

    def test_overwrites_existing_files(self, tmp_path, zip_factory):
        """Existing files are truncated and rewritten."""
        dest = tmp_path / "foo"
        dest.mkdir()
        (dest / "init.lua").write_text("old content that is longer")
        archive = zip_factory({"foo-1.0/init.lua": b"new"})

        extract_archive(archive, dest)

        assert (dest / "init.lua").read_bytes() == b"new"

    def test_creates_intermediate_directories(self, tmp_path, zip_factory):
        """Files without explicit directory entries still get their parents."""
        archive = zip_factory({"foo-main/lua/foo/init.lua": b"return {}"})
        dest = tmp_path / "foo"

        extract_archive(archive, dest)

        assert (dest / "lua" / "foo" / "init.lua").is_file()

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions")
    def test_preserves_file_mode(self, tmp_path, zip_factory):
        """Stored permission bits are applied to extracted files."""
        archive = zip_factory(
            {"foo-main/bin/run.sh": b"#!/bin/sh\n", "foo-main/doc.txt": b"doc"},
            modes={"foo-main/bin/run.sh": 0o755, "foo-main/doc.txt": 0o640},
        )
        dest = tmp_path / "foo"

        extract_archive(archive, dest)

        assert stat.S_IMODE(os.stat(dest / "bin" / "run.sh").st_mode) == 0o755
        assert stat.S_IMODE(os.stat(dest / "doc.txt").st_mode) == 0o640

    def test_rejects_path_traversal(self, tmp_path, zip_factory):
        """Entries escaping the destination are refused."""
        archive = zip_factory({"../evil.txt": b"x", "ok.txt": b"y"})
        dest = tmp_path / "foo"

        with pytest.raises(ArchiveError, match="escapes destination"):
            extract_archive(archive, dest)

        assert not (tmp_path / "evil.txt").exists()

    def test_invalid_zip(self, tmp_path):
        """A non-zip file raises ArchiveError."""
        bogus = tmp_path / "bogus.zip"
        bogus.write_text("<html>Not Found</html>")

        with pytest.raises(ArchiveError, match="Not a valid zip"):
            extract_archive(bogus, tmp_path / "dest")

    def test_corrupt_member(self, tmp_path, zip_factory):
        """A member whose data fails its CRC check raises ArchiveError."""
        archive = zip_factory({"foo-main/a.txt": b"plugin payload bytes"})
        raw = archive.read_bytes()
        archive.write_bytes(raw.replace(b"plugin payload bytes", b"plugin pAyload bytes"))

        with pytest.raises(ArchiveError, match="Corrupt archive member foo-main/a.txt"):
            extract_archive(archive, tmp_path / "foo")

