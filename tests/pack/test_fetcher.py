"""Tests for archive downloads."""

import httpx
import pytest

from packsync_cli.pack.exceptions import FetchError
from packsync_cli.pack.fetcher import DEFAULT_USER_AGENT, ArchiveFetcher

ARCHIVE_URL = "https://github.com/acme/foo/archive/refs/heads/main.zip"
CODELOAD_URL = "https://codeload.github.com/acme/foo/zip/refs/heads/main"


def make_fetcher(handler) -> ArchiveFetcher:
    return ArchiveFetcher(transport=httpx.MockTransport(handler))


class TestArchiveFetcher:
    """Tests for ArchiveFetcher.fetch."""

    def test_writes_body(self, tmp_path):
        dest = tmp_path / "foo.zip"
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"PK\x03\x04data"))

        size = fetcher.fetch(ARCHIVE_URL, dest)

        assert size == 8
        assert dest.read_bytes() == b"PK\x03\x04data"

    def test_follows_redirects(self, tmp_path):
        """Archive hosts redirect to a download domain."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url == ARCHIVE_URL:
                return httpx.Response(302, headers={"Location": CODELOAD_URL})
            return httpx.Response(200, content=b"zipdata")

        dest = tmp_path / "foo.zip"
        make_fetcher(handler).fetch(ARCHIVE_URL, dest)

        assert dest.read_bytes() == b"zipdata"

    def test_sends_user_agent(self, tmp_path):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["User-Agent"]
            return httpx.Response(200, content=b"")

        make_fetcher(handler).fetch(ARCHIVE_URL, tmp_path / "foo.zip")

        assert seen["ua"] == DEFAULT_USER_AGENT

    def test_http_error_status(self, tmp_path):
        fetcher = make_fetcher(lambda request: httpx.Response(404, content=b"Not Found"))

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(ARCHIVE_URL, tmp_path / "foo.zip")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == ARCHIVE_URL
        assert "404" in str(exc_info.value)

    def test_connection_error(self, tmp_path):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError, match="connection refused"):
            make_fetcher(handler).fetch(ARCHIVE_URL, tmp_path / "foo.zip")

    def test_progress_callback(self, tmp_path):
        progress = []
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"x" * 10))

        fetcher.fetch(ARCHIVE_URL, tmp_path / "foo.zip", on_progress=lambda n, total: progress.append((n, total)))

        assert progress[-1] == (10, 10)
