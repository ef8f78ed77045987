"""Archive downloads over HTTP."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from packsync_cli import __app_name__, __version__
from packsync_cli.pack.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"{__app_name__}/{__version__}"

CHUNK_SIZE = 64 * 1024


class ArchiveFetcher:
    """Downloads plugin archives to local files.

    Redirects are followed, since code hosts serve archives from a
    separate download domain. There is no timeout unless one is given.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    def fetch(
        self,
        url: str,
        dest: Path,
        on_progress: Optional[Callable[[int, Optional[int]], None]] = None,
    ) -> int:
        """Download ``url`` into ``dest``, overwriting it.

        Args:
            url: Archive URL
            dest: Local file to write
            on_progress: Called with (bytes_received, total_bytes or None)

        Returns:
            Number of bytes written

        Raises:
            FetchError: On connection failures and non-success HTTP status
            OSError: If ``dest`` cannot be written
        """
        logger.info(f"Downloading {url}")
        received = 0
        try:
            with self._client() as client, client.stream("GET", url) as response:
                try:
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise FetchError(
                        f"Download failed: HTTP {e.response.status_code}",
                        url=url,
                        status_code=e.response.status_code,
                    ) from e

                total = response.headers.get("Content-Length")
                total_bytes = int(total) if total and total.isdigit() else None

                with open(dest, "wb") as out:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        out.write(chunk)
                        received += len(chunk)
                        if on_progress is not None:
                            on_progress(received, total_bytes)
        except httpx.HTTPError as e:
            raise FetchError(f"Download failed: {e}", url=url) from e

        logger.debug(f"Downloaded {received} bytes from {url} to {dest}")
        return received
