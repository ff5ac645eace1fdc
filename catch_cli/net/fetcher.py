"""
Streams HTTP response bodies into memory with progress reporting.
"""

import asyncio
import logging
from dataclasses import dataclass

import aiohttp

from catch_cli.cli.progress_manager import TransferTask
from catch_cli.exceptions import FetchError
from catch_cli.models.stats import TransferStats

log = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """The body of a completed transfer."""

    url: str
    data: bytes
    # Advertised Content-Length, 0 when the server did not send one.
    total_length: int
    stats: TransferStats


class Fetcher:
    """
    A small HTTP fetcher owning an aiohttp session.

    Use as an async context manager so the session is closed on exit:

        async with Fetcher() as fetcher:
            result = await fetcher.fetch(url)
    """

    def __init__(
        self,
        chunk_size: int = 131072,
        timeout: float = 90.0,
        max_attempts: int = 1,
        base_delay: float = 1.5,
    ):
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session and not self._session.closed:
            return self._session

        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=15, sock_read=self.timeout
        )
        self._session = aiohttp.ClientSession(timeout=timeout)
        log.debug(f"Created fetch session with sock_read timeout {self.timeout}s")
        return self._session

    async def close(self) -> None:
        """Closes the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Fetch session closed.")
        self._session = None

    async def __aenter__(self) -> "Fetcher":
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch(self, url: str, progress: TransferTask | None = None) -> FetchResult:
        """
        Downloads `url` into memory.

        Args:
            url: The resource to fetch.
            progress: Optional progress task; its total is set from the
                advertised length and it is advanced after every chunk.

        Returns:
            The body together with its advertised length.

        Raises:
            FetchError: On HTTP error statuses, transport errors or timeouts,
                once all attempts are used up.
        """
        last_exception: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._fetch_once(url, progress)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Fetch attempt {attempt}/{self.max_attempts} for '{url}' "
                    f"failed: {e}"
                )
                if attempt < self.max_attempts:
                    if progress:
                        progress.reset()
                        progress.set_status(f"retrying ({attempt}/{self.max_attempts})")
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        raise FetchError(f"Failed to fetch '{url}': {last_exception}") from last_exception

    async def _fetch_once(
        self, url: str, progress: TransferTask | None
    ) -> FetchResult:
        session = await self._get_session()
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()

            total_length = int(response.headers.get("Content-Length", 0) or 0)
            stats = TransferStats(url=url, total_length=total_length)
            if progress:
                progress.set_total(total_length)
                progress.set_status("")

            buffer = bytearray()
            async for chunk in response.content.iter_chunked(self.chunk_size):
                buffer += chunk
                stats.record_chunk(len(chunk))
                if progress:
                    progress.advance(len(chunk))

        log.debug(
            f"Fetched {stats.bytes_received} bytes from '{url}' "
            f"in {stats.chunks_received} chunks"
        )
        if progress:
            progress.finish("done")
        return FetchResult(
            url=url, data=bytes(buffer), total_length=total_length, stats=stats
        )
