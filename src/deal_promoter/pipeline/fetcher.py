"""
Content fetcher: streams a gateway response into a scratch file.

The body is written chunk by chunk so a large CAR export never sits in
memory. The scratch file lives exactly as long as the `fetch` context and
is removed on every exit path.
"""

import asyncio
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, AsyncIterator

import httpx

from ..errors import FetchError
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


@dataclass
class ScratchFile:
    """Downloaded content on local disk, owned by one request."""

    path: Path
    size: int = 0
    released: bool = False


def build_http_client(timeout: float) -> httpx.AsyncClient:
    """Create the shared `httpx.AsyncClient` used for gateway downloads."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
    )


class ContentFetcher:
    """
    Streams remote content to local scratch storage.

    Usage:
        fetcher = ContentFetcher(http_client)
        async with fetcher.fetch(url) as scratch:
            await calculator.compute(scratch.path)
        # scratch.path no longer exists here
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        scratch_dir: str | None = None,
    ):
        self.client = client
        self.chunk_size = chunk_size
        self.scratch_dir = scratch_dir

    @asynccontextmanager
    async def fetch(self, url: str) -> AsyncIterator[ScratchFile]:
        """
        Download `url` into a fresh scratch file.

        Raises:
            FetchError: On a non-2xx response, connection or stream failure,
                or a local I/O error
        """
        scratch = await self._download(url)
        try:
            yield scratch
        finally:
            self._release(scratch)

    async def _download(self, url: str) -> ScratchFile:
        # Created inline: no await may sit between creating the file and
        # owning its cleanup
        try:
            handle = tempfile.NamedTemporaryFile(
                mode='wb',
                prefix='deal-promoter-',
                suffix='.car',
                dir=self.scratch_dir,
                delete=False,
            )
        except OSError as e:
            raise FetchError(f'Failed to create scratch file: {e}', context={'url': url}) from e

        scratch = ScratchFile(path=Path(handle.name))
        try:
            await self._stream_to(handle, url, scratch)
        except BaseException:
            handle.close()
            self._release(scratch)
            raise

        logger.info('fetch.complete', url=url, bytes=scratch.size)
        return scratch

    async def _stream_to(self, handle: IO[bytes], url: str, scratch: ScratchFile) -> None:
        try:
            async with self.client.stream('GET', url) as response:
                if not response.is_success:
                    raise FetchError(
                        f'Gateway returned HTTP {response.status_code}',
                        context={'url': url, 'status_code': response.status_code},
                    )
                async for chunk in response.aiter_bytes(self.chunk_size):
                    await asyncio.to_thread(handle.write, chunk)
                    scratch.size += len(chunk)
            await asyncio.to_thread(handle.close)
        except httpx.HTTPError as e:
            raise FetchError(
                f'Download failed: {type(e).__name__}: {e}',
                context={'url': url, 'bytes_written': scratch.size},
            ) from e
        except OSError as e:
            raise FetchError(
                f'Failed to write scratch file: {e}',
                context={'url': url, 'path': str(scratch.path)},
            ) from e

    @staticmethod
    def _release(scratch: ScratchFile) -> None:
        if scratch.released:
            return
        scratch.released = True
        try:
            os.unlink(scratch.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning('fetch.scratch_cleanup_failed', path=str(scratch.path), error=str(e))
