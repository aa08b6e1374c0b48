"""
Handles the download of a finished job's artifact into the fixed local slot.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp

from openlens_cli import __version__
from openlens_cli.exceptions import DownloadError
from openlens_cli.models.job import LocalFile
from openlens_cli.utils.path import create_dir

log = logging.getLogger(__name__)


class ArtifactFetcher:
    """
    Streams a result URL to one fixed local path.

    Whatever was at that path before is overwritten. There is no resume, no
    checksum and no size validation.
    """

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(self, destination_path: Path):
        self.destination_path = Path(destination_path)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        if self._session is None or self._session.closed:
            # No total timeout: large videos may take a while, only stalls abort.
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": f"openlens-cli/{__version__}"},
                timeout=aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90),
            )

    async def close(self) -> None:
        """Closes the download session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch(self, result_url: str) -> LocalFile:
        """
        Downloads `result_url` to the fixed destination path.

        Raises:
            DownloadError: On any network or filesystem failure during the transfer.
        """
        await self._initialize_session()
        name = os.path.basename(self.destination_path)
        try:
            await asyncio.to_thread(create_dir, self.destination_path.parent)
            async with self._session.get(result_url, allow_redirects=True) as response:
                response.raise_for_status()
                bytes_downloaded = 0
                async with aiofiles.open(self.destination_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_downloaded += len(chunk)
        except aiohttp.ClientResponseError as e:
            raise DownloadError(
                f"Result download failed with HTTP {e.status}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(
                f"Result download failed: {str(e) or type(e).__name__}"
            ) from e
        except OSError as e:
            raise DownloadError(f"Could not write '{name}': {e}") from e

        log.debug(f"Downloaded {bytes_downloaded} bytes to [dim]{self.destination_path}[/dim]")
        return LocalFile(path=self.destination_path, size_bytes=bytes_downloaded)
