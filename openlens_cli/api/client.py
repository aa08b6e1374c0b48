"""
Async HTTP client for the remote video-processing service.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from openlens_cli import __version__
from openlens_cli.exceptions import RemoteRejected, TransportError
from openlens_cli.models.service import SubmitPayload, SubmitResponse

log = logging.getLogger(__name__)


class JobServiceClient:
    """
    Thin async client for the job service's JSON endpoints.

    Every method performs exactly one request. Nothing is retried here; the
    caller owns retry policy.
    """

    def __init__(self, base_url: str, timeout: float = 30.0):
        """
        Initializes the client.

        Args:
            base_url: Root URL of the job service, e.g. ``https://jobs.example.com``.
            timeout: Total timeout in seconds for a single request.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": f"openlens-cli/{__version__}",
                    "Accept": "application/json",
                },
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout, connect=min(15, self.timeout)
                ),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "JobServiceClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def request_json(
        self, method: str, endpoint: str, **kwargs: Any
    ) -> Dict[str, Any]:
        """
        Performs one request and decodes the JSON object in the response.

        Raises:
            RemoteRejected: The service answered with a non-2xx status.
            TransportError: No connection, timeout, or a body that is not a JSON object.
        """
        await self._initialize_session()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        start_time = time.monotonic()

        try:
            async with self._session.request(method, url, **kwargs) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"{method} {url} -> {r.status} ({duration_ms:.0f} ms)")

                if not 200 <= r.status < 300:
                    raise RemoteRejected(r.status)

                body = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"{method} {url} failed: {e!r}")
            raise TransportError(
                f"Could not reach the job service: {str(e) or type(e).__name__}"
            ) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(f"Job service sent an unreadable response: {e}") from e

        if not isinstance(body, dict):
            raise TransportError(
                f"Job service sent an unexpected response: {type(body).__name__}"
            )
        return body

    async def create_job(self, source_url: str) -> str:
        """Calls ``POST /download`` and returns the server-issued task id."""
        payload = SubmitPayload(url=source_url)
        body = await self.request_json("POST", "download", json=payload.model_dump())
        try:
            return SubmitResponse.model_validate(body).task_id
        except ValidationError as e:
            raise TransportError(
                "Job service response did not contain a task id."
            ) from e

    async def get_status(self, job_id: str) -> Dict[str, Any]:
        """Calls ``GET /status/{job_id}`` and returns the raw JSON object."""
        return await self.request_json("GET", f"status/{quote(job_id, safe='')}")

    async def ping(self) -> int:
        """Returns the HTTP status of the service root. Used by diagnostics."""
        await self._initialize_session()
        async with self._session.get(self.base_url) as r:
            return r.status
