"""
Polls the job service until a submitted job settles.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from pydantic import ValidationError

from openlens_cli.exceptions import OpenLensError, PollError
from openlens_cli.models.config import DEFAULT_POLL_INTERVAL
from openlens_cli.models.job import JobStatus, StatusKind
from openlens_cli.models.service import StatusResponse

from .client import JobServiceClient

log = logging.getLogger(__name__)

StatusCallback = Callable[[Optional[str]], None]


def classify_status(body: Any) -> JobStatus:
    """
    Maps one raw status body onto a JobStatus.

    Only ``processing`` keeps the loop going and only ``ready`` with a URL is
    a success. Everything else is reported as UNKNOWN.
    """
    try:
        response = StatusResponse.model_validate(body)
    except ValidationError:
        return JobStatus.unknown(raw=None)

    if response.status == "processing":
        return JobStatus.processing(raw=response.status)
    if response.status == "ready" and response.url:
        return JobStatus.ready(response.url, raw=response.status)
    return JobStatus.unknown(raw=response.status)


class StatusPoller:
    """
    Queries a job's status at a fixed interval until it is ready or failed.

    The loop is unbounded unless `max_attempts` is set. Waiting between
    queries is a plain ``asyncio.sleep``, so the event loop stays free.
    """

    def __init__(
        self,
        client: JobServiceClient,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initializes the poller.

        Args:
            client: The job service client used for status queries.
            interval: Seconds to wait between two queries of a processing job.
            max_attempts: Optional ceiling on the number of queries. None or 0
                polls until the job settles.
            sleep: Awaitable used for the inter-poll delay.
        """
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts or None
        self._sleep = sleep

    async def poll_until_terminal(
        self, job_id: str, on_status: Optional[StatusCallback] = None
    ) -> JobStatus:
        """
        Polls `job_id` and returns its terminal status (READY or FAILED).

        `on_status` receives the raw status string of every response.

        Raises:
            PollError: A status query failed, or `max_attempts` was exhausted.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                body = await self.client.get_status(job_id)
            except OpenLensError as e:
                raise PollError(f"Status check for job {job_id} failed: {e}") from e

            status = classify_status(body)
            if on_status:
                on_status(status.raw)

            if status.kind == StatusKind.UNKNOWN:
                log.warning(
                    f"[yellow]Job {job_id} ended with status "
                    f"'{status.raw}'. Giving up.[/yellow]"
                )
                status = JobStatus.failed(raw=status.raw)

            if status.is_terminal:
                log.debug(f"Job [cyan]{job_id}[/cyan] settled as {status.kind.value}")
                return status

            if self.max_attempts and attempt >= self.max_attempts:
                raise PollError(
                    f"Job {job_id} was still processing after {attempt} status checks."
                )

            log.debug(
                f"Job {job_id} still processing (check {attempt}), "
                f"next check in {self.interval:.1f}s"
            )
            await self._sleep(self.interval)
