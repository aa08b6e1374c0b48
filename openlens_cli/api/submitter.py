"""
Submits new processing jobs to the job service.
"""

import logging

from openlens_cli.models.job import JobHandle, JobRequest

from .client import JobServiceClient

log = logging.getLogger(__name__)


class JobSubmitter:
    """Turns a source URL into a server-side job. One request, no retries."""

    def __init__(self, client: JobServiceClient):
        self.client = client

    async def submit(self, source_url: str) -> JobHandle:
        """
        Sends the source URL to the service and returns the new job's handle.

        URL syntax is left for the service to judge.

        Raises:
            ValueError: If `source_url` is empty after trimming.
            RemoteRejected: The service refused the job.
            TransportError: The request could not be completed.
        """
        request = JobRequest.from_text(source_url)
        if request is None:
            raise ValueError("Source URL cannot be empty.")

        task_id = await self.client.create_job(request.source_url)
        log.debug(f"Submitted job [cyan]{task_id}[/cyan] for {request.source_url}")
        return JobHandle(job_id=task_id)
