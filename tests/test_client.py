from __future__ import annotations

import pytest

from openlens_cli.api import JobServiceClient, JobSubmitter
from openlens_cli.exceptions import RemoteRejected, TransportError


@pytest.mark.asyncio
async def test_submit_returns_handle_and_sends_trimmed_url(job_service) -> None:
    async with JobServiceClient(job_service.base_url) as client:
        handle = await JobSubmitter(client).submit("  https://videos.test/watch?v=1 \n")

    assert handle.job_id == "abc123"
    assert job_service.submitted == [{"url": "https://videos.test/watch?v=1"}]
    assert job_service.calls == [("POST", "/download")]


@pytest.mark.asyncio
async def test_server_error_is_remote_rejected_without_status_call(job_service) -> None:
    job_service.submit_code = 500

    async with JobServiceClient(job_service.base_url) as client:
        with pytest.raises(RemoteRejected) as excinfo:
            await JobSubmitter(client).submit("https://videos.test/1")

    assert excinfo.value.code == 500
    assert job_service.status_paths() == []


@pytest.mark.asyncio
async def test_unreadable_body_is_transport_error(job_service) -> None:
    job_service.submit_body = "<html>oops</html>"

    async with JobServiceClient(job_service.base_url) as client:
        with pytest.raises(TransportError):
            await JobSubmitter(client).submit("https://videos.test/1")


@pytest.mark.asyncio
async def test_missing_task_id_is_transport_error(job_service) -> None:
    job_service.submit_body = {"id": "abc123"}

    async with JobServiceClient(job_service.base_url) as client:
        with pytest.raises(TransportError, match="task id"):
            await JobSubmitter(client).submit("https://videos.test/1")


@pytest.mark.asyncio
async def test_unreachable_service_is_transport_error() -> None:
    async with JobServiceClient("http://127.0.0.1:1", timeout=5) as client:
        with pytest.raises(TransportError):
            await JobSubmitter(client).submit("https://videos.test/1")


@pytest.mark.asyncio
async def test_empty_source_is_refused_before_any_request(job_service) -> None:
    async with JobServiceClient(job_service.base_url) as client:
        with pytest.raises(ValueError):
            await JobSubmitter(client).submit("   ")

    assert job_service.calls == []


@pytest.mark.asyncio
async def test_get_status_returns_raw_body(job_service) -> None:
    job_service.statuses = [(200, {"status": "ready", "url": "http://x/v.mp4"})]

    async with JobServiceClient(job_service.base_url + "/") as client:
        body = await client.get_status("abc123")

    assert body == {"status": "ready", "url": "http://x/v.mp4"}
    assert job_service.status_paths() == ["/status/abc123"]


@pytest.mark.asyncio
async def test_job_id_is_sent_as_one_path_segment(job_service) -> None:
    job_service.statuses = [(200, {"status": "processing"})]

    async with JobServiceClient(job_service.base_url) as client:
        body = await client.get_status("job?part=1")

    assert body == {"status": "processing"}
    assert job_service.status_ids == ["job?part=1"]
