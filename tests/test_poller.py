from __future__ import annotations

from typing import Any

import pytest

from openlens_cli.api.poller import StatusPoller, classify_status
from openlens_cli.exceptions import PollError, RemoteRejected, TransportError
from openlens_cli.models.job import StatusKind


class ScriptedClient:
    """Answers status queries from a fixed script; exceptions are raised."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.queries: list[str] = []

    async def get_status(self, job_id: str) -> Any:
        self.queries.append(job_id)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_processing_twice_then_ready_returns_once_after_two_waits() -> None:
    client = ScriptedClient(
        {"status": "processing"},
        {"status": "processing"},
        {"status": "ready", "url": "http://x/v.mp4"},
    )
    sleep = SleepRecorder()
    seen: list[str | None] = []

    status = await StatusPoller(client, sleep=sleep).poll_until_terminal(
        "abc123", on_status=seen.append
    )

    assert status.kind == StatusKind.READY
    assert status.result_url == "http://x/v.mp4"
    assert sleep.delays == [2.0, 2.0]
    assert client.queries == ["abc123"] * 3
    assert seen == ["processing", "processing", "ready"]


@pytest.mark.asyncio
async def test_unrecognized_status_fails_silently() -> None:
    client = ScriptedClient({"status": "queued"})
    sleep = SleepRecorder()

    status = await StatusPoller(client, sleep=sleep).poll_until_terminal("abc123")

    assert status.kind == StatusKind.FAILED
    assert status.raw == "queued"
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_ready_without_url_is_failed() -> None:
    client = ScriptedClient({"status": "ready"})

    status = await StatusPoller(client, sleep=SleepRecorder()).poll_until_terminal("j")

    assert status.kind == StatusKind.FAILED
    assert status.result_url is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [TransportError("connection reset"), RemoteRejected(404)]
)
async def test_query_failure_is_poll_error_and_not_retried(error: Exception) -> None:
    client = ScriptedClient({"status": "processing"}, error)

    with pytest.raises(PollError) as excinfo:
        await StatusPoller(client, sleep=SleepRecorder()).poll_until_terminal("j")

    assert excinfo.value.__cause__ is error
    assert len(client.queries) == 2


@pytest.mark.asyncio
async def test_max_attempts_ceiling() -> None:
    client = ScriptedClient(*[{"status": "processing"}] * 3)
    sleep = SleepRecorder()

    with pytest.raises(PollError, match="3 status checks"):
        await StatusPoller(
            client, interval=0.5, max_attempts=3, sleep=sleep
        ).poll_until_terminal("j")

    assert sleep.delays == [0.5, 0.5]


def test_zero_max_attempts_means_unlimited() -> None:
    assert StatusPoller(ScriptedClient(), max_attempts=0).max_attempts is None


@pytest.mark.parametrize(
    "body,kind",
    [
        ({"status": "processing"}, StatusKind.PROCESSING),
        ({"status": "ready", "url": "http://x/v.mp4"}, StatusKind.READY),
        ({"status": "ready", "url": ""}, StatusKind.UNKNOWN),
        ({"status": "failed"}, StatusKind.UNKNOWN),
        ({}, StatusKind.UNKNOWN),
        ({"status": 3}, StatusKind.UNKNOWN),
        (["processing"], StatusKind.UNKNOWN),
    ],
)
def test_classify_status(body: Any, kind: StatusKind) -> None:
    assert classify_status(body).kind == kind
