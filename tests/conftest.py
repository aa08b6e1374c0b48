from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from openlens_cli.exceptions import OpenLensError
from openlens_cli.models.job import JobHandle, JobStatus, LocalFile, PersistedAsset

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x42" * 4096


class FakeJobService:
    """In-process stand-in for the remote job service."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.status_ids: list[str] = []
        self.submitted: list[Any] = []
        self.submit_code = 200
        self.submit_body: Any = {"task_id": "abc123"}
        # (http code, body) per status query; the last entry repeats
        self.statuses: list[tuple[int, Any]] = [(200, {"status": "processing"})]
        self.video = VIDEO_BYTES
        self.video_code = 200
        self.base_url = ""

    @property
    def video_url(self) -> str:
        return f"{self.base_url}/files/v.mp4"

    def status_paths(self) -> list[str]:
        return [path for _, path in self.calls if path.startswith("/status/")]

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/download", self._download)
        app.router.add_get("/status/{task_id}", self._status)
        app.router.add_get("/files/v.mp4", self._file)
        return app

    async def _download(self, request: web.Request) -> web.StreamResponse:
        self.calls.append((request.method, request.path))
        self.submitted.append(await request.json())
        if isinstance(self.submit_body, str):
            return web.Response(text=self.submit_body, status=self.submit_code)
        return web.json_response(self.submit_body, status=self.submit_code)

    async def _status(self, request: web.Request) -> web.StreamResponse:
        self.calls.append((request.method, request.path))
        self.status_ids.append(request.match_info["task_id"])
        code, body = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(body, str):
            return web.Response(text=body, status=code)
        return web.json_response(body, status=code)

    async def _file(self, request: web.Request) -> web.StreamResponse:
        self.calls.append((request.method, request.path))
        if self.video_code != 200:
            return web.Response(status=self.video_code)
        return web.Response(body=self.video, content_type="video/mp4")


@pytest_asyncio.fixture
async def job_service():
    service = FakeJobService()
    server = TestServer(service.make_app())
    await server.start_server()
    service.base_url = str(server.make_url("/")).rstrip("/")
    try:
        yield service
    finally:
        await server.close()


class FakeSubmitter:
    def __init__(self, events: list[str], job_id: str = "abc123", error: Exception | None = None):
        self.events = events
        self.job_id = job_id
        self.error = error
        self.urls: list[str] = []

    async def submit(self, source_url: str) -> JobHandle:
        self.events.append("submit")
        self.urls.append(source_url)
        if self.error:
            raise self.error
        return JobHandle(job_id=self.job_id)


class FakePoller:
    def __init__(
        self,
        events: list[str],
        result: JobStatus | None = None,
        raw_statuses: tuple[str, ...] = ("processing", "ready"),
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.events = events
        self.result = result or JobStatus.ready("http://x/v.mp4")
        self.raw_statuses = raw_statuses
        self.error = error
        self.delay = delay
        self.job_ids: list[str] = []

    async def poll_until_terminal(self, job_id: str, on_status=None) -> JobStatus:
        self.events.append("poll")
        self.job_ids.append(job_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        for raw in self.raw_statuses:
            if on_status:
                on_status(raw)
        if self.error:
            raise self.error
        return self.result


class FakeFetcher:
    def __init__(self, events: list[str], path: Path, error: Exception | None = None):
        self.events = events
        self.path = path
        self.error = error
        self.urls: list[str] = []

    async def fetch(self, result_url: str) -> LocalFile:
        self.events.append("fetch")
        self.urls.append(result_url)
        if self.error:
            raise self.error
        return LocalFile(path=self.path, size_bytes=10)


class FakeSink:
    def __init__(self, events: list[str], error: OpenLensError | Exception | None = None):
        self.events = events
        self.error = error
        self.files: list[LocalFile] = []

    async def persist(self, local_file: LocalFile) -> PersistedAsset:
        self.events.append("persist")
        self.files.append(local_file)
        if self.error:
            raise self.error
        return PersistedAsset(asset_id=1, path=local_file.path)


@pytest.fixture
def events() -> list[str]:
    return []
