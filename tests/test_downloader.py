from __future__ import annotations

from pathlib import Path

import pytest
from conftest import VIDEO_BYTES

from openlens_cli.exceptions import DownloadError
from openlens_cli.media import ArtifactFetcher


@pytest.mark.asyncio
async def test_fetch_writes_to_fixed_path(job_service, tmp_path: Path) -> None:
    destination = tmp_path / "downloads" / "openlens_download.mp4"
    fetcher = ArtifactFetcher(destination)
    try:
        local_file = await fetcher.fetch(job_service.video_url)
    finally:
        await fetcher.close()

    assert local_file.path == destination
    assert local_file.size_bytes == len(VIDEO_BYTES)
    assert destination.read_bytes() == VIDEO_BYTES


@pytest.mark.asyncio
async def test_fetch_overwrites_previous_download(job_service, tmp_path: Path) -> None:
    destination = tmp_path / "openlens_download.mp4"
    destination.write_bytes(b"old video from a previous job" * 500)
    job_service.video = b"new"

    fetcher = ArtifactFetcher(destination)
    try:
        await fetcher.fetch(job_service.video_url)
    finally:
        await fetcher.close()

    assert destination.read_bytes() == b"new"


@pytest.mark.asyncio
async def test_http_error_is_download_error(job_service, tmp_path: Path) -> None:
    job_service.video_code = 404
    fetcher = ArtifactFetcher(tmp_path / "v.mp4")
    try:
        with pytest.raises(DownloadError, match="404"):
            await fetcher.fetch(job_service.video_url)
    finally:
        await fetcher.close()


@pytest.mark.asyncio
async def test_unwritable_destination_is_download_error(
    job_service, tmp_path: Path
) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("a file where the download directory should be")
    fetcher = ArtifactFetcher(blocker / "v.mp4")
    try:
        with pytest.raises(DownloadError):
            await fetcher.fetch(job_service.video_url)
    finally:
        await fetcher.close()
