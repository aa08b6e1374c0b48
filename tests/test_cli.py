from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from conftest import VIDEO_BYTES
from typer.testing import CliRunner

from openlens_cli import __version__
from openlens_cli.cli import app as cli_app
from openlens_cli.core.orchestrator import SUCCESS_MESSAGE
from openlens_cli.storage import ConfigManager

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_dir = tmp_path / "openlens-cli"
    monkeypatch.setattr(cli_app, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(cli_app, "CONFIG_FILE", config_dir / "config.ini")
    return config_dir


def init_config() -> None:
    result = runner.invoke(
        cli_app.app, ["init", "--service-url", "https://jobs.test", "--force"]
    )
    assert result.exit_code == 0, result.output


def test_version() -> None:
    result = runner.invoke(cli_app.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_then_validate(isolated_config: Path) -> None:
    init_config()

    result = runner.invoke(cli_app.app, ["validate"])

    assert (isolated_config / "config.ini").is_file()
    assert result.exit_code == 0
    assert "https://jobs.test" in result.output


def test_run_without_config_fails() -> None:
    result = runner.invoke(cli_app.app, ["run", "https://videos.test/1"])

    assert result.exit_code == 1
    assert "Error: Configuration file not found" in result.output


def test_run_with_empty_clipboard_makes_no_request() -> None:
    init_config()

    result = runner.invoke(cli_app.app, ["run"])

    assert result.exit_code == 1
    assert "Clipboard is empty" in result.output


def test_run_with_blank_stdin() -> None:
    init_config()

    result = runner.invoke(cli_app.app, ["run", "--stdin"], input="   \n# comment\n")

    assert result.exit_code == 1
    assert "Clipboard is empty" in result.output


def test_library_starts_empty() -> None:
    result = runner.invoke(cli_app.app, ["library"])

    assert result.exit_code == 0
    assert "No videos saved yet" in result.output


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    return tmp_path / "Videos"


@pytest.fixture
def service_config(job_service, isolated_config: Path, media_dir: Path, tmp_path: Path):
    ConfigManager(isolated_config / "config.ini").save_new_config(
        {
            "service_url": job_service.base_url,
            "download_dir": str(tmp_path / "downloads"),
            "media_dir": str(media_dir),
        }
    )
    job_service.statuses = [
        (200, {"status": "processing"}),
        (200, {"status": "ready", "url": job_service.video_url}),
    ]
    return job_service


async def invoke(args: list[str], input: str | None = None):
    # The command runs its own event loop, so it needs a thread of its own.
    return await asyncio.to_thread(runner.invoke, cli_app.app, args, input=input)


@pytest.mark.asyncio
async def test_run_saves_video(service_config, media_dir: Path) -> None:
    result = await invoke(
        ["run", "https://videos.test/watch?v=1", "--yes", "--poll-interval", "0.01"]
    )

    assert result.exit_code == 0, result.output
    assert SUCCESS_MESSAGE in result.output
    assert "Job Complete" in result.output
    saved = list(media_dir.iterdir())
    assert len(saved) == 1
    assert saved[0].read_bytes() == VIDEO_BYTES
    assert service_config.submitted == [{"url": "https://videos.test/watch?v=1"}]

    library = await invoke(["library"])
    assert "Videos in Library: 1" in library.output


@pytest.mark.asyncio
async def test_run_declined_prompt_saves_nothing(service_config, media_dir: Path) -> None:
    result = await invoke(
        ["run", "https://videos.test/watch?v=1", "--poll-interval", "0.01"], input="n\n"
    )

    assert result.exit_code == 1
    assert "Permission required to save videos" in result.output
    assert not media_dir.exists()


def test_run_with_unreadable_stdin() -> None:
    init_config()

    result = runner.invoke(cli_app.app, ["run", "--stdin"], input=b"\xff\xfe\n")

    assert result.exit_code == 1
    assert "Failed to read clipboard" in result.output
