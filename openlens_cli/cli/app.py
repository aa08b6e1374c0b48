"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import time

import typer
from rich.console import Console
from rich.logging import RichHandler

from openlens_cli import __version__
from openlens_cli.api import JobServiceClient, JobSubmitter, StatusPoller
from openlens_cli.core.orchestrator import JobOrchestrator
from openlens_cli.core.reporter import StatusReporter
from openlens_cli.core.sources import StaticClipboard, StaticPermission, StdinClipboard
from openlens_cli.exceptions import OpenLensError
from openlens_cli.media import ArtifactFetcher
from openlens_cli.models.config import ClientConfig
from openlens_cli.models.job import OrchestrationState, Phase
from openlens_cli.storage import ConfigManager, MediaLibrary, PersistenceSink
from openlens_cli.utils.path import get_config_dir

from .formatters import (
    print_config,
    print_library_table,
    print_run_summary,
    print_validation_table,
)
from .status_display import StatusDisplay

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("openlens_cli")

app = typer.Typer(
    name="openlens",
    help=(
        "Send a video link to the OpenLens job service, wait for the result and"
        " save it to your media library. Use 'openlens <command> --help' for more"
        " info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


class PromptPermission:
    """Asks on the terminal before anything is written to the media library."""

    async def request(self) -> bool:
        return await asyncio.to_thread(
            typer.confirm, "Allow OpenLens to save videos to your media library?"
        )


def build_orchestrator(
    config: ClientConfig, permissions, reporter: StatusReporter
) -> tuple[JobOrchestrator, JobServiceClient, ArtifactFetcher]:
    """Wires the job pipeline from a validated configuration."""
    client = JobServiceClient(config.service_url, timeout=config.request_timeout)
    fetcher = ArtifactFetcher(config.download_path)
    sink = PersistenceSink(permissions, MediaLibrary(CONFIG_DIR), config.media_dir)
    orchestrator = JobOrchestrator(
        JobSubmitter(client),
        StatusPoller(
            client,
            interval=config.poll_interval,
            max_attempts=config.max_poll_attempts,
        ),
        fetcher,
        sink,
        reporter,
    )
    return orchestrator, client, fetcher


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """OpenLens video job CLI"""
    if version:
        console.print(f"[bold]openlens-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("openlens_cli").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]openlens init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).get_raw_settings())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    service_url: str = typer.Option(
        ..., "--service-url", "-u", help="Base URL of the OpenLens job service."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration without asking."
    ),
):
    """Create the configuration file."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config_manager.save_new_config({"service_url": service_url})
        config = config_manager.load_config()
    except OpenLensError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(f"Job service: [cyan]{config.service_url}[/cyan]")
    console.print("Ready! Copy a video link and try: [cyan]openlens run <URL>[/cyan]")


@app.command(name="run")
def run_command(
    url: str | None = typer.Argument(
        None, help="Video link to process. Stands in for the clipboard."
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read the video link from standard input."
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Save to the media library without asking."
    ),
    service_url: str | None = typer.Option(
        None, "--service-url", help="Override the configured job service URL."
    ),
    poll_interval: float | None = typer.Option(
        None, "--poll-interval", help="Seconds between two status checks."
    ),
    max_polls: int | None = typer.Option(
        None, "--max-polls", help="Give up after this many status checks (0 = never)."
    ),
):
    """Process one video link and save the result."""
    if stdin and url:
        console.print(
            "[yellow]⚠️  Both a URL and --stdin provided. Using --stdin only.[/yellow]"
        )
    clipboard = StdinClipboard() if stdin else StaticClipboard(url)

    cli_options = {
        key: value
        for key, value in {
            "service_url": service_url,
            "poll_interval": poll_interval,
            "max_poll_attempts": max_polls,
        }.items()
        if value is not None
    }

    async def _run_async() -> tuple[OrchestrationState, float, StatusReporter]:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        reporter = StatusReporter()
        display = StatusDisplay(console)
        reporter.subscribe(display)
        permissions = StaticPermission(True) if yes else PromptPermission()
        orchestrator, client, fetcher = build_orchestrator(
            config, permissions, reporter
        )

        start_time = time.monotonic()
        try:
            state = await orchestrator.run_from_clipboard(clipboard)
        finally:
            display.stop()
            await client.close()
            await fetcher.close()
        return state, time.monotonic() - start_time, reporter

    try:
        state, duration, reporter = asyncio.run(_run_async())
    except OpenLensError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    if state.is_terminal:
        print_run_summary(state.source_url or "", state, reporter.last_notice, duration)
    if state.phase != Phase.DONE:
        raise typer.Exit(code=1)


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_validation_table(config)
    except OpenLensError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def library(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show."),
):
    """Show the videos saved to the media library."""

    async def _get_library():
        media_library = MediaLibrary(CONFIG_DIR)
        return await media_library.list_assets(limit), await media_library.get_stats()

    assets, stats_data = asyncio.run(_get_library())
    print_library_table(assets, stats_data)


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print("[red]✗ Config file not found.[/] Run [cyan]openlens init[/cyan].")
        raise typer.Exit(code=1)

    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration file is valid and can be loaded.")
    except OpenLensError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[dim]Testing connectivity to {config.service_url}...[/dim]")

    async def test_connection() -> bool:
        async with JobServiceClient(config.service_url, timeout=10) as client:
            try:
                status = await client.ping()
            except Exception as e:
                console.print(f"[red]✗ Connection test failed: {e}[/red]")
                return False
        if status >= 500:
            console.print(
                f"[red]✗ Job service answered with an error (Status: {status}).[/red]"
            )
            return False
        console.print(f"[green]✓[/] Job service is reachable (Status: {status}).")
        return True

    issues_found = not asyncio.run(test_connection())
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
