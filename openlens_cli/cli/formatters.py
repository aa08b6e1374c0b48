"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from openlens_cli.core.reporter import Notice
from openlens_cli.models.config import ClientConfig
from openlens_cli.models.job import OrchestrationState, Phase
from openlens_cli.utils.formatting import format_duration, format_size, shorten_url


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Run `openlens init --service-url <URL>` to create a configuration.",
            "• Check the values shown by `openlens --show-config`.",
        ],
        "TransportError": [
            "• Check your internet connection.",
            "• Run `openlens diagnose` to test the job service.",
        ],
        "RemoteRejected": [
            "• The job service refused the request; check the video link.",
            "• The service might be temporarily unavailable. Try again later.",
        ],
        "PollError": [
            "• The job service stopped answering status checks.",
            "• Run `openlens diagnose` to test the job service.",
        ],
        "DownloadError": [
            "• The finished video could not be downloaded.",
            "• Check free disk space and the `download_dir` setting.",
        ],
        "PermissionDenied": [
            "• Answer 'yes' when asked, or pass `--yes` to save automatically.",
        ],
        "PersistenceError": [
            "• Check that `media_dir` exists and is writable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ClientConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    attempts = (
        str(config.max_poll_attempts) if config.max_poll_attempts else "Unlimited"
    )
    table.add_row("Job Service:", f"[green]{config.service_url}[/green]")
    table.add_row("Request Timeout:", f"{config.request_timeout:g}s")
    table.add_row("Poll Interval:", f"{config.poll_interval:g}s")
    table.add_row("Max Status Checks:", attempts)
    table.add_row("Download Slot:", f"[dim]{config.download_path}[/dim]")
    table.add_row("Media Folder:", f"[dim]{config.media_dir}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_library_table(
    assets: list[dict[str, Any]], stats_data: Optional[dict[str, Any]]
):
    """Displays the most recently saved videos."""
    console = Console()
    if stats_data:
        console.print(
            f"\n[bold]Videos in Library:[/] [green]{stats_data['total_assets']}[/green]"
            f" [dim]({format_size(stats_data['total_size'])})[/dim]\n"
        )

    if not assets:
        console.print("[dim]No videos saved yet.[/dim]")
        return

    table = Table(title="Recently Saved", box=box.SIMPLE_HEAVY)
    table.add_column("#", style="dim", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Saved At", style="dim")
    for asset in assets:
        table.add_row(
            str(asset["asset_id"]),
            Path(asset["path"]).name,
            format_size(asset["size_bytes"]),
            str(asset["saved_at"]),
        )
    console.print(table)


def print_run_summary(
    source_url: str,
    state: OrchestrationState,
    notice: Optional[Notice],
    duration_s: float,
):
    """Displays the outcome of a single job run."""
    console = Console()
    success = state.phase == Phase.DONE

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Source:", f"[dim]{shorten_url(source_url)}[/dim]")
    table.add_row("Final Phase:", state.phase.value.title())
    table.add_row("Last Job Status:", state.last_status or "-")
    table.add_row("Duration:", format_duration(duration_s))
    if notice:
        style = "green" if not notice.is_error else "red"
        table.add_row("Result:", f"[{style}]{escape(notice.message)}[/{style}]")
    elif state.phase == Phase.ERRORED:
        table.add_row("Result:", "[yellow]Job ended without a result[/yellow]")

    console.print(
        Panel(
            table,
            title=(
                "[bold green]✓ Job Complete[/bold green]"
                if success
                else "[bold red]✗ Job Not Completed[/bold red]"
            ),
            border_style="green" if success else "red",
            expand=False,
        )
    )
