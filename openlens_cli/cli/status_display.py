"""
Renders a running job's status updates in the terminal.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status

from openlens_cli.core.reporter import NoticeKind, StatusUpdate
from openlens_cli.models.job import Phase

PHASE_LABELS = {
    Phase.SUBMITTING: "Submitting job...",
    Phase.POLLING: "Waiting for the job to finish...",
    Phase.FETCHING: "Downloading video...",
    Phase.SAVING: "Saving video to your library...",
}

NOTICE_STYLES = {
    NoticeKind.SUCCESS: "[bold green]✓ {}[/bold green]",
    NoticeKind.EMPTY_CLIPBOARD: "[yellow]⚠️  {}[/yellow]",
    NoticeKind.CLIPBOARD_ERROR: "[yellow]⚠️  {}[/yellow]",
    NoticeKind.PERMISSION_DENIED: "[yellow]⚠️  {}[/yellow]",
}


class StatusDisplay:
    """
    Subscribes to a StatusReporter and shows a spinner per phase plus every
    notice. The spinner is stopped before SAVING so the permission prompt
    gets a clean line.
    """

    def __init__(self, console: Console):
        self.console = console
        self._status: Optional[Status] = None
        self._phase = Phase.IDLE

    def __call__(self, update: StatusUpdate) -> None:
        state = update.state
        if state.phase != self._phase:
            self._on_phase(state.phase)
        elif state.phase == Phase.POLLING and self._status and state.last_status:
            self._status.update(
                f"[cyan]{PHASE_LABELS[Phase.POLLING]}[/cyan] "
                f"[dim](status: {state.last_status})[/dim]"
            )

        if update.notice:
            template = NOTICE_STYLES.get(update.notice.kind, "[red]✗ {}[/red]")
            self.console.print(template.format(escape(update.notice.message)))

    def _on_phase(self, phase: Phase) -> None:
        self._phase = phase
        label = PHASE_LABELS.get(phase)
        if phase == Phase.SAVING or label is None:
            self.stop()
            if label:
                self.console.print(f"[cyan]{label}[/cyan]")
            return

        if self._status is None:
            self._status = self.console.status(f"[cyan]{label}[/cyan]")
            self._status.start()
        else:
            self._status.update(f"[cyan]{label}[/cyan]")

    def stop(self) -> None:
        """Stops the spinner if it is running."""
        if self._status is not None:
            self._status.stop()
            self._status = None
