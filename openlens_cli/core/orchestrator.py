"""
The main orchestrator: one source URL in, one saved video (or one notice) out.
"""

import asyncio
import dataclasses
import logging
from typing import Optional

from openlens_cli.api.poller import StatusPoller
from openlens_cli.api.submitter import JobSubmitter
from openlens_cli.exceptions import PermissionDenied, PersistenceError
from openlens_cli.media.downloader import ArtifactFetcher
from openlens_cli.models.job import (
    JobRequest,
    OrchestrationState,
    Phase,
    StatusKind,
)
from openlens_cli.storage.media_store import PersistenceSink

from .reporter import Notice, NoticeKind, StatusReporter
from .sources import ClipboardSource

log = logging.getLogger(__name__)

EMPTY_CLIPBOARD_MESSAGE = "Clipboard is empty"
CLIPBOARD_ERROR_MESSAGE = "Failed to read clipboard"
GENERIC_SAVE_FAILURE_MESSAGE = "Failed to save video"
SUCCESS_MESSAGE = "Video saved to your library"


class _RunContext:
    """
    Progress of a single `run` call.

    Each run advances its own state. Only the most recently started run
    publishes to the orchestrator, so an older overlapping run finishes
    quietly instead of fighting over the reported state.
    """

    def __init__(self, orchestrator: "JobOrchestrator", run_id: int, source_url: Optional[str]):
        self.orchestrator = orchestrator
        self.run_id = run_id
        self.state = OrchestrationState(source_url=source_url)

    def publish(self, notice: Optional[Notice] = None) -> None:
        self.orchestrator._publish(self.run_id, self.state, notice)

    def advance(self, phase: Phase, notice: Optional[Notice] = None) -> None:
        log.debug(f"Phase: {self.state.phase.value} -> {phase.value}")
        self.state = self.state.advanced_to(phase)
        self.publish(notice)

    def record_status(self, raw_status: Optional[str]) -> None:
        self.state = dataclasses.replace(self.state, last_status=raw_status)
        self.publish()

    def fail(self, kind: NoticeKind, message: str) -> OrchestrationState:
        log.debug(f"Run failed ({kind.value}): {message}")
        self.advance(Phase.ERRORED, Notice(kind, message))
        return self.state


class JobOrchestrator:
    """
    Runs submit -> poll -> fetch -> save for a single job.

    Each phase catches its own failures and turns them into exactly one
    notice on the reporter; `run` itself never raises for job failures.
    Overlapping runs are allowed but share the download slot.
    """

    def __init__(
        self,
        submitter: JobSubmitter,
        poller: StatusPoller,
        fetcher: ArtifactFetcher,
        sink: PersistenceSink,
        reporter: Optional[StatusReporter] = None,
    ):
        self.submitter = submitter
        self.poller = poller
        self.fetcher = fetcher
        self.sink = sink
        self.reporter = reporter or StatusReporter()
        self._state = OrchestrationState()
        self._task: Optional[asyncio.Task] = None
        self._latest_run = 0
        self._active_runs = 0

    @property
    def state(self) -> OrchestrationState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._active_runs > 0

    def _publish(
        self, run_id: int, state: OrchestrationState, notice: Optional[Notice] = None
    ) -> None:
        if run_id != self._latest_run:
            log.debug(f"Run {run_id} was superseded; dropping its {state.phase.value} update")
            return
        self._state = state
        self.reporter.publish(state, notice)

    def _begin(self, source_url: Optional[str] = None) -> _RunContext:
        self._latest_run += 1
        context = _RunContext(self, self._latest_run, source_url)
        context.publish()
        return context

    async def run(self, source_url: Optional[str]) -> OrchestrationState:
        """
        Processes `source_url` end to end and returns the final state.

        Empty or whitespace-only input reports the empty-clipboard notice and
        leaves the state at IDLE without touching the network.
        """
        if self.is_busy:
            log.warning(
                "[yellow]A job is already running; the download slot will be "
                "shared.[/yellow]"
            )

        request = JobRequest.from_text(source_url)
        context = self._begin(request.source_url if request else None)
        if request is None:
            context.publish(Notice(NoticeKind.EMPTY_CLIPBOARD, EMPTY_CLIPBOARD_MESSAGE))
            return context.state

        self._active_runs += 1
        try:
            return await self._run_job(context, request)
        finally:
            self._active_runs -= 1

    async def _run_job(self, context: _RunContext, request: JobRequest) -> OrchestrationState:
        context.advance(Phase.SUBMITTING)
        try:
            handle = await self.submitter.submit(request.source_url)
        except Exception as e:
            return context.fail(NoticeKind.DOWNLOAD_ERROR, f"Download error: {e}")

        context.advance(Phase.POLLING)
        try:
            status = await self.poller.poll_until_terminal(
                handle.job_id, on_status=context.record_status
            )
        except Exception as e:
            return context.fail(NoticeKind.ERROR, f"Error: {e}")

        if status.kind != StatusKind.READY or not status.result_url:
            # Silent give-up: the job ended without a result.
            log.debug(f"Job {handle.job_id} finished without a result ({status.raw!r})")
            context.advance(Phase.ERRORED)
            return context.state

        context.advance(Phase.FETCHING)
        try:
            local_file = await self.fetcher.fetch(status.result_url)
            context.advance(Phase.SAVING)
            asset = await self.sink.persist(local_file)
        except PermissionDenied as e:
            return context.fail(NoticeKind.PERMISSION_DENIED, _message_of(e))
        except PersistenceError as e:
            return context.fail(NoticeKind.SAVE_FAILED, _message_of(e))
        except Exception as e:
            return context.fail(NoticeKind.DOWNLOAD_ERROR, _message_of(e))

        log.info(f"[green]✓ Saved asset #{asset.asset_id}:[/green] [dim]{asset.path}[/dim]")
        context.advance(Phase.DONE, Notice(NoticeKind.SUCCESS, SUCCESS_MESSAGE))
        return context.state

    async def run_from_clipboard(self, clipboard: ClipboardSource) -> OrchestrationState:
        """
        Reads the clipboard and runs whatever it holds.

        A clipboard that cannot be read reports the clipboard-error notice and
        leaves the state at IDLE.
        """
        try:
            text = await clipboard.read_text()
        except Exception as e:
            log.debug(f"Reading the clipboard failed: {e!r}")
            context = self._begin()
            context.publish(Notice(NoticeKind.CLIPBOARD_ERROR, CLIPBOARD_ERROR_MESSAGE))
            return context.state
        return await self.run(text)

    def start(self, source_url: Optional[str]) -> asyncio.Task:
        """
        Launches `run` as a detached task. The outcome is observed through
        the reporter; the task is returned only so callers may await it.
        """
        self._task = asyncio.create_task(self.run(source_url))
        return self._task


def _message_of(error: Exception) -> str:
    return str(error) or GENERIC_SAVE_FAILURE_MESSAGE
