"""
Data structures describing one remote job from submission to the saved asset.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class JobRequest:
    """A request to process the video behind `source_url`. Consumed once."""

    source_url: str

    @classmethod
    def from_text(cls, text: Optional[str]) -> Optional["JobRequest"]:
        """Builds a request from raw clipboard text, or None if nothing usable was given."""
        if not text or not text.strip():
            return None
        return cls(source_url=text.strip())


@dataclass(frozen=True)
class JobHandle:
    """Server-issued identifier of a submitted job."""

    job_id: str


class StatusKind(Enum):
    """Variants of a job status as seen by the poller."""

    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class JobStatus:
    """
    One observed job status.

    `raw` keeps the status string exactly as the service sent it; `result_url`
    is only set for READY.
    """

    kind: StatusKind
    result_url: Optional[str] = None
    raw: Optional[str] = None

    @classmethod
    def processing(cls, raw: Optional[str] = "processing") -> "JobStatus":
        return cls(StatusKind.PROCESSING, raw=raw)

    @classmethod
    def ready(cls, result_url: str, raw: Optional[str] = "ready") -> "JobStatus":
        return cls(StatusKind.READY, result_url=result_url, raw=raw)

    @classmethod
    def failed(cls, raw: Optional[str] = None) -> "JobStatus":
        return cls(StatusKind.FAILED, raw=raw)

    @classmethod
    def unknown(cls, raw: Optional[str] = None) -> "JobStatus":
        return cls(StatusKind.UNKNOWN, raw=raw)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.READY, StatusKind.FAILED)


@dataclass(frozen=True)
class LocalFile:
    """A downloaded artifact sitting at the fixed local download path."""

    path: Path
    size_bytes: int


@dataclass(frozen=True)
class PersistedAsset:
    """Reference to an artifact once it lives in the media library."""

    asset_id: int
    path: Path


class Phase(Enum):
    """Lifecycle phases of a single orchestrated run."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    FETCHING = "fetching"
    SAVING = "saving"
    DONE = "done"
    ERRORED = "errored"


# Forward-only moves; POLLING may repeat itself while the job is processing
ALLOWED_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.IDLE: frozenset({Phase.SUBMITTING}),
    Phase.SUBMITTING: frozenset({Phase.POLLING, Phase.ERRORED}),
    Phase.POLLING: frozenset({Phase.POLLING, Phase.FETCHING, Phase.ERRORED}),
    Phase.FETCHING: frozenset({Phase.SAVING, Phase.ERRORED}),
    Phase.SAVING: frozenset({Phase.DONE, Phase.ERRORED}),
    Phase.DONE: frozenset(),
    Phase.ERRORED: frozenset(),
}


@dataclass(frozen=True)
class OrchestrationState:
    """Snapshot of one run's progress, handed out read-only to observers."""

    phase: Phase = Phase.IDLE
    last_status: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (Phase.DONE, Phase.ERRORED)

    def advanced_to(self, phase: Phase) -> "OrchestrationState":
        """Returns a copy moved to `phase`; raises RuntimeError on any move that is not forward."""
        if phase not in ALLOWED_TRANSITIONS[self.phase]:
            raise RuntimeError(
                f"Illegal phase transition {self.phase.value} -> {phase.value}"
            )
        return replace(self, phase=phase)
