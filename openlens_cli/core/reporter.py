"""
The single outward signal of a job run: state snapshots and user-facing notices.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from openlens_cli.models.job import OrchestrationState

log = logging.getLogger(__name__)


class NoticeKind(Enum):
    EMPTY_CLIPBOARD = "empty_clipboard"
    CLIPBOARD_ERROR = "clipboard_error"
    PERMISSION_DENIED = "permission_denied"
    DOWNLOAD_ERROR = "download_error"
    ERROR = "error"
    SAVE_FAILED = "save_failed"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notice:
    """A message meant for the user."""

    kind: NoticeKind
    message: str

    @property
    def is_error(self) -> bool:
        return self.kind != NoticeKind.SUCCESS


@dataclass(frozen=True)
class StatusUpdate:
    """What subscribers receive: the current state and, sometimes, a notice."""

    state: OrchestrationState
    notice: Optional[Notice] = None


Listener = Callable[[StatusUpdate], None]


class StatusReporter:
    """
    Fans out orchestration updates to subscribers.

    Subscribers only ever see frozen snapshots; the orchestrator stays the
    sole writer of its state.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._state = OrchestrationState()
        self.notices: list[Notice] = []

    @property
    def state(self) -> OrchestrationState:
        """The most recently published state."""
        return self._state

    @property
    def last_notice(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers `listener` and returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, state: OrchestrationState, notice: Optional[Notice] = None) -> None:
        self._state = state
        if notice:
            self.notices.append(notice)
        update = StatusUpdate(state=state, notice=notice)
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception as e:
                # A broken display must not break the job run.
                log.debug(f"Status listener {listener!r} failed: {e}", exc_info=True)
