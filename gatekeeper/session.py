"""Per-request analysis session and its state machine."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from gatekeeper.exceptions import InvalidTransitionError


class AnalysisState(StrEnum):
    """Analysis lifecycle states."""

    IDLE = "idle"
    CRAWLING = "crawling"
    FILTERING = "filtering"
    DONE = "done"
    ERROR = "error"


ALLOWED_TRANSITIONS: dict[AnalysisState, frozenset[AnalysisState]] = {
    AnalysisState.IDLE: frozenset({AnalysisState.CRAWLING}),
    AnalysisState.CRAWLING: frozenset(
        {AnalysisState.FILTERING, AnalysisState.ERROR, AnalysisState.IDLE}
    ),
    AnalysisState.FILTERING: frozenset(
        {AnalysisState.DONE, AnalysisState.ERROR, AnalysisState.IDLE}
    ),
    AnalysisState.DONE: frozenset(),
    AnalysisState.ERROR: frozenset(),
}


@dataclass
class AnalysisSession:
    """One analysis request: its input, state and abort signal."""

    url: str
    issue_description: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    state: AnalysisState = AnalysisState.IDLE
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def is_running(self) -> bool:
        """Crawling or filtering and not yet cancelled."""
        return (
            self.state in (AnalysisState.CRAWLING, AnalysisState.FILTERING)
            and not self.is_cancelled
        )

    def can_transition(self, target: AnalysisState) -> bool:
        return target in ALLOWED_TRANSITIONS[self.state]

    def transition(self, target: AnalysisState) -> None:
        """
        Move to *target*.

        Raises:
            InvalidTransitionError: *target* is not reachable from the current state
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target

    def cancel(self) -> None:
        """Raise the abort signal and return a running session to idle."""
        self.cancel_event.set()
        if self.can_transition(AnalysisState.IDLE):
            self.state = AnalysisState.IDLE

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "url": self.url,
            "issue_description": self.issue_description,
            "state": self.state.value,
            "cancelled": self.is_cancelled,
            "started_at": self.started_at.isoformat(),
        }
