"""Events published to the host while an analysis runs."""

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from scout.models import BatchProgress, FilterOutcome, ScoredPage


class EventType(StrEnum):
    """Wire names of the published events."""

    PROGRESS_UPDATE = "PROGRESS_UPDATE"
    REALTIME_RESULT = "REALTIME_RESULT"
    ANALYSIS_COMPLETE = "ANALYSIS_COMPLETE"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"


class ProgressPhase(StrEnum):
    """Phase reported in progress updates."""

    CRAWLING = "crawling"
    FILTERING = "filtering"
    DONE = "done"


@dataclass(frozen=True)
class ProgressEvent:
    """Coarse progress of the running analysis."""

    type: ClassVar[EventType] = EventType.PROGRESS_UPDATE

    phase: ProgressPhase
    message: str
    urls_found: int
    percent: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "phase": self.phase.value,
            "message": self.message,
            "urls_found": self.urls_found,
            "percent": self.percent,
        }


@dataclass(frozen=True)
class RealtimeResultEvent:
    """One scored page, streamed as soon as its batch completes."""

    type: ClassVar[EventType] = EventType.REALTIME_RESULT

    scored_page: ScoredPage
    batch_progress: BatchProgress

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "scored_page": self.scored_page.to_dict(),
            "batch_progress": self.batch_progress.to_dict(),
        }


@dataclass(frozen=True)
class AnalysisCompleteEvent:
    """Final ranked outcome."""

    type: ClassVar[EventType] = EventType.ANALYSIS_COMPLETE

    outcome: FilterOutcome

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"type": self.type.value, "outcome": self.outcome.to_dict()}


@dataclass(frozen=True)
class AnalysisErrorEvent:
    """Terminal failure of an analysis."""

    type: ClassVar[EventType] = EventType.ANALYSIS_ERROR

    error: str
    code: str = "error"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"type": self.type.value, "error": self.error, "code": self.code}


AnalysisEvent = ProgressEvent | RealtimeResultEvent | AnalysisCompleteEvent | AnalysisErrorEvent


class EventChannel:
    """Ordered, unbounded channel of analysis events."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[AnalysisEvent] = asyncio.Queue()

    def publish(self, event: AnalysisEvent) -> None:
        """Enqueue *event*; never blocks."""
        self._queue.put_nowait(event)

    async def get(self) -> AnalysisEvent:
        """Wait for the next event."""
        return await self._queue.get()

    def drain(self) -> list[AnalysisEvent]:
        """Return every queued event without waiting."""
        events: list[AnalysisEvent] = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events

    def empty(self) -> bool:
        return self._queue.empty()
