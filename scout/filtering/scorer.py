"""Batch orchestration of AI scoring with retries and streaming."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from gatekeeper.exceptions import AnalysisCancelledError
from scout.ai.providers import ScoringProvider
from scout.models import BatchProgress, PageMetadata, ScoredPage

logger = structlog.get_logger(__name__)

FAILED_BATCH_REASON = "Failed to score - AI error"

BackoffPolicy = Callable[[int, float], float]
ProgressCallback = Callable[[int, int], None]
ResultCallback = Callable[[ScoredPage, BatchProgress], None]


def linear_backoff(attempt: int, base_delay: float) -> float:
    """Delay after the *attempt*-th failure: attempt x base."""
    return attempt * base_delay


def exponential_backoff(attempt: int, base_delay: float) -> float:
    """Delay after the *attempt*-th failure: base x 2^(attempt-1)."""
    return base_delay * (2 ** (attempt - 1))


BACKOFF_POLICIES: dict[str, BackoffPolicy] = {
    "linear": linear_backoff,
    "exponential": exponential_backoff,
}


def get_backoff_policy(name: str) -> BackoffPolicy:
    """Look up a backoff policy by name."""
    try:
        return BACKOFF_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown backoff policy: {name}") from None


@dataclass
class ScoringConfig:
    """Configuration for batch scoring."""

    batch_size: int = 20
    max_retries: int = 3  # attempts per batch
    retry_base_delay: float = 1.0
    backoff: str = "linear"


class EmptyScoreError(Exception):
    """A non-empty batch came back with no parseable scores."""


class BatchScorer:
    """Scores pages batch by batch, one provider call at a time."""

    def __init__(self, provider: ScoringProvider, config: ScoringConfig | None = None):
        self.provider = provider
        self.config = config or ScoringConfig()
        self.backoff = get_backoff_policy(self.config.backoff)

    def _batches(self, pages: list[PageMetadata]) -> list[list[PageMetadata]]:
        size = max(1, self.config.batch_size)
        return [pages[i : i + size] for i in range(0, len(pages), size)]

    async def _score_batch(
        self,
        batch: list[PageMetadata],
        issue_description: str,
        batch_number: int,
    ) -> list[ScoredPage]:
        """Score one batch, degrading to zero scores once retries run out."""
        attempts = max(1, self.config.max_retries)

        for attempt in range(1, attempts + 1):
            try:
                scored = await self.provider.score_urls(issue_description, batch)
                if batch and not scored:
                    raise EmptyScoreError("Provider returned no parseable scores")
                return scored
            except Exception as e:
                logger.warning(
                    "batch_scoring_failed",
                    provider=self.provider.name,
                    batch=batch_number,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(e),
                )
                if attempt < attempts:
                    await asyncio.sleep(self.backoff(attempt, self.config.retry_base_delay))

        logger.error(
            "batch_scoring_exhausted",
            provider=self.provider.name,
            batch=batch_number,
            pages=len(batch),
        )
        return [ScoredPage.unscored(page, FAILED_BATCH_REASON) for page in batch]

    async def score(
        self,
        pages: list[PageMetadata],
        issue_description: str,
        progress_callback: ProgressCallback | None = None,
        result_callback: ResultCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ScoredPage]:
        """
        Score *pages* in sequential batches.

        Args:
            pages: Pages to score
            issue_description: The user's problem statement
            progress_callback: Optional callback(scored_count, total_count) after each batch
            result_callback: Optional callback(result, batch_progress) per scored page
            cancel_event: Checked after each batch

        Raises:
            AnalysisCancelledError: The cancel event was set

        Returns:
            All scored pages sorted by relevance, highest first
        """
        total = len(pages)
        all_scored: list[ScoredPage] = []
        batches = self._batches(pages)

        logger.info(
            "scoring_started",
            provider=self.provider.name,
            pages=total,
            batches=len(batches),
        )

        for number, batch in enumerate(batches, start=1):
            scored = await self._score_batch(batch, issue_description, number)

            for result in scored:
                all_scored.append(result)
                if result_callback:
                    result_callback(result, BatchProgress(current=len(all_scored), total=total))

            if progress_callback:
                progress_callback(len(all_scored), total)

            if cancel_event is not None and cancel_event.is_set():
                logger.info("scoring_cancelled", batch=number, scored=len(all_scored))
                raise AnalysisCancelledError()

        # sorted() is stable: ties keep arrival order
        return sorted(all_scored, key=lambda r: r.relevance, reverse=True)
