"""Top-level filter pipeline: pre-filter, score, cap."""

import asyncio
import time

import structlog

from scout.ai.providers import ScoringProvider
from scout.filtering.prefilter import pre_filter
from scout.filtering.scorer import (
    BatchScorer,
    ProgressCallback,
    ResultCallback,
    ScoringConfig,
)
from scout.models import FilterOutcome, PageMetadata

logger = structlog.get_logger(__name__)


async def filter_pages(
    provider: ScoringProvider,
    pages: list[PageMetadata],
    issue_description: str,
    max_results: int,
    config: ScoringConfig | None = None,
    progress_callback: ProgressCallback | None = None,
    result_callback: ResultCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> FilterOutcome:
    """
    Rank *pages* by relevance to *issue_description*.

    Returns:
        FilterOutcome with at most *max_results* non-zero results,
        highest relevance first
    """
    started = time.perf_counter()

    prefiltered = pre_filter(pages)
    logger.info(
        "prefilter_complete",
        total=len(pages),
        passed=len(prefiltered.passed),
        filtered=prefiltered.filtered_count,
    )

    scorer = BatchScorer(provider, config)
    scored = await scorer.score(
        prefiltered.passed,
        issue_description,
        progress_callback=progress_callback,
        result_callback=result_callback,
        cancel_event=cancel_event,
    )

    results = [r for r in scored if r.relevance > 0][: max(0, max_results)]

    return FilterOutcome(
        issue_description=issue_description,
        total_scanned=len(pages),
        pre_filtered=prefiltered.filtered_count,
        ai_scored=len(prefiltered.passed),
        results=results,
        provider_name=provider.name,
        duration_ms=int((time.perf_counter() - started) * 1000),
    )
