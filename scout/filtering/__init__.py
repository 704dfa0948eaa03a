"""Pre-filtering and AI relevance scoring of discovered pages.

Use explicit imports:
    from scout.filtering.pipeline import filter_pages
    from scout.filtering.prefilter import pre_filter
    from scout.filtering.scorer import BatchScorer, ScoringConfig
"""

__all__ = [
    "filter_pages",
    "pre_filter",
    "PreFilterResult",
    "BatchScorer",
    "ScoringConfig",
]
