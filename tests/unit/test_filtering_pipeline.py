"""Tests for the filter pipeline."""

import pytest

from scout.filtering.pipeline import filter_pages
from scout.filtering.scorer import ScoringConfig
from scout.models import PageMetadata
from tests.fixtures import ScriptedProvider, prompt_urls, score_reply

PAGES = [
    PageMetadata(url="https://example.com/docs/auth", title="Authentication"),
    PageMetadata(url="https://example.com/pricing", title="Pricing"),
    PageMetadata(url="https://example.com/docs/tokens", title="Tokens"),
    PageMetadata(url="https://example.com/docs/webhooks", title="Webhooks"),
    PageMetadata(url="https://example.com/privacy", title="Privacy"),
    PageMetadata(url="https://example.com/docs/errors", title="Errors"),
]

RELEVANCE = {
    "https://example.com/docs/auth": 9,
    "https://example.com/docs/tokens": 7,
    "https://example.com/docs/webhooks": 0,
    "https://example.com/docs/errors": 4,
}


def scorer_reply(prompt: str) -> str:
    return score_reply(prompt, RELEVANCE)


class TestFilterPages:
    """Tests for filter_pages."""

    @pytest.mark.asyncio
    async def test_end_to_end(self) -> None:
        """Pre-filters, scores, drops zeros and sorts."""
        provider = ScriptedProvider([scorer_reply])

        outcome = await filter_pages(
            provider,
            PAGES,
            "token expired",
            max_results=10,
            config=ScoringConfig(retry_base_delay=0),
        )

        assert outcome.total_scanned == 6
        assert outcome.pre_filtered == 2
        assert outcome.ai_scored == 4
        assert [r.url for r in outcome.results] == [
            "https://example.com/docs/auth",
            "https://example.com/docs/tokens",
            "https://example.com/docs/errors",
        ]
        assert outcome.provider_name == "Scripted"
        assert outcome.issue_description == "token expired"
        assert outcome.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_excluded_pages_never_reach_ai(self) -> None:
        """Pre-filtered pages are not sent to the provider."""
        provider = ScriptedProvider([scorer_reply])

        await filter_pages(provider, PAGES, "x", max_results=10)

        sent = [url for prompt in provider.prompts for url in prompt_urls(prompt)]
        assert "https://example.com/pricing" not in sent
        assert "https://example.com/privacy" not in sent

    @pytest.mark.asyncio
    async def test_caps_results(self) -> None:
        """At most max_results results are returned."""
        provider = ScriptedProvider([scorer_reply])

        outcome = await filter_pages(provider, PAGES, "x", max_results=2)

        assert [r.relevance for r in outcome.results] == [9.0, 7.0]

    @pytest.mark.asyncio
    async def test_everything_filtered(self) -> None:
        """No surviving pages means no AI calls and no results."""
        provider = ScriptedProvider([scorer_reply])
        pages = [PageMetadata(url="https://example.com/login")]

        outcome = await filter_pages(provider, pages, "x", max_results=5)

        assert provider.prompts == []
        assert outcome.results == []
        assert outcome.pre_filtered == 1
        assert outcome.ai_scored == 0

    @pytest.mark.asyncio
    async def test_outcome_to_dict(self) -> None:
        """Outcome serializes its results."""
        provider = ScriptedProvider([scorer_reply])

        outcome = await filter_pages(provider, PAGES, "x", max_results=1)
        data = outcome.to_dict()

        assert data["results"][0]["url"] == "https://example.com/docs/auth"
        assert data["results"][0]["category"] == "tutorial"
