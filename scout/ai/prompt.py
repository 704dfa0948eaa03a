"""Scoring prompt and response parsing shared by every provider."""

import json
import math
import re
from typing import Any

import structlog

from scout.crawler.url import extract_section
from scout.models import PageCategory, PageMetadata, ScoredPage

logger = structlog.get_logger(__name__)

SCORING_PROMPT_TEMPLATE = """You are an expert technical documentation analyst.

USER'S PROBLEM: {issue_description}

Evaluate the following documentation URLs. For each URL, provide:
- relevance (0-10): how relevant to the user's problem
- category: "tutorial" | "reference" | "concept" | "example"
- reason: brief explanation (1 sentence)

Return a JSON array only, no other text. Example:
[{{"url": "...", "relevance": 8, "category": "tutorial", "reason": "..."}}]

URLs to evaluate:
{urls_list}"""

DEFAULT_REASON = "No reason provided"

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)```")


def build_scoring_prompt(issue_description: str, pages: list[PageMetadata]) -> str:
    """Render the scoring prompt for one batch."""
    urls_list = "\n".join(
        f"- URL: {p.url}\n  Title: {p.title}\n  Description: {p.description}\n  Path: {p.path}"
        for p in pages
    )
    return SCORING_PROMPT_TEMPLATE.format(
        issue_description=issue_description,
        urls_list=urls_list,
    )


def extract_json(text: str) -> str:
    """
    Pull the JSON payload out of a model reply.

    Prefers a ```json fenced block, then any fenced block, then the
    whole text.
    """
    match = _JSON_FENCE.search(text)
    if match:
        return match.group(1).strip()

    match = _ANY_FENCE.search(text)
    if match:
        return match.group(1).strip()

    return text.strip()


def clamp_relevance(value: Any) -> float:
    """Coerce a model-supplied relevance into [0, 10]; junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        number = 0.0
    if math.isnan(number):
        number = 0.0
    return min(10.0, max(0.0, number))


def parse_category(value: Any) -> PageCategory:
    """Map a model-supplied category onto the enum, defaulting to reference."""
    try:
        return PageCategory(value)
    except ValueError:
        return PageCategory.REFERENCE


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_scored_pages(content: str, pages: list[PageMetadata]) -> list[ScoredPage]:
    """
    Parse a model reply into scored pages.

    Accepts a bare array or an object with a ``results`` or ``urls``
    field. The batch pages are the source of truth for title,
    description, path and section. Items without a URL are dropped.

    Returns:
        Scored pages in reply order, or an empty list when the reply is
        not valid JSON
    """
    try:
        parsed = json.loads(extract_json(content))
    except json.JSONDecodeError as e:
        logger.warning("ai_response_unparsable", error=str(e), preview=content[:200])
        return []

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict):
        items = parsed.get("results") or parsed.get("urls") or []
    else:
        items = []
    if not isinstance(items, list):
        return []

    by_url = {p.url: p for p in pages}
    scored: list[ScoredPage] = []

    for item in items:
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        if not url or not isinstance(url, str):
            continue

        original = by_url.get(url)
        scored.append(
            ScoredPage(
                url=url,
                title=(original.title if original else "") or _text(item.get("title")),
                description=(original.description if original else "")
                or _text(item.get("description")),
                path=(original.path if original else "") or _text(item.get("path")),
                section=original.section if original else extract_section(url),
                relevance=clamp_relevance(item.get("relevance")),
                category=parse_category(item.get("category")),
                reason=_text(item.get("reason")) or DEFAULT_REASON,
            )
        )

    return scored
