"""Test fixtures for offline crawl and scoring tests."""

from tests.fixtures.llm import ScriptedProvider, prompt_urls, score_reply
from tests.fixtures.site import html_page, route_transport, sitemap_index, urlset

__all__ = [
    # Site
    "route_transport",
    "html_page",
    "urlset",
    "sitemap_index",
    # LLM
    "ScriptedProvider",
    "prompt_urls",
    "score_reply",
]
