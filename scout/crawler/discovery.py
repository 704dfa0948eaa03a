"""Page discovery: sitemap first, DOM crawl as fallback."""

import asyncio
import time
from collections.abc import Callable

import httpx
import structlog

from scout.crawler.crawler import CrawlConfig, DomCrawler
from scout.crawler.sitemap import SitemapResolver
from scout.crawler.url import ensure_scheme
from scout.models import CrawlOutcome, DiscoveryMethod, PageMetadata

logger = structlog.get_logger(__name__)


async def discover_pages(
    base_url: str,
    config: CrawlConfig | None = None,
    progress_callback: Callable[[int], None] | None = None,
    cancel_event: asyncio.Event | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CrawlOutcome:
    """
    Discover the documentation pages of a site.

    Tries the sitemap first and falls back to crawling the DOM when it
    yields nothing. Failures of either stage are recorded in
    ``CrawlOutcome.errors``; this function never raises.

    Args:
        base_url: Site URL, with or without scheme
        config: Crawl limits
        progress_callback: Optional callback(pages_found)
        cancel_event: Forwarded to the DOM crawler
        transport: Optional httpx transport (tests)

    Returns:
        CrawlOutcome describing the discovered pages
    """
    config = config or CrawlConfig()
    started = time.perf_counter()
    errors: list[str] = []
    normalized_base = ensure_scheme(base_url)

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    resolver = SitemapResolver(
        max_urls=config.max_urls,
        timeout=config.timeout,
        user_agent=config.user_agent,
        transport=transport,
    )
    try:
        sitemap_pages = await resolver.resolve(normalized_base)
    except Exception as e:
        logger.warning("sitemap_discovery_failed", url=normalized_base, error=str(e))
        errors.append(f"Sitemap crawl failed: {e}")
        sitemap_pages = None
    errors.extend(resolver.errors)

    if sitemap_pages:
        if progress_callback:
            progress_callback(len(sitemap_pages))
        return CrawlOutcome(
            base_url=normalized_base,
            discovery_method=DiscoveryMethod.SITEMAP,
            pages=sitemap_pages,
            errors=errors,
            duration_ms=elapsed_ms(),
        )

    pages: list[PageMetadata] = []
    try:
        crawler = DomCrawler(config, transport=transport)
        pages = await crawler.crawl(normalized_base, progress_callback, cancel_event)
    except Exception as e:
        logger.warning("dom_discovery_failed", url=normalized_base, error=str(e))
        errors.append(f"DOM crawl failed: {e}")

    return CrawlOutcome(
        base_url=normalized_base,
        discovery_method=DiscoveryMethod.DOM_PARSING,
        pages=pages,
        errors=errors,
        duration_ms=elapsed_ms(),
    )
