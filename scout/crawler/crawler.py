"""Breadth-first DOM crawler following documentation navigation links."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx
import structlog
from bs4 import BeautifulSoup

from scout.crawler.fetcher import Fetcher
from scout.crawler.url import (
    dedupe_urls,
    extract_path,
    extract_section,
    is_asset_url,
    is_same_registrable_domain,
    normalize_url,
)
from scout.models import PageMetadata

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Navigation regions, ordered by specificity
NAV_SELECTORS = (
    "nav",
    "aside",
    '[role="navigation"]',
    ".sidebar",
    ".menu",
    ".toc",
    ".docs-nav",
    ".doc-sidebar",
)

SKIP_SCHEMES = ("mailto:", "tel:", "javascript:")

ProgressCallback = Callable[[int], None]


@dataclass
class CrawlConfig:
    """Configuration for a crawl."""

    max_urls: int = 200
    max_depth: int = 2
    max_concurrent: int = 5
    request_delay: float = 0.2
    timeout: float = 10.0
    user_agent: str = "DocGatekeeperBot/1.0"
    fetch_retries: int = 0


@dataclass
class _PageVisit:
    """Outcome of visiting one URL during a level."""

    url: str
    page: PageMetadata | None
    links: list[str]


def extract_title(soup: BeautifulSoup) -> str:
    """Extract page title."""
    title_tag = soup.find("title")
    if title_tag is None:
        return ""
    return title_tag.get_text().strip()


def extract_description(soup: BeautifulSoup) -> str:
    """Extract the meta description."""
    meta = soup.find("meta", attrs={"name": "description"})
    if meta is None:
        return ""
    content = meta.get("content") or ""
    return str(content).strip()


def extract_links(soup: BeautifulSoup, page_url: str, base_url: str) -> list[str]:
    """
    Extract crawlable links, preferring navigation regions.

    Falls back to every anchor on the page when no navigation region
    exists. Links are resolved against *page_url* and kept only when
    they stay on the site of *base_url* and are not assets.
    """
    nav_elements = []
    for selector in NAV_SELECTORS:
        nav_elements.extend(soup.select(selector))

    if nav_elements:
        anchors = []
        seen_ids: set[int] = set()
        for nav in nav_elements:
            for anchor in nav.select("a[href]"):
                if id(anchor) not in seen_ids:
                    seen_ids.add(id(anchor))
                    anchors.append(anchor)
    else:
        anchors = soup.select("a[href]")

    links: list[str] = []
    for anchor in anchors:
        href = str(anchor.get("href") or "").strip()
        if not href or href.lower().startswith(SKIP_SCHEMES):
            continue

        normalized = normalize_url(href, page_url)
        if not normalized:
            continue
        if not is_same_registrable_domain(normalized, base_url):
            continue
        if is_asset_url(normalized):
            continue

        links.append(normalized)

    return dedupe_urls(links)


async def run_worker_pool(
    tasks: list[Callable[[], Awaitable[T]]],
    max_concurrent: int,
) -> list[T]:
    """
    Run *tasks* with at most *max_concurrent* in flight.

    A fixed set of workers pulls from a shared queue until it is empty.
    Results keep the order of *tasks*.
    """
    results: list[T | None] = [None] * len(tasks)
    queue: asyncio.Queue[int] = asyncio.Queue()
    for index in range(len(tasks)):
        queue.put_nowait(index)

    async def worker() -> None:
        while True:
            try:
                index = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await tasks[index]()

    worker_count = min(max_concurrent, len(tasks))
    await asyncio.gather(*(worker() for _ in range(worker_count)))
    return results  # type: ignore[return-value]


class DomCrawler:
    """Level-by-level crawler used when a site has no usable sitemap."""

    def __init__(
        self,
        config: CrawlConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or CrawlConfig()
        self.transport = transport

    async def crawl(
        self,
        base_url: str,
        progress_callback: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[PageMetadata]:
        """
        Crawl documentation pages starting from *base_url*.

        Args:
            base_url: Absolute start URL
            progress_callback: Optional callback(pages_collected)
            cancel_event: Checked before each level; a set event stops the crawl

        Returns:
            Collected pages in discovery order
        """
        start = normalize_url(base_url)
        if not start:
            raise ValueError(f"Invalid start URL: {base_url}")

        logger.info(
            "dom_crawl_started",
            url=start,
            max_urls=self.config.max_urls,
            max_depth=self.config.max_depth,
        )

        visited: set[str] = set()
        results: dict[str, PageMetadata] = {}
        current_level = [start]
        depth = 0

        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
            transport=self.transport,
        ) as client:
            fetcher = Fetcher(client, max_retries=self.config.fetch_retries)

            async def visit(url: str) -> _PageVisit:
                result = await fetcher.fetch(url)
                if not result.success or result.html is None:
                    logger.debug("page_skipped", url=url, error=result.error)
                    return _PageVisit(url=url, page=None, links=[])

                soup = BeautifulSoup(result.html, "html.parser")
                page = PageMetadata(
                    url=url,
                    title=extract_title(soup),
                    description=extract_description(soup),
                    path=extract_path(url),
                    section=extract_section(url),
                )
                links = extract_links(soup, result.final_url, start)
                return _PageVisit(url=url, page=page, links=links)

            while current_level and depth < self.config.max_depth:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("dom_crawl_cancelled", depth=depth, pages=len(results))
                    break

                to_fetch: list[str] = []
                for url in current_level:
                    if url in visited or len(results) >= self.config.max_urls:
                        continue
                    visited.add(url)
                    to_fetch.append(url)

                if not to_fetch:
                    break

                visits = await run_worker_pool(
                    [lambda url=url: visit(url) for url in to_fetch],
                    self.config.max_concurrent,
                )

                # Level order, not completion order
                for page_visit in visits:
                    if page_visit.page is None or len(results) >= self.config.max_urls:
                        continue
                    results[page_visit.url] = page_visit.page
                    if progress_callback:
                        progress_callback(len(results))

                next_level: list[str] = []
                queued: set[str] = set()
                for page_visit in visits:
                    for link in page_visit.links:
                        if link in visited or link in results or link in queued:
                            continue
                        if len(results) + len(next_level) >= self.config.max_urls:
                            break
                        queued.add(link)
                        next_level.append(link)

                current_level = next_level
                depth += 1

                logger.debug(
                    "dom_crawl_level_complete",
                    depth=depth,
                    fetched=len(to_fetch),
                    collected=len(results),
                    frontier=len(current_level),
                )

                if current_level and depth < self.config.max_depth:
                    await asyncio.sleep(self.config.request_delay)

        logger.info("dom_crawl_completed", url=start, pages=len(results), depth=depth)

        return list(results.values())
