"""Sitemap resolver for discovering URLs from sitemap.xml files."""

from urllib.parse import urljoin
from xml.etree import ElementTree as ET

import httpx
import structlog

from scout.crawler.url import (
    extract_path,
    extract_section,
    is_asset_url,
    is_same_registrable_domain,
    normalize_url,
)
from scout.models import PageMetadata

logger = structlog.get_logger(__name__)

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap-index.xml", "/sitemap_index.xml")

# Sitemap index nesting guard
MAX_SITEMAP_DEPTH = 3


def _local_name(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _child_locs(root: ET.Element, entry_tag: str) -> list[str]:
    """Collect ``<entry_tag><loc>`` values directly under *root*."""
    locs: list[str] = []
    for entry in root:
        if _local_name(entry.tag) != entry_tag:
            continue
        for child in entry:
            if _local_name(child.tag) == "loc" and child.text and child.text.strip():
                locs.append(child.text.strip())
                break
    return locs


class SitemapResolver:
    """Resolver for sitemap.xml and sitemap index files."""

    def __init__(
        self,
        max_urls: int = 200,
        timeout: float = 10.0,
        user_agent: str = "DocGatekeeperBot/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.max_urls = max_urls
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport
        self.errors: list[str] = []

    async def resolve(self, base_url: str) -> list[PageMetadata] | None:
        """
        Discover pages from the standard sitemap locations of *base_url*.

        Sitemap indexes are resolved recursively, one child at a time.

        Args:
            base_url: Absolute URL of the site to inspect

        Returns:
            Filtered, normalized and deduplicated pages, or None when no
            sitemap exists or none of its URLs survive filtering
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        ) as client:
            root: ET.Element | None = None
            for path in SITEMAP_PATHS:
                sitemap_url = urljoin(base_url, path)
                root = await self._fetch_sitemap(client, sitemap_url)
                if root is not None:
                    logger.info("sitemap_found", url=sitemap_url)
                    break

            if root is None:
                logger.info("sitemap_not_found", base_url=base_url)
                return None

            raw_urls = await self._resolve_locs(client, root, base_url)

        pages = self._to_pages(raw_urls, base_url)

        logger.info(
            "sitemap_resolution_complete",
            base_url=base_url,
            locs_found=len(raw_urls),
            pages=len(pages),
            errors=len(self.errors),
        )

        return pages or None

    async def _fetch_sitemap(self, client: httpx.AsyncClient, url: str) -> ET.Element | None:
        """
        Fetch and parse a single sitemap document.

        Returns:
            The ``<urlset>`` or ``<sitemapindex>`` root element, or None
        """
        try:
            response = await client.get(
                url,
                headers={"Accept": "application/xml, text/xml, */*"},
            )
        except httpx.HTTPError as e:
            self.errors.append(f"{url}: {str(e) or type(e).__name__}")
            logger.debug("sitemap_fetch_failed", url=url, error=str(e))
            return None

        if not response.is_success:
            if response.status_code != 404:
                self.errors.append(f"{url}: HTTP {response.status_code}")
            return None

        text = response.text
        if "<urlset" not in text and "<sitemapindex" not in text:
            return None

        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as e:
            logger.debug("sitemap_invalid_xml", url=url, error=str(e))
            return None

        if _local_name(root.tag) not in ("urlset", "sitemapindex"):
            return None
        return root

    async def _resolve_locs(
        self,
        client: httpx.AsyncClient,
        root: ET.Element,
        base_url: str,
        depth: int = 0,
    ) -> list[str]:
        """Flatten the page locations reachable from *root*."""
        if depth > MAX_SITEMAP_DEPTH:
            return []

        if _local_name(root.tag) == "sitemapindex":
            all_urls: list[str] = []
            usable = 0
            for child_url in _child_locs(root, "sitemap"):
                # Off-site and asset locs do not count toward the cap
                if usable >= self.max_urls:
                    break
                child_root = await self._fetch_sitemap(client, child_url)
                if child_root is None:
                    continue
                child_urls = await self._resolve_locs(client, child_root, base_url, depth + 1)
                all_urls.extend(child_urls)
                usable += sum(1 for url in child_urls if self._is_candidate(url, base_url))
            return all_urls

        return _child_locs(root, "url")

    @staticmethod
    def _is_candidate(raw_url: str, base_url: str) -> bool:
        return is_same_registrable_domain(raw_url, base_url) and not is_asset_url(raw_url)

    def _to_pages(self, raw_urls: list[str], base_url: str) -> list[PageMetadata]:
        """Filter, normalize and deduplicate sitemap locations."""
        seen: set[str] = set()
        pages: list[PageMetadata] = []

        for raw_url in raw_urls:
            if len(pages) >= self.max_urls:
                break
            if not self._is_candidate(raw_url, base_url):
                continue

            normalized = normalize_url(raw_url, base_url)
            if not normalized or normalized in seen:
                continue
            seen.add(normalized)

            pages.append(
                PageMetadata(
                    url=normalized,
                    path=extract_path(normalized),
                    section=extract_section(normalized),
                )
            )

        return pages
