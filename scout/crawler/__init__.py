"""Crawler package for documentation page discovery."""

# Use explicit imports when needed:
# from scout.crawler.discovery import discover_pages
# from scout.crawler.sitemap import SitemapResolver
# from scout.crawler.crawler import DomCrawler, CrawlConfig
# from scout.crawler.fetcher import Fetcher, FetchResult
# from scout.crawler.url import normalize_url, is_same_registrable_domain

__all__ = [
    # Discovery
    "discover_pages",
    # Sitemap
    "SitemapResolver",
    # DOM crawler
    "DomCrawler",
    "CrawlConfig",
    # Fetcher
    "Fetcher",
    "FetchResult",
    # URL utilities
    "normalize_url",
    "is_same_registrable_domain",
    "is_asset_url",
    "extract_section",
    "dedupe_urls",
]
