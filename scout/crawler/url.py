"""URL normalization and utilities for the crawler."""

from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

# File extensions that never point at a documentation page
ASSET_EXTENSIONS = (
    # Code/styles
    ".js",
    ".css",
    # Images
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".webp",
    ".avif",
    # Fonts
    ".woff",
    ".woff2",
    ".ttf",
    ".otf",
    ".eot",
    # Documents
    ".pdf",
    # Media
    ".mp3",
    ".mp4",
    ".webm",
    # Archives
    ".zip",
    ".gz",
    ".tar",
)

# Query parameters to strip (tracking)
STRIP_PARAMS = frozenset(
    [
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "ref",
        "source",
    ]
)


def ensure_scheme(url: str) -> str:
    """Trim *url* and prefix ``https://`` when it carries no scheme."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url.lstrip("/")
    return url


def normalize_url(url: str, base_url: str | None = None) -> str | None:
    """
    Normalize a URL for consistent comparison and storage.

    Resolves relative URLs, drops the fragment and tracking parameters
    (other parameters keep their order), lowercases the host and removes
    the trailing slash from non-root paths.

    Args:
        url: The URL to normalize
        base_url: Optional base URL for resolving relative URLs

    Returns:
        Normalized URL string or None if the URL cannot be parsed
    """
    if not url or not url.strip():
        return None

    url = url.strip()

    try:
        if base_url:
            url = urljoin(base_url, url)
        parsed = urlsplit(url)
        # Accessing port validates it
        port = parsed.port
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https"):
        return None
    if not parsed.hostname:
        return None

    host = parsed.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") or "/"

    query = ""
    if parsed.query:
        params = parse_qsl(parsed.query, keep_blank_values=True)
        kept = [(k, v) for k, v in params if k not in STRIP_PARAMS]
        if kept:
            query = urlencode(kept)

    return urlunsplit((parsed.scheme, host, path, query, ""))


def extract_hostname(url: str) -> str | None:
    """Extract the lowercased hostname from a URL."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def is_same_registrable_domain(url: str, base_url: str) -> bool:
    """
    Check whether *url* lives on the same site as *base_url*.

    Subdomains match in both directions, so a base of ``docs.example.com``
    accepts ``example.com`` pages and vice versa.
    """
    url_host = extract_hostname(url)
    base_host = extract_hostname(base_url)
    if not url_host or not base_host:
        return False

    return (
        url_host == base_host
        or url_host.endswith("." + base_host)
        or base_host.endswith("." + url_host)
    )


def is_asset_url(url: str) -> bool:
    """Check if a URL points to a static asset rather than a page."""
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    return path.endswith(ASSET_EXTENSIONS)


def extract_section(url: str) -> str:
    """Return the first path segment of a nested page, or ``root``."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return "unknown"

    parts = [p for p in path.split("/") if p]
    return parts[0] if len(parts) > 1 else "root"


def extract_path(url: str) -> str:
    """Return the path component of a URL (``/`` when empty)."""
    try:
        return urlsplit(url).path or "/"
    except ValueError:
        return "/"


def dedupe_urls(urls: list[str]) -> list[str]:
    """Drop duplicate URLs, keeping the first occurrence."""
    return list(dict.fromkeys(urls))
