"""Page fetching for the DOM crawler."""

import asyncio
import time
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger(__name__)

HTML_CONTENT_TYPES = ("text/html", "text/plain")


@dataclass
class FetchResult:
    """One page fetch; ``html`` is None whenever the page is unusable."""

    url: str
    final_url: str  # after redirects
    status_code: int  # 0 when no response arrived
    content_type: str | None
    html: str | None
    error: str | None
    fetch_time_ms: int

    @property
    def success(self) -> bool:
        return self.html is not None


def document_error(response: httpx.Response) -> str | None:
    """Why a response cannot be parsed as a page, or None if it can."""
    if not response.is_success:
        return f"HTTP {response.status_code}"
    content_type = response.headers.get("content-type", "").lower()
    if not any(kind in content_type for kind in HTML_CONTENT_TYPES):
        return f"Unsupported content type: {content_type or 'unknown'}"
    return None


def describe_transport_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "Request timed out"
    return str(exc) or type(exc).__name__


class Fetcher:
    """
    Fetches crawl pages through a shared client.

    Only transport failures are retried; an HTTP error status or a
    non-HTML body is a final answer for that URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        self.client = client
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def fetch(self, url: str) -> FetchResult:
        """Fetch ``url``. Never raises."""
        started = time.perf_counter()

        def elapsed_ms() -> int:
            return int((time.perf_counter() - started) * 1000)

        attempts = self.max_retries + 1
        last_error = "Request failed"
        for attempt in range(1, attempts + 1):
            try:
                response = await self.client.get(url, headers={"Accept": "text/html, */*"})
            except httpx.HTTPError as exc:
                last_error = describe_transport_error(exc)
                if attempt < attempts:
                    logger.debug("page_fetch_retry", url=url, error=last_error, attempt=attempt)
                    await asyncio.sleep(self.retry_delay * attempt)
                continue

            error = document_error(response)
            return FetchResult(
                url=url,
                final_url=str(response.url),
                status_code=response.status_code,
                content_type=response.headers.get("content-type", ""),
                html=response.text if error is None else None,
                error=error,
                fetch_time_ms=elapsed_ms(),
            )

        return FetchResult(
            url=url,
            final_url=url,
            status_code=0,
            content_type=None,
            html=None,
            error=last_error,
            fetch_time_ms=elapsed_ms(),
        )
