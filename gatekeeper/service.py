"""Analysis service: runs crawl and filter for one request at a time."""

import asyncio
import dataclasses
from collections.abc import Callable

import httpx
import structlog

from gatekeeper.config import AnalysisSettings, get_settings
from gatekeeper.events import (
    AnalysisCompleteEvent,
    AnalysisErrorEvent,
    AnalysisEvent,
    EventChannel,
    ProgressEvent,
    ProgressPhase,
    RealtimeResultEvent,
)
from gatekeeper.exceptions import (
    AnalysisCancelledError,
    GatekeeperError,
    InvalidInputError,
    NoPagesFoundError,
)
from gatekeeper.logging import analysis_context
from gatekeeper.session import AnalysisSession, AnalysisState
from scout.ai.providers import create_scoring_provider
from scout.crawler.crawler import CrawlConfig
from scout.crawler.discovery import discover_pages
from scout.crawler.url import ensure_scheme, normalize_url
from scout.filtering.pipeline import filter_pages
from scout.filtering.scorer import ScoringConfig
from scout.models import BatchProgress, FilterOutcome, ScoredPage

logger = structlog.get_logger(__name__)

SettingsProvider = Callable[[], AnalysisSettings]


def default_settings_provider() -> AnalysisSettings:
    """Read analysis settings from the environment."""
    return get_settings().analysis_settings()


def filtering_percent(scored: int, total: int) -> int:
    """Map scoring progress onto the 50-90% band."""
    if total <= 0:
        return 90
    return 50 + round(40 * scored / total)


class AnalysisService:
    """
    Runs analyses and publishes their events.

    At most one analysis is in flight; starting another while one runs
    is a no-op. Cancelling frees the service immediately and the
    cancelled session publishes nothing further.
    """

    def __init__(
        self,
        events: EventChannel | None = None,
        settings_provider: SettingsProvider | None = None,
        crawl_config: CrawlConfig | None = None,
        scoring_config: ScoringConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.events = events or EventChannel()
        self.settings_provider = settings_provider or default_settings_provider
        self.crawl_config = crawl_config
        self.scoring_config = scoring_config
        self.transport = transport
        self._active: AnalysisSession | None = None

    @property
    def active_session(self) -> AnalysisSession | None:
        return self._active

    @property
    def is_busy(self) -> bool:
        return self._active is not None

    def start_analysis(self, url: str, issue_description: str) -> asyncio.Task | None:
        """
        Validate input and start an analysis in the background.

        Must be called from a running event loop.

        Raises:
            InvalidInputError: Empty or unparsable URL, or empty issue

        Returns:
            The task running the analysis, or None when one is already running
        """
        url = (url or "").strip()
        issue_description = (issue_description or "").strip()

        if not url:
            raise InvalidInputError("URL is required", field="url")
        if normalize_url(ensure_scheme(url)) is None:
            raise InvalidInputError(f"Invalid URL: {url}", field="url")
        if not issue_description:
            raise InvalidInputError("Issue description is required", field="issue_description")

        if self._active is not None:
            logger.warning(
                "analysis_already_running",
                session_id=str(self._active.id),
                url=self._active.url,
            )
            return None

        session = AnalysisSession(url=url, issue_description=issue_description)
        self._active = session
        logger.info("analysis_started", session_id=str(session.id), url=url)

        return asyncio.create_task(self._run(session))

    def cancel_analysis(self) -> bool:
        """
        Abort the active analysis, if any.

        Returns:
            True if a running analysis was cancelled
        """
        session = self._active
        if session is None:
            return False

        session.cancel()
        self._active = None
        logger.info("analysis_cancel_requested", session_id=str(session.id))
        return True

    def _publish(self, session: AnalysisSession, event: AnalysisEvent) -> None:
        if session.is_cancelled:
            return
        self.events.publish(event)

    def _checkpoint(self, session: AnalysisSession) -> None:
        if session.is_cancelled:
            raise AnalysisCancelledError()

    def _crawl_config_for(self, settings: AnalysisSettings) -> CrawlConfig:
        if self.crawl_config is None:
            return get_settings().crawl_config(max_urls=settings.max_urls_to_crawl)
        return dataclasses.replace(self.crawl_config, max_urls=settings.max_urls_to_crawl)

    def _scoring_config(self) -> ScoringConfig:
        if self.scoring_config is None:
            return get_settings().scoring_config()
        return self.scoring_config

    async def _run(self, session: AnalysisSession) -> FilterOutcome | None:
        with analysis_context(str(session.id), session.url):
            try:
                outcome = await self._execute(session)
                logger.info(
                    "analysis_complete",
                    results=len(outcome.results),
                    duration_ms=outcome.duration_ms,
                )
                return outcome
            except AnalysisCancelledError:
                logger.info("analysis_cancelled", state=session.state.value)
            except GatekeeperError as e:
                logger.warning("analysis_failed", code=e.code, error=e.message)
                self._fail(session, e.message, e.code)
            except Exception as e:
                logger.exception("analysis_crashed", error=str(e))
                self._fail(session, str(e) or type(e).__name__, "internal_error")
            finally:
                if self._active is session:
                    self._active = None
        return None

    def _fail(self, session: AnalysisSession, message: str, code: str) -> None:
        if session.is_cancelled:
            return
        if session.can_transition(AnalysisState.ERROR):
            session.transition(AnalysisState.ERROR)
        self._publish(session, AnalysisErrorEvent(error=message, code=code))

    async def _execute(self, session: AnalysisSession) -> FilterOutcome:
        self._checkpoint(session)
        settings = self.settings_provider()

        session.transition(AnalysisState.CRAWLING)
        self._publish(
            session,
            ProgressEvent(
                phase=ProgressPhase.CRAWLING,
                message="Looking for sitemap...",
                urls_found=0,
                percent=10,
            ),
        )

        def on_pages_found(count: int) -> None:
            self._publish(
                session,
                ProgressEvent(
                    phase=ProgressPhase.CRAWLING,
                    message=f"Found {count} pages...",
                    urls_found=count,
                    percent=30,
                ),
            )

        crawl = await discover_pages(
            session.url,
            config=self._crawl_config_for(settings),
            progress_callback=on_pages_found,
            cancel_event=session.cancel_event,
            transport=self.transport,
        )
        self._checkpoint(session)

        if crawl.errors:
            logger.info("crawl_errors", errors=crawl.errors)
        if not crawl.pages:
            raise NoPagesFoundError(crawl.base_url)

        found = crawl.total_found
        self._publish(
            session,
            ProgressEvent(
                phase=ProgressPhase.CRAWLING,
                message=f"Crawl complete: {found} URLs ({crawl.discovery_method.value})",
                urls_found=found,
                percent=40,
            ),
        )

        self._checkpoint(session)
        session.transition(AnalysisState.FILTERING)
        self._publish(
            session,
            ProgressEvent(
                phase=ProgressPhase.FILTERING,
                message=f"Filtering {found} URLs with AI...",
                urls_found=found,
                percent=50,
            ),
        )

        def on_scored(scored: int, total: int) -> None:
            self._publish(
                session,
                ProgressEvent(
                    phase=ProgressPhase.FILTERING,
                    message=f"Scored {scored}/{total} URLs",
                    urls_found=found,
                    percent=filtering_percent(scored, total),
                ),
            )

        def on_result(page: ScoredPage, progress: BatchProgress) -> None:
            self._publish(session, RealtimeResultEvent(scored_page=page, batch_progress=progress))

        provider = create_scoring_provider(settings.provider_config(), transport=self.transport)
        outcome = await filter_pages(
            provider,
            crawl.pages,
            session.issue_description,
            max_results=settings.max_results_to_return,
            config=self._scoring_config(),
            progress_callback=on_scored,
            result_callback=on_result,
            cancel_event=session.cancel_event,
        )
        self._checkpoint(session)

        session.transition(AnalysisState.DONE)
        self._publish(
            session,
            ProgressEvent(
                phase=ProgressPhase.DONE,
                message=f"Found {len(outcome.results)} relevant pages",
                urls_found=found,
                percent=100,
            ),
        )
        self._publish(session, AnalysisCompleteEvent(outcome=outcome))
        return outcome
