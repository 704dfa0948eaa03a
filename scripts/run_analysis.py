#!/usr/bin/env python
"""Find the documentation pages of a site that matter for an issue.

Crawls the site (sitemap first, DOM crawl as fallback), ranks the
discovered pages with the configured AI provider and prints the result.
Provider credentials come from the environment / .env (AI_PROVIDER,
AI_API_KEY, AI_MODEL, AI_ENDPOINT).

Usage:
    python scripts/run_analysis.py <url> "<issue>" [--provider NAME] [--markdown]

Examples:
    python scripts/run_analysis.py docs.python.org "asyncio task cancelled twice"
    python scripts/run_analysis.py https://docs.stripe.com "webhook signature fails" --markdown
    python scripts/run_analysis.py --test-connection --provider ollama
"""

import argparse
import asyncio
import sys

# Add project root to path
sys.path.insert(0, ".")

from gatekeeper.config import AnalysisSettings, get_settings  # noqa: E402
from gatekeeper.events import (  # noqa: E402
    AnalysisCompleteEvent,
    AnalysisErrorEvent,
    EventChannel,
    ProgressEvent,
    RealtimeResultEvent,
)
from gatekeeper.exceptions import GatekeeperError  # noqa: E402
from gatekeeper.logging import setup_logging  # noqa: E402
from gatekeeper.service import AnalysisService  # noqa: E402
from scout.ai.providers import create_scoring_provider  # noqa: E402
from scout.export.markdown import format_as_markdown  # noqa: E402
from scout.models import FilterOutcome  # noqa: E402


def build_settings(args: argparse.Namespace) -> AnalysisSettings:
    """Environment settings with command-line overrides applied."""
    analysis = get_settings().analysis_settings()
    provider = analysis.ai_provider.model_copy(
        update={
            key: value
            for key, value in {"name": args.provider, "model": args.model}.items()
            if value
        }
    )
    update: dict = {"ai_provider": provider}
    if args.max_results:
        update["max_results_to_return"] = args.max_results
    return analysis.model_copy(update=update)


async def test_connection(settings: AnalysisSettings) -> int:
    provider = create_scoring_provider(settings.provider_config())
    print(f"Testing connection to {provider.name} ({settings.provider_config().resolved_model})...")
    ok = await provider.test_connection()
    print("OK" if ok else "FAILED")
    return 0 if ok else 1


def print_results(outcome: FilterOutcome) -> None:
    print()
    print("=" * 60)
    print(f"TOP {len(outcome.results)} PAGES  ({outcome.provider_name})")
    print("=" * 60)
    for i, page in enumerate(outcome.results, start=1):
        print(f"{i:2}. [{page.relevance:g}/10] {page.category.value:<9} {page.title or page.url}")
        print(f"    {page.url}")
        print(f"    {page.reason}")
    print()
    print(
        f"Scanned {outcome.total_scanned}, pre-filtered {outcome.pre_filtered}, "
        f"AI scored {outcome.ai_scored} in {outcome.duration_ms / 1000:.1f}s"
    )


async def run(args: argparse.Namespace) -> int:
    settings = build_settings(args)
    if args.test_connection:
        return await test_connection(settings)

    events = EventChannel()
    service = AnalysisService(events=events, settings_provider=lambda: settings)

    try:
        task = service.start_analysis(args.url, args.issue)
    except GatekeeperError as e:
        print(f"ERROR: {e.message}")
        return 2

    while True:
        event = await events.get()
        if isinstance(event, ProgressEvent):
            print(f"[{event.percent:3}%] {event.message}")
        elif isinstance(event, RealtimeResultEvent) and args.verbose:
            page = event.scored_page
            progress = event.batch_progress
            print(f"  ({progress.current}/{progress.total}) {page.relevance:g} {page.url}")
        elif isinstance(event, AnalysisErrorEvent):
            print(f"ERROR [{event.code}]: {event.error}")
            await task
            return 1
        elif isinstance(event, AnalysisCompleteEvent):
            await task
            if args.markdown:
                print(format_as_markdown(event.outcome, args.url))
            else:
                print_results(event.outcome)
            return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Rank a site's documentation pages by relevance to an issue"
    )
    parser.add_argument("url", nargs="?", help="Documentation site URL")
    parser.add_argument("issue", nargs="?", help="Description of the problem")
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="AI provider: openai, anthropic, gemini, deepseek, ollama",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model name (default: provider default)",
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=None,
        help="Maximum number of pages to return",
    )
    parser.add_argument(
        "--test-connection",
        action="store_true",
        help="Only check that the provider is reachable",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        help="Print the result as a markdown report",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print every scored page as it arrives",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for crawler and scorer output (default: LOG_LEVEL)",
    )
    args = parser.parse_args()

    if not args.test_connection and not (args.url and args.issue):
        parser.error("url and issue are required unless --test-connection is given")

    setup_logging(level=args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
