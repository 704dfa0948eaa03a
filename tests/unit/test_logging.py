"""Tests for logging setup."""

import logging

import pytest
import structlog

from gatekeeper.logging import analysis_context, resolve_level, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestResolveLevel:
    """Tests for resolve_level."""

    def test_known_names(self) -> None:
        """Names are case-insensitive."""
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING

    def test_unknown_or_missing(self) -> None:
        """Unknown names fall back to INFO."""
        assert resolve_level("chatty") == logging.INFO
        assert resolve_level(None) == logging.INFO


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_quiets_http_clients(self) -> None:
        """HTTP client loggers stay at WARNING or above."""
        setup_logging(level="DEBUG", json_logs=True)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_respects_higher_level(self) -> None:
        """A stricter process level also applies to HTTP clients."""
        setup_logging(level="ERROR", json_logs=False)

        assert logging.getLogger("httpx").level == logging.ERROR


class TestAnalysisContext:
    """Tests for analysis_context."""

    def test_binds_and_unbinds(self) -> None:
        """Session id and site are bound only inside the block."""
        with analysis_context("abc-123", "https://example.com"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["session_id"] == "abc-123"
            assert bound["site"] == "https://example.com"

        assert "session_id" not in structlog.contextvars.get_contextvars()
