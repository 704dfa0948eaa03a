"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment before any app code runs
os.environ["ENV"] = "test"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Re-read settings for every test."""
    from gatekeeper.config import get_settings

    get_settings.cache_clear()
