"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from consentcheck import config
from consentcheck.models import audit
from tests.fakes import COOKIEBOT_ACCEPT, GA4_GRANTED_URL, FakeDriver

# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture()
def fast_settings() -> config.Settings:
    """Settings with no settle delays so capture tests run instantly."""
    return config.Settings(
        navigation_timeout_ms=1000,
        pre_consent_settle_ms=0,
        post_consent_timeout_ms=0,
    )


@pytest.fixture()
def google_request() -> audit.AnalyzeRequest:
    """A "Google Only" audit with banner auto-detection."""
    return audit.AnalyzeRequest(website="https://example.com", banner="", mode="Google Only")


@pytest.fixture()
def all_request() -> audit.AnalyzeRequest:
    """An informational "All" audit with banner auto-detection."""
    return audit.AnalyzeRequest(website="https://example.com", banner="", mode="All")


@pytest.fixture()
def cookiebot_page() -> FakeDriver:
    """A page showing a Cookiebot banner that starts GA4 after acceptance."""
    return FakeDriver(
        elements={COOKIEBOT_ACCEPT: "Allow all"},
        settle_requests=[GA4_GRANTED_URL],
    )
