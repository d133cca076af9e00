"""Tests for consentcheck.pipeline.capture: the capture session state machine."""

from __future__ import annotations

import pytest

from consentcheck import config
from consentcheck.analysis import classifier, verdict
from consentcheck.models import audit
from consentcheck.pipeline import capture
from consentcheck.utils import errors
from tests.fakes import (
    BORLABS_ACCEPT,
    COOKIEBOT_ACCEPT,
    EU_COOKIE_CONTAINER,
    FACEBOOK_URL,
    FIRST_PARTY_URL,
    GA4_DENIED_URL,
    GA4_GRANTED_URL,
    GA4_NO_SIGNAL_URL,
    GADS_NO_SIGNAL_URL,
    FakeDriver,
)


async def _run(
    request: audit.AnalyzeRequest,
    page: FakeDriver,
    settings: config.Settings,
) -> tuple[capture.CaptureSession, audit.AuditResult]:
    session = capture.CaptureSession(request, page, settings)
    result = await session.run()
    return session, result


class TestSessionState:
    """Tests for SessionState."""

    def test_record_before_consent(self) -> None:
        state = capture.SessionState()
        captured = state.record("https://x/g", classifier.Classification("Google Ads", None))
        assert captured.phase == "before"
        assert state.before == [captured]
        assert state.after == []

    def test_record_after_consent(self) -> None:
        state = capture.SessionState(consent_granted=True)
        captured = state.record("https://x/g", classifier.Classification("Google Ads", "G111"))
        assert captured.phase == "after"
        assert state.after == [captured]

    def test_detected_vendors_first_seen_order(self) -> None:
        state = capture.SessionState()
        state.record("u1", classifier.Classification("Facebook Pixel", None))
        state.record("u2", classifier.Classification("Google Ads", None))
        state.consent_granted = True
        state.record("u3", classifier.Classification("Facebook Pixel", None))
        assert state.detected_vendors() == ["Facebook Pixel", "Google Ads"]


class TestCompletedRun:
    """Runs that reach the completed stage."""

    @pytest.mark.asyncio
    async def test_compliant(
        self,
        google_request: audit.AnalyzeRequest,
        cookiebot_page: FakeDriver,
        fast_settings: config.Settings,
    ) -> None:
        session, result = await _run(google_request, cookiebot_page, fast_settings)
        assert session.stage == "completed"
        assert result.status == "success"
        assert result.message == verdict.MSG_COMPLIANT
        assert result.banner == "Cookiebot"
        assert result.details == ["After consent: Google Analytics 4 (gcs: G111)"]
        assert cookiebot_page.clicked == [COOKIEBOT_ACCEPT]
        assert cookiebot_page.opened == [("https://example.com", 1000)]

    @pytest.mark.asyncio
    async def test_no_tracking_after_consent(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(elements={BORLABS_ACCEPT: "Accept all"})
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "completed"
        assert result.message == verdict.MSG_NO_TRACKING_AFTER_CONSENT
        assert result.banner == "Borlabs Cookie"

    @pytest.mark.asyncio
    async def test_consent_mode_missing(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(elements={BORLABS_ACCEPT: "Accept all"}, settle_requests=[GA4_NO_SIGNAL_URL])
        _, result = await _run(google_request, page, fast_settings)
        assert result.message == verdict.MSG_CONSENT_MODE_MISSING

    @pytest.mark.asyncio
    async def test_advanced_consent_mode_proceeds_to_banner(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(
            elements={COOKIEBOT_ACCEPT: "Allow all"},
            load_requests=[GA4_DENIED_URL, GA4_DENIED_URL],
            settle_requests=[GA4_GRANTED_URL],
        )
        session, result = await _run(google_request, page, fast_settings)
        assert session.state.advanced_consent_mode_detected is True
        assert page.probed
        assert session.stage == "completed"
        assert result.message == verdict.MSG_ADVANCED_CONSENT_MODE
        assert result.status == "success"

    @pytest.mark.asyncio
    async def test_requests_fired_during_click_precede_consent_flag(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(
            containers={EU_COOKIE_CONTAINER: ["Decline", "Accept"]},
            click_requests=[GA4_GRANTED_URL],
        )
        session, result = await _run(google_request, page, fast_settings)
        # Delivered while the click runs, i.e. before consent_granted is set.
        assert [r.phase for r in session.state.before + session.state.after] == ["before"]
        assert result.banner == "EU Cookie"

    @pytest.mark.asyncio
    async def test_settle_timeout_is_tolerated(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(
            elements={COOKIEBOT_ACCEPT: "Allow all"},
            settle_requests=[GA4_GRANTED_URL],
            settled=False,
        )
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "completed"
        assert result.message == verdict.MSG_COMPLIANT

    @pytest.mark.asyncio
    async def test_verdict_only_counts_requests_seen_before_settle_returns(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(
            elements={COOKIEBOT_ACCEPT: "Allow all"},
            late_requests=[GA4_GRANTED_URL],
        )
        _, result = await _run(google_request, page, fast_settings)
        assert result.message == verdict.MSG_NO_TRACKING_AFTER_CONSENT
        assert result.details == []

    @pytest.mark.asyncio
    async def test_unrelated_requests_are_ignored(
        self, all_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(elements={COOKIEBOT_ACCEPT: "Allow all"}, load_requests=[FIRST_PARTY_URL])
        session, _ = await _run(all_request, page, fast_settings)
        assert session.state.before == []

    @pytest.mark.asyncio
    async def test_all_mode_is_informational(
        self, all_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(
            elements={COOKIEBOT_ACCEPT: "Allow all"},
            load_requests=[GADS_NO_SIGNAL_URL, FACEBOOK_URL],
            settle_requests=[GA4_GRANTED_URL],
        )
        session, result = await _run(all_request, page, fast_settings)
        assert session.stage == "completed"
        assert result.status == "success"
        assert result.message == ""
        assert session.state.advanced_consent_mode_detected is False
        assert result.details == [
            "Before consent: Google Ads",
            "Before consent: Facebook Pixel",
            "After consent: Google Analytics 4 (gcs: G111)",
        ]

    @pytest.mark.asyncio
    async def test_requested_banner(self, fast_settings: config.Settings) -> None:
        request = audit.AnalyzeRequest(website="https://example.com", banner="Borlabs Cookie", mode="Google Only")
        page = FakeDriver(elements={COOKIEBOT_ACCEPT: "Allow all", BORLABS_ACCEPT: "Accept all"})
        _, result = await _run(request, page, fast_settings)
        assert result.banner == "Borlabs Cookie"
        assert page.clicked == [BORLABS_ACCEPT]


class TestTerminalStages:
    """Runs that stop early."""

    @pytest.mark.asyncio
    async def test_illegal_pre_consent_skips_banner(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(elements={COOKIEBOT_ACCEPT: "Allow all"}, load_requests=[GADS_NO_SIGNAL_URL])
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "illegal-pre-consent"
        assert result.status == "error"
        assert result.message == verdict.MSG_ILLEGAL_PRE_CONSENT
        assert result.details == ["Before consent: Google Ads"]
        assert page.probed == []
        assert page.clicked == []

    @pytest.mark.asyncio
    async def test_one_offender_among_denied(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(load_requests=[GA4_DENIED_URL, GA4_GRANTED_URL])
        session, _ = await _run(google_request, page, fast_settings)
        assert session.stage == "illegal-pre-consent"
        assert session.state.advanced_consent_mode_detected is False

    @pytest.mark.asyncio
    async def test_banner_not_found(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver()
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "not-found"
        assert result.status == "error"
        assert result.message == capture.MSG_BANNER_NOT_FOUND
        assert session.state.consent_granted is False

    @pytest.mark.asyncio
    async def test_navigation_error(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(open_error=errors.NavigationError("https://example.com", "page did not settle"))
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "failed"
        assert result.status == "error"
        assert result.message == "Error: Navigation to https://example.com failed: page did not settle"
        assert page.probed == []

    @pytest.mark.asyncio
    async def test_unexpected_fault(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(open_error=RuntimeError("Browser has been closed"))
        _, result = await _run(google_request, page, fast_settings)
        assert result.status == "error"
        assert result.message == "Error: Browser has been closed"

    @pytest.mark.asyncio
    async def test_banner_interaction_fault(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        page = FakeDriver(probe_error=RuntimeError("Execution context was destroyed"))
        session, result = await _run(google_request, page, fast_settings)
        assert session.stage == "failed"
        assert result.status == "error"
        assert result.message.startswith("Error detecting cookie banner: Execution context was destroyed")


class TestResourceRelease:
    """The browser is released exactly once on every exit path."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "page",
        [
            FakeDriver(elements={COOKIEBOT_ACCEPT: "Allow all"}),
            FakeDriver(),
            FakeDriver(load_requests=[GADS_NO_SIGNAL_URL]),
            FakeDriver(open_error=errors.NavigationError("https://example.com", "timeout")),
            FakeDriver(probe_error=RuntimeError("boom")),
        ],
        ids=["completed", "not-found", "illegal-pre-consent", "navigation-error", "banner-fault"],
    )
    async def test_closed_once(
        self,
        page: FakeDriver,
        google_request: audit.AnalyzeRequest,
        fast_settings: config.Settings,
    ) -> None:
        await _run(google_request, page, fast_settings)
        assert page.enter_calls == 1
        assert page.close_calls == 1

    @pytest.mark.asyncio
    async def test_sessions_do_not_share_state(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        first, _ = await _run(google_request, FakeDriver(load_requests=[GADS_NO_SIGNAL_URL]), fast_settings)
        second, _ = await _run(google_request, FakeDriver(), fast_settings)
        assert len(first.state.before) == 1
        assert second.state.before == []
