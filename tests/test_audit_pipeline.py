"""Tests for consentcheck.pipeline.audit: the audit entry point."""

from __future__ import annotations

import pathlib

import pytest

from consentcheck import config
from consentcheck.analysis import verdict
from consentcheck.browser import driver, session
from consentcheck.models import audit
from consentcheck.pipeline import audit as audit_pipeline
from tests.fakes import FakeDriver


def _factory(page: FakeDriver, calls: list[config.Settings] | None = None) -> audit_pipeline.DriverFactory:
    def make(settings: config.Settings) -> driver.BrowserDriver:
        if calls is not None:
            calls.append(settings)
        return page

    return make


class TestSupportedBanner:
    """Tests for is_supported_banner()."""

    @pytest.mark.parametrize(("banner", "expected"), [("", True), ("Cookiebot", True), ("Other", False), ("OneTrust", False)])
    def test_values(self, banner: str, expected: bool) -> None:
        assert audit_pipeline.is_supported_banner(banner) is expected


class TestRunAudit:
    """Tests for run_audit()."""

    @pytest.mark.asyncio
    async def test_other_banner_short_circuits(self, fast_settings: config.Settings) -> None:
        calls: list[config.Settings] = []
        request = audit.AnalyzeRequest(
            website="https://example.com", banner="Other", other_banner="OneTrust", mode="Google Only"
        )
        result = await audit_pipeline.run_audit(request, settings=fast_settings, driver_factory=_factory(FakeDriver(), calls))
        assert result.status == "error"
        assert result.message == audit_pipeline.MSG_UNSUPPORTED_BANNER
        assert result.banner == "Other"
        assert calls == []

    @pytest.mark.asyncio
    async def test_unknown_banner_short_circuits(self, fast_settings: config.Settings) -> None:
        page = FakeDriver()
        request = audit.AnalyzeRequest(website="https://example.com", banner="OneTrust", mode="All")
        result = await audit_pipeline.run_audit(request, settings=fast_settings, driver_factory=_factory(page))
        assert result.message == audit_pipeline.MSG_UNSUPPORTED_BANNER
        assert page.enter_calls == 0

    @pytest.mark.asyncio
    async def test_runs_capture_with_fresh_driver(
        self,
        google_request: audit.AnalyzeRequest,
        cookiebot_page: FakeDriver,
        fast_settings: config.Settings,
    ) -> None:
        calls: list[config.Settings] = []
        result = await audit_pipeline.run_audit(
            google_request, settings=fast_settings, driver_factory=_factory(cookiebot_page, calls)
        )
        assert calls == [fast_settings]
        assert result.status == "success"
        assert result.message == verdict.MSG_COMPLIANT
        assert cookiebot_page.close_calls == 1

    @pytest.mark.asyncio
    async def test_driver_creation_failure_is_a_result(
        self, google_request: audit.AnalyzeRequest, fast_settings: config.Settings
    ) -> None:
        def broken(settings: config.Settings) -> driver.BrowserDriver:
            raise RuntimeError("Executable doesn't exist")

        result = await audit_pipeline.run_audit(google_request, settings=fast_settings, driver_factory=broken)
        assert result.status == "error"
        assert result.message == "Error: Executable doesn't exist"

    @pytest.mark.asyncio
    async def test_unusable_log_dir_does_not_fail_audit(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: pathlib.Path,
        google_request: audit.AnalyzeRequest,
        cookiebot_page: FakeDriver,
        fast_settings: config.Settings,
    ) -> None:
        monkeypatch.setenv("WRITE_TO_FILE", "true")
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".logs").write_text("not a directory", encoding="utf-8")
        result = await audit_pipeline.run_audit(
            google_request, settings=fast_settings, driver_factory=_factory(cookiebot_page)
        )
        assert result.message == verdict.MSG_COMPLIANT


class TestDefaultDriverFactory:
    """Tests for default_driver_factory()."""

    def test_builds_playwright_driver(self) -> None:
        created = audit_pipeline.default_driver_factory(config.Settings(browser_headless=False))
        assert isinstance(created, session.PlaywrightDriver)
        assert created._headless is False
