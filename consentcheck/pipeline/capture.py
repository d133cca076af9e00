"""
Capture session: one audit run against one browser.

Stages::

    init -> navigating -> monitoring-pre-consent -> detecting-banner
         -> accepting -> monitoring-post-consent -> completed

with the terminal side exits ``illegal-pre-consent`` (Google tracking fired
before consent), ``not-found`` (no catalog banner on the page) and
``failed`` (navigation or driver fault).

Requests are tagged ``before`` or ``after`` according to the
``consent_granted`` flag at the moment the request event is delivered.
Events already in flight when the accept click fires can land on either
side; the settle delays bound that window but do not close it.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Literal

from consentcheck import config
from consentcheck.analysis import classifier, verdict
from consentcheck.browser import driver
from consentcheck.consent import click
from consentcheck.models import audit
from consentcheck.utils import errors, logger

log = logger.create_logger("Capture")

MSG_BANNER_NOT_FOUND = (
    "We could not find the cookie banner on your website. Please reach out to us for a manual check."
)

CaptureStage = Literal[
    "init",
    "navigating",
    "monitoring-pre-consent",
    "detecting-banner",
    "accepting",
    "monitoring-post-consent",
    "completed",
    "not-found",
    "illegal-pre-consent",
    "failed",
]


@dataclasses.dataclass
class SessionState:
    """Mutable per-run capture state, owned by a single ``CaptureSession``."""

    before: list[audit.CapturedRequest] = dataclasses.field(default_factory=list)
    after: list[audit.CapturedRequest] = dataclasses.field(default_factory=list)
    consent_granted: bool = False
    advanced_consent_mode_detected: bool = False

    def record(self, url: str, match: classifier.Classification) -> audit.CapturedRequest:
        """Append a classified request to the bucket for the current phase."""
        captured = audit.CapturedRequest(
            url=url,
            vendor_name=match.vendor_name,
            consent_signal=match.consent_signal,
            phase="after" if self.consent_granted else "before",
        )
        (self.after if self.consent_granted else self.before).append(captured)
        return captured

    def detected_vendors(self) -> list[str]:
        """Vendor names seen in either phase, in first-seen order."""
        return list(dict.fromkeys(r.vendor_name for r in [*self.before, *self.after]))


class CaptureSession:
    """Drives one audit: navigate, capture, accept the banner, judge."""

    def __init__(
        self,
        request: audit.AnalyzeRequest,
        browser: driver.BrowserDriver,
        settings: config.Settings | None = None,
    ) -> None:
        self._request = request
        self._browser = browser
        self._settings = settings or config.get_settings()
        self.state = SessionState()
        self.stage: CaptureStage = "init"

    def _transition(self, stage: CaptureStage) -> None:
        log.debug("Stage transition", {"from": self.stage, "to": stage})
        self.stage = stage

    def _on_request(self, url: str) -> None:
        match = classifier.classify(url)
        if match is None:
            return
        captured = self.state.record(url, match)
        log.info(
            f"Found a {captured.vendor_name} request",
            {"gcs": captured.consent_signal, "phase": captured.phase},
        )

    def _fail(self, message: str, *, banner: str | None = None) -> audit.AuditResult:
        return audit.AuditResult.failure(
            self._request,
            message,
            banner=banner,
            details=verdict.summarize(self._request.mode, self.state.before, self.state.after),
        )

    async def run(self) -> audit.AuditResult:
        """Run the audit to a terminal stage and return its result.

        Never raises for faults inside the run: they become error-status
        results.  The browser is released on every exit path.
        """
        try:
            async with self._browser as page:
                return await self._capture(page)
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.error("Audit failed", {"stage": self.stage, "error": message})
            self._transition("failed")
            return self._fail(f"Error: {message}")

    async def _capture(self, page: driver.BrowserDriver) -> audit.AuditResult:
        request = self._request
        settings = self._settings
        page.on_request(self._on_request)

        # ── Navigation ──────────────────────────────────────────
        self._transition("navigating")
        log.start_timer("navigation")
        await page.open(request.website, settings.navigation_timeout_ms)
        log.end_timer("navigation", "Page reached network idle")

        # ── Pre-consent monitoring ──────────────────────────────
        self._transition("monitoring-pre-consent")
        await asyncio.sleep(settings.pre_consent_settle_ms / 1000)

        log.subsection("Requests before accepting")
        if not self.state.before:
            log.info("No relevant requests found before accepting")

        if audit.is_google_only(request.mode):
            outcome = verdict.check_pre_consent(self.state.before)
            if outcome == "illegal":
                self._transition("illegal-pre-consent")
                log.error("GA4 or Google Ads fired before consent")
                return self._fail(verdict.MSG_ILLEGAL_PRE_CONSENT)
            if outcome == "advanced-consent-mode":
                log.warn("Only fully-denied Google requests before consent (advanced consent mode)")
                self.state.advanced_consent_mode_detected = True

        # ── Banner detection and acceptance ─────────────────────
        self._transition("detecting-banner")
        try:
            profile = await click.detect_banner(page, request.banner)
            if profile is None:
                self._transition("not-found")
                log.warn("No known consent banner found")
                return self._fail(MSG_BANNER_NOT_FOUND)

            self._transition("accepting")
            log.info("Detected banner", {"banner": profile.name})
            clicked = await click.activate_banner(page, profile)
        except errors.BannerInteractionError as exc:
            message = errors.get_error_message(exc)
            log.error("Error while detecting or interacting with cookie banner", {"error": message})
            self._transition("failed")
            return self._fail(f"Error detecting cookie banner: {message}")

        self.state.consent_granted = True
        log.info("Accepted all cookies", {"clicked": clicked.success})

        # ── Post-consent monitoring ─────────────────────────────
        self._transition("monitoring-post-consent")
        if not await page.wait_for_settle(settings.post_consent_timeout_ms):
            log.info("Network still active after consent, proceeding")

        log.subsection("Requests after accepting")
        if not self.state.after:
            log.info("No relevant requests found after accepting")

        # ── Verdict ─────────────────────────────────────────────
        self._transition("completed")
        result = verdict.evaluate(
            request.mode,
            self.state.before,
            self.state.after,
            self.state.advanced_consent_mode_detected,
        )
        log.info("Conclusion", {"status": result.status, "message": result.message, "vendors": self.state.detected_vendors()})
        return audit.AuditResult(
            status=result.status,
            message=result.message,
            website=request.website,
            banner=profile.name,
            mode=request.mode,
            details=verdict.summarize(request.mode, self.state.before, self.state.after),
        )
