"""
Audit entry point.

Handles the request-level short-circuits that need no browser, then runs
one ``CaptureSession`` with its own freshly created browser driver.  Each
call is fully isolated, so concurrent audits do not interfere.
"""

from __future__ import annotations

from collections.abc import Callable

from consentcheck import config
from consentcheck.browser import driver, session
from consentcheck.consent import catalog
from consentcheck.models import audit
from consentcheck.pipeline import capture
from consentcheck.utils import errors, logger, url

log = logger.create_logger("Audit")

MSG_UNSUPPORTED_BANNER = "We do not yet support this banner. Please reach out to us for a manual check!"

DriverFactory = Callable[[config.Settings], driver.BrowserDriver]


def default_driver_factory(settings: config.Settings) -> driver.BrowserDriver:
    """Create a Playwright driver configured from *settings*."""
    return session.PlaywrightDriver(headless=settings.browser_headless)


def is_supported_banner(banner: str) -> bool:
    """Return ``True`` for auto-detect (``""``) or a catalog banner name."""
    return not banner or catalog.get_profile(banner) is not None


async def run_audit(
    request: audit.AnalyzeRequest,
    *,
    settings: config.Settings | None = None,
    driver_factory: DriverFactory = default_driver_factory,
) -> audit.AuditResult:
    """Audit *request.website* and return the result.

    Never raises for faults during the audit; invalid input is rejected
    earlier, when the ``AnalyzeRequest`` is validated.
    """
    settings = settings or config.get_settings()

    if request.banner == audit.OTHER_BANNER or not is_supported_banner(request.banner):
        log.warn("Unsupported banner requested", {"banner": request.banner, "otherBanner": request.other_banner})
        return audit.AuditResult.failure(request, MSG_UNSUPPORTED_BANNER)

    logger.start_log_file(url.extract_domain(request.website))
    log.section(f"Consent audit: {request.website}")
    log.info("Audit parameters", {"banner": request.banner or "(auto-detect)", "mode": request.mode})
    log.start_timer("audit")
    try:
        try:
            browser = driver_factory(settings)
        except Exception as exc:
            log.error("Could not create browser driver", {"error": errors.get_error_message(exc)})
            return audit.AuditResult.failure(request, f"Error: {errors.get_error_message(exc)}")

        capture_session = capture.CaptureSession(request, browser, settings)
        result = await capture_session.run()
        log.end_timer("audit", "Audit complete")
        log.info("Final stage", {"stage": capture_session.stage, "status": result.status})
        return result
    finally:
        logger.end_log_file()
