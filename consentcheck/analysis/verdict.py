"""
Compliance verdicts derived from the pre- and post-consent request buckets.

Only the "Google Only" mode produces a verdict message.  In "All" mode the
audit is informational: requests are captured and listed in the result
details, but no compliance judgement is made.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from consentcheck.analysis import classifier, vendors
from consentcheck.models import audit

# ============================================================================
# Messages
# ============================================================================

MSG_ILLEGAL_PRE_CONSENT = (
    "WARNING: GA4 or Google Ads has been detected on your page before accepting consent! "
    "This is not legal and can lead to fines. Please contact us!"
)
MSG_ADVANCED_CONSENT_MODE = (
    "You are using advanced consent mode. This is legally controversial and can lead to fines. Please contact us!"
)
MSG_NO_TRACKING_AFTER_CONSENT = (
    "No GA4 or Google Ads requests detected after accepting consent. Please check your implementation."
)
MSG_CONSENT_MODE_MISSING = (
    "Tracking starts after consent, but Google Consent Mode doesn't seem to be enabled. Contact us!"
)
MSG_COMPLIANT = "Everything works correctly!"

PreConsentOutcome = Literal["clean", "advanced-consent-mode", "illegal"]


def _google_requests(requests: Sequence[audit.CapturedRequest]) -> list[audit.CapturedRequest]:
    return [r for r in requests if vendors.is_google_vendor(r.vendor_name)]


def is_fully_denied(request: audit.CapturedRequest) -> bool:
    """Return ``True`` if *request* carries exactly the fully-denied signal."""
    return request.consent_signal == vendors.FULLY_DENIED_SIGNAL


def check_pre_consent(before: Sequence[audit.CapturedRequest]) -> PreConsentOutcome:
    """Classify the Google requests fired before consent was granted.

    Returns:
        ``"illegal"`` if any GA4 / Google Ads request lacks the fully-denied
        signal, ``"advanced-consent-mode"`` if such requests exist and all
        are fully denied, otherwise ``"clean"``.
    """
    google = _google_requests(before)
    if not google:
        return "clean"
    if all(is_fully_denied(r) for r in google):
        return "advanced-consent-mode"
    return "illegal"


def evaluate(
    mode: str,
    before: Sequence[audit.CapturedRequest],
    after: Sequence[audit.CapturedRequest],
    advanced_consent_mode: bool,
) -> audit.Verdict:
    """Derive the verdict for a completed capture.

    The checks run in a fixed order and the first that applies wins;
    advanced consent mode takes precedence over everything else.
    """
    if not audit.is_google_only(mode):
        return audit.Verdict()

    if advanced_consent_mode:
        return audit.Verdict(message=MSG_ADVANCED_CONSENT_MODE)

    # Normally unreachable since the capture session short-circuits on
    # this condition, but the verdict must hold for any bucket pair.
    if check_pre_consent(before) == "illegal":
        return audit.Verdict(status="error", message=MSG_ILLEGAL_PRE_CONSENT)

    google_after = _google_requests(after)
    if not google_after:
        return audit.Verdict(message=MSG_NO_TRACKING_AFTER_CONSENT)

    if not any(r.consent_signal and not is_fully_denied(r) for r in google_after):
        return audit.Verdict(message=MSG_CONSENT_MODE_MISSING)

    return audit.Verdict(message=MSG_COMPLIANT)


def summarize(
    mode: str,
    before: Sequence[audit.CapturedRequest],
    after: Sequence[audit.CapturedRequest],
) -> list[str]:
    """Build the result ``details`` lines for the relevant requests.

    In "Google Only" mode only GA4 / Google Ads requests are listed.
    """
    if audit.is_google_only(mode):
        before, after = _google_requests(before), _google_requests(after)
    return [f"Before consent: {classifier.describe(r)}" for r in before] + [
        f"After consent: {classifier.describe(r)}" for r in after
    ]
