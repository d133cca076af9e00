"""
Classification of outbound request URLs against the vendor registry.

Pure functions with no side-effects; safe to call from the browser's
request-event callback.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from urllib import parse

from consentcheck.analysis import vendors
from consentcheck.models import audit


@dataclasses.dataclass(frozen=True)
class Classification:
    """Vendor match for a single request URL."""

    vendor_name: str
    consent_signal: str | None


def extract_consent_signal(url: str) -> str | None:
    """Return the ``gcs`` query value carried on *url*, if any.

    Malformed URLs and query strings yield ``None`` rather than raising.
    """
    try:
        query = parse.urlsplit(url).query
        values = parse.parse_qs(query, keep_blank_values=True).get(vendors.CONSENT_SIGNAL_PARAM)
    except ValueError:
        return None
    if not values:
        return None
    return values[0] or None


def classify(
    url: str,
    registry: Sequence[vendors.VendorSignature] = vendors.VENDOR_SIGNATURES,
) -> Classification | None:
    """Match *url* against *registry*; the first matching vendor wins."""
    for signature in registry:
        if signature.matches(url):
            return Classification(
                vendor_name=signature.name,
                consent_signal=extract_consent_signal(url),
            )
    return None


def describe(request: audit.CapturedRequest) -> str:
    """Human-readable label, e.g. ``"Google Ads (gcs: G111)"``."""
    if request.consent_signal:
        return f"{request.vendor_name} (gcs: {request.consent_signal})"
    return request.vendor_name
