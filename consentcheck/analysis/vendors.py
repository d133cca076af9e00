"""
Known tracking vendors and the URL substrings that identify their requests.

The table is ordered: when a request URL could match more than one vendor,
the vendor declared first wins.
"""

from __future__ import annotations

import dataclasses

# Query parameter Google tags use to report the consent state they
# believe is in effect ("Google Consent Signal").
CONSENT_SIGNAL_PARAM = "gcs"

# gcs code meaning neither ad_storage nor analytics_storage was granted.
FULLY_DENIED_SIGNAL = "G100"

GOOGLE_ANALYTICS_4 = "Google Analytics 4"
GOOGLE_ADS = "Google Ads"


@dataclasses.dataclass(frozen=True)
class VendorSignature:
    """A tracking vendor and the URL substrings its requests contain."""

    name: str
    url_patterns: tuple[str, ...]

    def matches(self, url: str) -> bool:
        """Return ``True`` if any pattern is a literal substring of *url*."""
        return any(pattern in url for pattern in self.url_patterns)


# ============================================================================
# Vendor Registry
# ============================================================================

VENDOR_SIGNATURES: tuple[VendorSignature, ...] = (
    VendorSignature(GOOGLE_ANALYTICS_4, ("google-analytics.com/g/collect", "analytics.google.com/g/collect")),
    VendorSignature(GOOGLE_ADS, ("google.com/pagead",)),
    VendorSignature("Facebook Pixel", ("facebook.com/tr",)),
    VendorSignature("Microsoft Advertising", ("bat.bing.com",)),
    VendorSignature("TikTok Pixel", ("analytics.tiktok.com",)),
    VendorSignature("LinkedIn Insight", ("linkedin.com/px",)),
    VendorSignature("Twitter Pixel", ("static.ads-twitter.com",)),
    VendorSignature("Pinterest Tag", ("ct.pinterest.com",)),
    VendorSignature("Snapchat Pixel", ("tr.snapchat.com",)),
)

# Vendors whose requests are judged by the "Google Only" verdict rules.
GOOGLE_VENDORS: frozenset[str] = frozenset({GOOGLE_ANALYTICS_4, GOOGLE_ADS})


def vendor_names() -> list[str]:
    """Return all registered vendor names in declaration order."""
    return [signature.name for signature in VENDOR_SIGNATURES]


def is_google_vendor(name: str) -> bool:
    """Return ``True`` if *name* is one of :data:`GOOGLE_VENDORS`."""
    return name in GOOGLE_VENDORS
