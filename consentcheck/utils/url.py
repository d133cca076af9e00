"""
URL helpers for validating audit targets and naming log files.
"""

from __future__ import annotations

import re
from urllib import parse

# Same rule the web form applies client-side: https only, a dotted
# hostname with an alphabetic TLD, optional port and path.
WEBSITE_PATTERN: re.Pattern[str] = re.compile(
    r"^(https://)([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}(:\d+)?(/.*)?$"
)


def is_valid_website(url: str) -> bool:
    """Return ``True`` if *url* is an acceptable audit target."""
    return bool(url) and WEBSITE_PATTERN.match(url) is not None


def extract_domain(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except Exception:
        return "unknown"
