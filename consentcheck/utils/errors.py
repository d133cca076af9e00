"""
Error types raised during an audit and helpers for message extraction.

Only ``InvalidInputError`` is meant to reach the caller; everything else
is caught by the capture session and rendered as an error-status result.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for all audit failures."""


class InvalidInputError(AuditError, ValueError):
    """The audit request is malformed (e.g. website is not an https URL)."""


class NavigationError(AuditError):
    """The target page did not load within the navigation timeout."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class BannerInteractionError(AuditError):
    """Probing or clicking a consent-banner selector failed."""

    def __init__(self, selector: str, cause: BaseException) -> None:
        super().__init__(f"{get_error_message(cause)} (selector: {selector})")
        self.selector = selector


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
