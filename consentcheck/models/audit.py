"""Pydantic models for audit requests, captured tracking requests, and results."""

from __future__ import annotations

from typing import Literal

import pydantic

from consentcheck.utils import errors, serialization, url

AnalysisMode = Literal["Google Only", "All"]
AuditStatus = Literal["success", "error"]
Phase = Literal["before", "after"]

GOOGLE_ONLY: AnalysisMode = "Google Only"
ALL_VENDORS: AnalysisMode = "All"

# Banner value the web form sends for an unlisted consent manager.
OTHER_BANNER = "Other"
# Banner value meaning "auto-detect"; normalised to "".
UNSURE_BANNER = "I am not sure"


def is_google_only(mode: str) -> bool:
    """Return ``True`` when *mode* selects the Google-only verdict rules."""
    return mode.lower() == GOOGLE_ONLY.lower()


class AnalyzeRequest(pydantic.BaseModel):
    """An inbound audit request from the web form."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    website: str
    banner: str = ""
    other_banner: str | None = None
    mode: AnalysisMode

    @pydantic.field_validator("website")
    @classmethod
    def _check_website(cls, value: str) -> str:
        value = value.strip()
        if not url.is_valid_website(value):
            raise errors.InvalidInputError("Website must be a valid URL starting with https://")
        return value

    @pydantic.field_validator("banner", mode="before")
    @classmethod
    def _normalise_banner(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            value = value.strip()
            if value == UNSURE_BANNER:
                return ""
        return value

    @pydantic.field_validator("mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value: object) -> object:
        if isinstance(value, str):
            for candidate in (GOOGLE_ONLY, ALL_VENDORS):
                if value.strip().lower() == candidate.lower():
                    return candidate
        return value


class CapturedRequest(pydantic.BaseModel):
    """A tracking request observed during the audit, tagged with its consent phase."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True, frozen=True
    )

    url: str
    vendor_name: str
    consent_signal: str | None = None
    phase: Phase


class Verdict(pydantic.BaseModel):
    """Status and message derived from the captured phase buckets."""

    model_config = pydantic.ConfigDict(frozen=True)

    status: AuditStatus = "success"
    message: str = ""


class AuditResult(pydantic.BaseModel):
    """Outcome of one audit, returned as the response body."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    status: AuditStatus = "success"
    message: str = ""
    website: str
    banner: str = ""
    mode: str
    details: list[str] = pydantic.Field(default_factory=list)

    @classmethod
    def failure(
        cls,
        request: AnalyzeRequest,
        message: str,
        *,
        banner: str | None = None,
        details: list[str] | None = None,
    ) -> AuditResult:
        """Return an error-status result for *request*."""
        return cls(
            status="error",
            message=message,
            website=request.website,
            banner=request.banner if banner is None else banner,
            mode=request.mode,
            details=list(details or []),
        )

    @property
    def is_error(self) -> bool:
        return self.status == "error"
