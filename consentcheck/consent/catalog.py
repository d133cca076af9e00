"""
Known consent-banner products and the selectors of their "accept all" control.

Profiles are evaluated in declaration order, and within a profile the
selectors are tried in order; both orders are significant.
"""

from __future__ import annotations

import dataclasses
from typing import Literal

# How a banner's accept action is performed:
#   "ordinary"        click the first selector that resolves to an element.
#   "container-style" the selector names a container; click its last button.
ClickStrategy = Literal["ordinary", "container-style"]


@dataclasses.dataclass(frozen=True)
class BannerProfile:
    """A consent-banner product and how to accept it."""

    name: str
    selectors: tuple[str, ...]
    strategy: ClickStrategy = "ordinary"

    @property
    def is_container_style(self) -> bool:
        return self.strategy == "container-style"


BANNER_PROFILES: tuple[BannerProfile, ...] = (
    BannerProfile(
        name="Cookiebot",
        selectors=(
            "#CybotCookiebotDialogBodyLevelButtonLevelOptinAllowAll",
            '.CybotCookiebotDialogBodyButton[data-accept-all="true"]',
            '#CookiebotWidget .CookiebotWidget-button-accept[data-accept-all="true"]',
            "#CybotCookiebotDialogBodyButtonAccept:not([data-accept-selected])",
        ),
    ),
    BannerProfile(
        name="Borlabs Cookie",
        selectors=(".brlbs-btn-accept-all",),
    ),
    BannerProfile(
        name="Usercentrics",
        selectors=(
            'button[data-testid="uc-accept-all-button"]',
            '.usercentrics-button[data-testid="accept-all-button"]',
        ),
    ),
    BannerProfile(
        name="Pandectes",
        selectors=(
            'button[aria-label="allow cookies"].cc-btn.cc-btn-decision.cc-allow',
            "a.cc-btn.cc-btn-decision.cc-allow",
        ),
    ),
    BannerProfile(
        name="EU Cookie",
        selectors=("#ws_eu-cookie-container",),
        strategy="container-style",
    ),
    BannerProfile(
        name="Consentmanager",
        selectors=(
            ".cmptxt_btn_yes",
            "button.cmpboxbtnyes",
            "a.cmpboxbtn.cmpboxbtnyes.cmptxt_btn_yes",
            'button[aria-label="Accept all"]',
        ),
    ),
)


def banner_names() -> list[str]:
    """Return all catalog banner names in declaration order."""
    return [profile.name for profile in BANNER_PROFILES]


def get_profile(name: str) -> BannerProfile | None:
    """Look up a profile by its exact name."""
    for profile in BANNER_PROFILES:
        if profile.name == name:
            return profile
    return None


def profiles_for(requested: str) -> tuple[BannerProfile, ...]:
    """Return the profiles to probe for *requested*.

    An empty name means auto-detect across the whole catalog; an unknown
    name yields no profiles.
    """
    if not requested:
        return BANNER_PROFILES
    profile = get_profile(requested)
    return (profile,) if profile else ()
