"""
Consent-banner detection and "accept all" click strategies.

Detection walks the catalog in declaration order and stops at the first
profile with a resolving selector.  Activation clicks exactly one control:
either the first resolving selector (ordinary banners) or the last button
inside the matched container (container-style banners).
"""

from __future__ import annotations

import dataclasses

from consentcheck.browser import driver
from consentcheck.consent import catalog
from consentcheck.utils import errors, logger

log = logger.create_logger("Consent-Click")


@dataclasses.dataclass(frozen=True)
class ClickResult:
    """Outcome of activating a banner's accept control."""

    success: bool
    selector: str | None = None
    label: str | None = None


async def _selector_matches(
    page: driver.BrowserDriver,
    profile: catalog.BannerProfile,
    selector: str,
) -> bool:
    """Return whether *selector* satisfies *profile*'s detection rule."""
    try:
        if not await page.exists(selector):
            return False
        if profile.is_container_style:
            return await page.count_buttons(selector) > 0
        return True
    except Exception as exc:
        raise errors.BannerInteractionError(selector, exc) from exc


async def find_matching_selector(
    page: driver.BrowserDriver,
    profile: catalog.BannerProfile,
) -> str | None:
    """Return the first of *profile*'s selectors present on the page."""
    for selector in profile.selectors:
        found = await _selector_matches(page, profile, selector)
        log.debug("Selector probed", {"banner": profile.name, "selector": selector, "found": found})
        if found:
            return selector
    return None


async def detect_banner(
    page: driver.BrowserDriver,
    requested: str = "",
) -> catalog.BannerProfile | None:
    """Find which catalog banner is shown on the page.

    Args:
        page: Driver for the loaded page.
        requested: Banner name chosen by the user, or ``""`` to try
            every profile in catalog order.

    Returns:
        The first matching profile, or ``None`` if no banner was found.

    Raises:
        BannerInteractionError: If the driver fails while probing.
    """
    profiles = catalog.profiles_for(requested)
    if requested:
        log.info("Checking specific banner", {"banner": requested})

    for profile in profiles:
        found = await find_matching_selector(page, profile) is not None
        log.info(f"{profile.name} found", {"found": found})
        if found:
            return profile
    return None


async def activate_banner(
    page: driver.BrowserDriver,
    profile: catalog.BannerProfile,
) -> ClickResult:
    """Click *profile*'s accept-all control, at most one element.

    Raises:
        BannerInteractionError: If the driver fails while clicking.
    """
    for selector in profile.selectors:
        try:
            if profile.is_container_style:
                if not await page.exists(selector):
                    continue
                label = await page.click_last_button(selector)
            else:
                label = await page.click(selector)
        except Exception as exc:
            raise errors.BannerInteractionError(selector, exc) from exc

        if label is not None:
            log.success("Clicked accept control", {"banner": profile.name, "selector": selector, "text": label})
            return ClickResult(success=True, selector=selector, label=label)

    log.warn("No accept control could be clicked", {"banner": profile.name})
    return ClickResult(success=False)
