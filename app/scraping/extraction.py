"""
Per-URL listing extraction over an open page session.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.listing_scrape import (
    CarouselSelectors,
    ExtractionResult,
    ExtractionTask,
    SelectorConfig,
)
from app.scraping.driver import WAIT_LOAD, WAIT_NETWORK_IDLE, PageSession
from app.scraping.errors import NavigationError

logger = logging.getLogger(__name__)

PHOTO_ATTRIBUTE = "src"
GALLERY_RENDER_PAUSE_SECONDS = 0.5


@dataclass(frozen=True)
class ExtractionTimeouts:
    navigation_seconds: float = 10.0
    selector_seconds: float = 3.0
    click_seconds: float = 10.0


@dataclass(frozen=True)
class SiteProfile:
    """
    Navigation behaviour for a family of URLs.

    `selectors` replaces the batch selectors when set.
    """

    name: str
    host_marker: str | None
    wait_until: str
    navigation_timeout_seconds: float | None = None
    selectors: SelectorConfig | None = None

    def matches(self, url: str) -> bool:
        return self.host_marker is None or self.host_marker in url


GENERIC_PROFILE = SiteProfile(name="generic", host_marker=None, wait_until=WAIT_NETWORK_IDLE)

BONAVISTA_PROFILE = SiteProfile(
    name="bonavista",
    host_marker="bonavista",
    wait_until=WAIT_LOAD,
    navigation_timeout_seconds=6.0,
    selectors=SelectorConfig(
        content=("p.property-description_text__xdJhn",),
        ref_pattern=r"/([^/]+)$",
        carousel=CarouselSelectors(
            thumbnail=("[class*='multi-multimedia-gallery_mainGallery__XIX0x']",),
            full=("div.media-gallery-tour_galleryMosaic__n9mIr img",),
            ready=("[class*='media-gallery-buttons_active__']",),
        ),
    ),
)

DEFAULT_PROFILES: tuple[SiteProfile, ...] = (BONAVISTA_PROFILE,)


def select_profile(url: str, profiles: Sequence[SiteProfile] = DEFAULT_PROFILES) -> SiteProfile:
    for profile in profiles:
        if profile.matches(url):
            return profile
    return GENERIC_PROFILE


def derive_reference(url: str, pattern: str) -> str:
    """
    First capture group of `pattern` in `url`, or "" when it does not match.
    """

    if not pattern:
        return ""
    try:
        match = re.search(pattern, url)
    except re.error:
        logger.warning("Invalid reference pattern %r", pattern)
        return ""
    if match is None or not match.groups():
        return ""
    return match.group(1) or ""


def extract_listing(
    session: PageSession,
    task: ExtractionTask,
    *,
    timeouts: ExtractionTimeouts | None = None,
    profiles: Sequence[SiteProfile] = DEFAULT_PROFILES,
) -> ExtractionResult:
    """
    Navigate to the task URL and run the content and photo cascades.

    Only a navigation failure sets `error`; selectors that match nothing
    leave content or photos empty.
    """

    timeouts = timeouts or ExtractionTimeouts()
    profile = select_profile(task.url, profiles)
    selectors = profile.selectors or task.selectors

    result = ExtractionResult(
        url=task.url,
        reference=derive_reference(task.url, selectors.ref_pattern),
    )

    try:
        session.navigate(
            task.url,
            wait_until=profile.wait_until,
            timeout_seconds=profile.navigation_timeout_seconds or timeouts.navigation_seconds,
        )
    except NavigationError as exc:
        result.error = f"Failed to navigate: {exc}"
        return result

    result.content = _first_text(session, selectors.content, timeouts.selector_seconds)
    result.photos = _first_photos(session, selectors.photos)

    if not result.photos and selectors.carousel.configured:
        result.photos = _carousel_photos(session, selectors.carousel, timeouts, url=task.url)

    return result


def _first_text(session: PageSession, selectors: Sequence[str], timeout_seconds: float) -> str:
    for selector in selectors:
        text = session.first_text(selector, timeout_seconds=timeout_seconds).strip()
        if text:
            return text
    return ""


def _first_photos(session: PageSession, selectors: Sequence[str]) -> list[str]:
    for selector in selectors:
        photos = [
            src
            for src in session.attribute_values(selector, PHOTO_ATTRIBUTE)
            if "http" in src
        ]
        if photos:
            return photos
    return []


def _carousel_photos(
    session: PageSession,
    carousel: CarouselSelectors,
    timeouts: ExtractionTimeouts,
    *,
    url: str,
) -> list[str]:
    for selector in carousel.ready:
        if not session.wait_for(selector, timeout_seconds=timeouts.click_seconds):
            logger.debug("Gallery readiness selector not found selector=%s url=%s", selector, url)

    opened = any(
        session.click(selector, timeout_seconds=timeouts.click_seconds)
        for selector in carousel.thumbnail
    )
    if not opened:
        logger.info("Could not open photo gallery url=%s", url)
        return []

    time.sleep(GALLERY_RENDER_PAUSE_SECONDS)
    return _first_photos(session, carousel.full)
