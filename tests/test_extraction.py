"""
tests/test_extraction.py

Per-URL extraction: reference derivation, selector cascades, navigation
failures, carousel galleries and site profiles.
"""

from __future__ import annotations

import pytest

from app.domain.listing_scrape import CarouselSelectors, ExtractionTask, SelectorConfig
from app.scraping import extraction
from app.scraping.driver import WAIT_LOAD, WAIT_NETWORK_IDLE
from app.scraping.extraction import (
    BONAVISTA_PROFILE,
    GENERIC_PROFILE,
    ExtractionTimeouts,
    derive_reference,
    extract_listing,
    select_profile,
)
from conftest import REF_PATTERN, FakePage, FakeSession, FakeSite, listing_url


def _session(url: str, page: FakePage, failures: int = 0) -> FakeSession:
    return FakeSession(FakeSite(pages={url: page}, failures={url: failures}))


# ---------------------------------------------------------------------------
# Reference derivation
# ---------------------------------------------------------------------------


class TestDeriveReference:
    def test_returns_first_capture_group(self) -> None:
        assert derive_reference("https://agency.example.com/listing/AB-123", REF_PATTERN) == "AB-123"

    def test_unmatched_url_gives_empty_reference(self) -> None:
        assert derive_reference("https://agency.example.com/about", REF_PATTERN) == ""

    @pytest.mark.parametrize("pattern", ["", "listing", "(unclosed"])
    def test_unusable_pattern_gives_empty_reference(self, pattern: str) -> None:
        assert derive_reference("https://agency.example.com/listing/AB-123", pattern) == ""


# ---------------------------------------------------------------------------
# Cascades
# ---------------------------------------------------------------------------


class TestContentCascade:
    def test_whitespace_match_does_not_stop_cascade(self) -> None:
        url = listing_url("R1")
        session = _session(url, FakePage(texts={"p.a": "   \n\t ", "p.b": "  Sea view villa  "}))
        selectors = SelectorConfig(content=("p.a", "p.b"), ref_pattern=REF_PATTERN)

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.content == "Sea view villa"
        assert result.error is None

    def test_first_non_empty_selector_wins(self) -> None:
        url = listing_url("R1")
        session = _session(url, FakePage(texts={"p.a": "First", "p.b": "Second"}))
        selectors = SelectorConfig(content=("p.a", "p.b"))

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.content == "First"
        assert session.text_queries == ["p.a"]

    def test_no_match_leaves_content_empty_without_error(self) -> None:
        url = listing_url("R1")
        session = _session(url, FakePage())
        selectors = SelectorConfig(content=("p.a", "p.b"), photos=("img",))

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.content == ""
        assert result.photos == []
        assert result.ok


class TestPhotoCascade:
    def test_falls_through_to_selector_with_matches(self) -> None:
        url = listing_url("R1")
        page = FakePage(
            attributes={
                "div.b img": ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"],
            }
        )
        selectors = SelectorConfig(photos=("div.a img", "div.b img"))

        result = extract_listing(_session(url, page), ExtractionTask(url=url, selectors=selectors))

        assert result.photos == ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]

    def test_relative_sources_are_dropped(self) -> None:
        url = listing_url("R1")
        page = FakePage(
            attributes={
                "div.a img": ["/static/placeholder.png", "data:image/png;base64,xx"],
                "div.b img": ["/img/3.jpg", "https://cdn.example.com/3.jpg"],
            }
        )
        selectors = SelectorConfig(photos=("div.a img", "div.b img"))

        result = extract_listing(_session(url, page), ExtractionTask(url=url, selectors=selectors))

        assert result.photos == ["https://cdn.example.com/3.jpg"]


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestNavigation:
    def test_navigation_failure_sets_error_and_skips_extraction(self, selectors: SelectorConfig) -> None:
        url = listing_url("R9")
        session = _session(url, FakePage(texts={"div.description": "never read"}), failures=1)

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.error is not None
        assert result.error.startswith("Failed to navigate:")
        assert result.reference == "R9"
        assert result.content == ""
        assert result.photos == []
        assert session.text_queries == []

    def test_generic_path_waits_for_network_idle(self, selectors: SelectorConfig) -> None:
        url = listing_url("R1")
        site = FakeSite(pages={url: FakePage()})

        extract_listing(
            FakeSession(site),
            ExtractionTask(url=url, selectors=selectors),
            timeouts=ExtractionTimeouts(navigation_seconds=10.0),
        )

        assert site.navigations == [(url, WAIT_NETWORK_IDLE, 10.0)]


# ---------------------------------------------------------------------------
# Carousel galleries and site profiles
# ---------------------------------------------------------------------------


class TestCarousel:
    @pytest.fixture(autouse=True)
    def _no_gallery_pause(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(extraction, "GALLERY_RENDER_PAUSE_SECONDS", 0.0)

    def test_gallery_is_opened_when_plain_photos_are_missing(self) -> None:
        url = listing_url("R1")
        page = FakePage(
            clickable={"button.gallery"},
            gallery={"div.mosaic img": ["https://cdn.example.com/full-1.jpg"]},
        )
        selectors = SelectorConfig(
            photos=("div.gallery img",),
            carousel=CarouselSelectors(thumbnail=("button.gallery",), full=("div.mosaic img",)),
        )

        result = extract_listing(_session(url, page), ExtractionTask(url=url, selectors=selectors))

        assert result.photos == ["https://cdn.example.com/full-1.jpg"]

    def test_click_failure_leaves_photos_empty(self) -> None:
        url = listing_url("R1")
        selectors = SelectorConfig(
            photos=("div.gallery img",),
            carousel=CarouselSelectors(thumbnail=("button.gallery",), full=("div.mosaic img",)),
        )

        result = extract_listing(_session(url, FakePage()), ExtractionTask(url=url, selectors=selectors))

        assert result.photos == []
        assert result.ok

    def test_readiness_selector_is_awaited_before_clicking(self) -> None:
        url = listing_url("R1")
        page = FakePage(
            clickable={"button.gallery"},
            ready={"div.buttons-active"},
            gallery={"div.mosaic img": ["https://cdn.example.com/full-1.jpg"]},
        )
        selectors = SelectorConfig(
            photos=("div.gallery img",),
            carousel=CarouselSelectors(
                thumbnail=("button.gallery",),
                full=("div.mosaic img",),
                ready=("div.buttons-active",),
            ),
        )
        session = _session(url, page)

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert session.actions == [("wait", "div.buttons-active"), ("click", "button.gallery")]
        assert result.photos == ["https://cdn.example.com/full-1.jpg"]

    def test_missing_readiness_selector_does_not_block_the_click(self) -> None:
        url = listing_url("R1")
        page = FakePage(
            clickable={"button.gallery"},
            gallery={"div.mosaic img": ["https://cdn.example.com/full-1.jpg"]},
        )
        selectors = SelectorConfig(
            carousel=CarouselSelectors(
                thumbnail=("button.gallery",),
                full=("div.mosaic img",),
                ready=("div.buttons-active",),
            ),
            content=("div.description",),
        )

        result = extract_listing(_session(url, page), ExtractionTask(url=url, selectors=selectors))

        assert result.photos == ["https://cdn.example.com/full-1.jpg"]
        assert result.ok


class TestSiteProfiles:
    def test_profile_selection_by_host(self) -> None:
        assert select_profile("https://www.bonavista.example/property/villa-7") is BONAVISTA_PROFILE
        assert select_profile(listing_url("R1")) is GENERIC_PROFILE

    def test_bonavista_uses_its_own_selectors_and_wait_condition(
        self,
        selectors: SelectorConfig,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(extraction, "GALLERY_RENDER_PAUSE_SECONDS", 0.0)
        url = "https://www.bonavista.example/property/villa-7"
        profile_selectors = BONAVISTA_PROFILE.selectors
        assert profile_selectors is not None
        page = FakePage(
            texts={profile_selectors.content[0]: "Villa with pool"},
            clickable={profile_selectors.carousel.thumbnail[0]},
            gallery={profile_selectors.carousel.full[0]: ["https://img.bonavista.example/1.jpg"]},
        )
        site = FakeSite(pages={url: page})
        session = FakeSession(site)

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.reference == "villa-7"
        assert result.content == "Villa with pool"
        assert result.photos == ["https://img.bonavista.example/1.jpg"]
        assert site.navigations == [(url, WAIT_LOAD, 6.0)]
        assert session.actions[0] == ("wait", profile_selectors.carousel.ready[0])

    def test_bonavista_navigation_failure_is_reported(self, selectors: SelectorConfig) -> None:
        url = "https://www.bonavista.example/property/villa-7"
        session = _session(url, FakePage(), failures=1)

        result = extract_listing(session, ExtractionTask(url=url, selectors=selectors))

        assert result.error is not None
