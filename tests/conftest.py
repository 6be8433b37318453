"""
Shared fakes for the listing scrape tests.

No browser and no database: `FakeSite` stands in for the target host,
`FakeDriver` for Playwright and `FakeStorage` for PostgreSQL.
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import pytest

from app.config import ScrapeSettings
from app.domain.listing_scrape import SelectorConfig
from app.scraping.driver import PageDriver, PageSession
from app.scraping.errors import (
    ListingNotFoundError,
    ListingStorageError,
    NavigationError,
    SessionOpenError,
)


@dataclass
class FakePage:
    texts: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, list[str]] = field(default_factory=dict)
    clickable: set[str] = field(default_factory=set)
    gallery: dict[str, list[str]] = field(default_factory=dict)
    ready: set[str] = field(default_factory=set)


class FakeSite:
    """
    Pages keyed by URL. `failures[url] = n` makes the first n loads time out.
    """

    def __init__(self, pages: dict[str, FakePage] | None = None, failures: dict[str, int] | None = None) -> None:
        self.pages = pages or {}
        self.failures = failures or {}
        self.navigations: list[tuple[str, str, float]] = []
        self.attempts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def load(self, url: str, wait_until: str, timeout_seconds: float) -> FakePage:
        with self._lock:
            self.attempts[url] += 1
            attempt = self.attempts[url]
            self.navigations.append((url, wait_until, timeout_seconds))
        if attempt <= self.failures.get(url, 0):
            raise NavigationError(f"Timeout {int(timeout_seconds * 1000)}ms exceeded")
        return self.pages.get(url, FakePage())


class FakeSession(PageSession):
    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.page: FakePage | None = None
        self.gallery_open = False
        self.closed = False
        self.text_queries: list[str] = []
        self.threads: set[int] = set()
        self.actions: list[tuple[str, str]] = []

    def navigate(self, url: str, *, wait_until: str, timeout_seconds: float) -> None:
        self.threads.add(threading.get_ident())
        self.page = None
        self.gallery_open = False
        self.page = self.site.load(url, wait_until, timeout_seconds)

    def first_text(self, selector: str, *, timeout_seconds: float) -> str:
        self.text_queries.append(selector)
        return self.page.texts.get(selector, "") if self.page else ""

    def attribute_values(self, selector: str, attribute: str) -> list[str]:
        if self.page is None or attribute != "src":
            return []
        source = self.page.gallery if self.gallery_open else self.page.attributes
        return list(source.get(selector, []))

    def wait_for(self, selector: str, *, timeout_seconds: float) -> bool:
        self.actions.append(("wait", selector))
        return self.page is not None and selector in self.page.ready

    def click(self, selector: str, *, timeout_seconds: float) -> bool:
        self.actions.append(("click", selector))
        if self.page is None or selector not in self.page.clickable:
            return False
        self.gallery_open = True
        return True

    def close(self) -> None:
        self.closed = True


class FakeDriver(PageDriver):
    def __init__(self, site: FakeSite, *, broken: bool = False) -> None:
        self.site = site
        self.broken = broken
        self.sessions: list[FakeSession] = []
        self._lock = threading.Lock()

    def open_session(self) -> FakeSession:
        if self.broken:
            raise SessionOpenError("Executable doesn't exist")
        session = FakeSession(self.site)
        with self._lock:
            self.sessions.append(session)
        return session


class FakeStorage:
    """
    Listings keyed by reference; unknown references are "not found".
    """

    def __init__(
        self,
        refs: Sequence[str] = (),
        *,
        broken_refs: Sequence[str] = (),
        crashing_refs: Sequence[str] = (),
        fail_recording: bool = False,
        crash_recording: bool = False,
        on_record: Callable[[], None] | None = None,
    ) -> None:
        self.refs = set(refs)
        self.broken_refs = set(broken_refs)
        self.crashing_refs = set(crashing_refs)
        self.fail_recording = fail_recording
        self.crash_recording = crash_recording
        self.on_record = on_record
        self.updates: list[tuple[str, str, list[str]]] = []
        self.recorded: list[list[str]] = []
        self._lock = threading.Lock()

    def update_listing(self, *, reference: str, content: str, photos: Sequence[str]) -> None:
        if reference in self.crashing_refs:
            raise RuntimeError("No database URL configured.")
        if reference in self.broken_refs:
            raise ListingStorageError(f"connection reset while updating {reference}")
        if reference not in self.refs:
            raise ListingNotFoundError(f"No listing found with ref {reference!r}")
        with self._lock:
            self.updates.append((reference, content, list(photos)))

    def record_failed_links(self, links: Sequence[str]) -> None:
        if self.on_record is not None:
            self.on_record()
        if self.crash_recording:
            raise RuntimeError("No database URL configured.")
        if self.fail_recording:
            raise ListingStorageError("scrapped_infos is locked")
        with self._lock:
            self.recorded.append(list(links))


REF_PATTERN = r"/listing/([^/?]+)"


def listing_url(ref: str) -> str:
    return f"https://agency.example.com/listing/{ref}"


def listing_page(text: str = "Sunny two bedroom flat", photos: int = 2) -> FakePage:
    return FakePage(
        texts={"div.description": text},
        attributes={"div.gallery img": [f"https://cdn.example.com/{text[:5]}-{i}.jpg" for i in range(photos)]},
    )


@pytest.fixture()
def selectors() -> SelectorConfig:
    return SelectorConfig(
        content=("div.description",),
        photos=("div.gallery img",),
        ref_pattern=REF_PATTERN,
    )


@pytest.fixture()
def fast_settings() -> ScrapeSettings:
    return ScrapeSettings(primary_delay_seconds=0.0, retry_delay_seconds=0.0)
