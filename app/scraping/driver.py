"""
Page rendering capability used by extraction workers.

The pipeline only depends on `PageDriver` / `PageSession`; the Playwright
implementation below is the production default.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from app.scraping.errors import NavigationError, SessionOpenError
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

WAIT_NETWORK_IDLE = "networkidle"
WAIT_LOAD = "load"


class PageSession(ABC):
    """
    One isolated browsing session (own cookies and storage) with a single page.
    """

    @abstractmethod
    def navigate(self, url: str, *, wait_until: str, timeout_seconds: float) -> None:
        """
        Load `url`. Raises NavigationError when the page does not load in time.
        """

    @abstractmethod
    def first_text(self, selector: str, *, timeout_seconds: float) -> str:
        """
        Inner text of the first element matching `selector`, or "" when absent.
        """

    @abstractmethod
    def attribute_values(self, selector: str, attribute: str) -> list[str]:
        """
        Attribute value of every element matching `selector`, in document order.
        """

    @abstractmethod
    def wait_for(self, selector: str, *, timeout_seconds: float) -> bool:
        """
        Wait until an element matching `selector` is visible. Returns False on timeout.
        """

    @abstractmethod
    def click(self, selector: str, *, timeout_seconds: float) -> bool:
        """
        Click the first element matching `selector`. Returns False on failure.
        """

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> "PageSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PageDriver(ABC):
    """
    Factory for isolated page sessions. Called once per worker, on its thread.
    """

    @abstractmethod
    def open_session(self) -> PageSession:
        """
        Open a new session. Raises SessionOpenError when the browser is unavailable.
        """


class PlaywrightPageSession(PageSession):
    def __init__(self, *, playwright, browser, context, page) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page

    def navigate(self, url: str, *, wait_until: str, timeout_seconds: float) -> None:
        try:
            self._page.goto(url, wait_until=wait_until, timeout=timeout_seconds * 1000)
        except PlaywrightError as exc:
            raise NavigationError(str(exc)) from exc

    def first_text(self, selector: str, *, timeout_seconds: float) -> str:
        try:
            return self._page.locator(selector).first.inner_text(timeout=timeout_seconds * 1000)
        except PlaywrightError:
            return ""

    def attribute_values(self, selector: str, attribute: str) -> list[str]:
        try:
            locator = self._page.locator(selector)
            count = locator.count()
        except PlaywrightError:
            return []

        values: list[str] = []
        for index in range(count):
            try:
                value = locator.nth(index).get_attribute(attribute)
            except PlaywrightError:
                continue
            if value:
                values.append(value)
        return values

    def wait_for(self, selector: str, *, timeout_seconds: float) -> bool:
        try:
            self._page.locator(selector).first.wait_for(timeout=timeout_seconds * 1000)
        except PlaywrightError:
            return False
        return True

    def click(self, selector: str, *, timeout_seconds: float) -> bool:
        try:
            self._page.locator(selector).first.click(timeout=timeout_seconds * 1000)
        except PlaywrightError as exc:
            logger.debug("Click failed selector=%s error=%s", selector, exc)
            return False
        return True

    def close(self) -> None:
        for closer in (self._context.close, self._browser.close, self._playwright.stop):
            try:
                closer()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Error while closing browser session: %s", exc)


class PlaywrightPageDriver(PageDriver):
    """
    Headless Chromium driver.

    The sync Playwright API is bound to the thread that started it, so every
    session gets its own Playwright instance and browser.
    """

    def __init__(self, *, headless: bool = True) -> None:
        self._headless = headless

    def open_session(self) -> PlaywrightPageSession:
        playwright = None
        try:
            playwright = sync_playwright().start()
            browser = playwright.chromium.launch(headless=self._headless)
            context = browser.new_context()
            page = context.new_page()
        except PlaywrightError as exc:
            if playwright is not None:
                playwright.stop()
            log_event(logger, logging.ERROR, "browser_session_failed", error=str(exc))
            raise SessionOpenError(str(exc)) from exc

        return PlaywrightPageSession(
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
        )
