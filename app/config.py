"""
app/config.py

Scrape batch settings read from the environment.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeVar

from db.config import load_env_files

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _parse_bool(raw: str) -> bool:
    return raw.lower() in _TRUE_VALUES


def _read_env(name: str, parse: Callable[[str], T], default: T) -> T:
    """
    Parse `name` from the environment; unset, blank or unparsable values give `default`.
    """

    _load_env_once()
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ScrapeSettings:
    """
    Pool sizes, throttling and timeouts for listing scrape batches.

    Retry defaults are smaller and slower than the primary ones.
    """

    primary_workers: int = 10
    primary_delay_seconds: float = 0.1
    retry_workers: int = 5
    retry_delay_seconds: float = 0.2
    navigation_timeout_seconds: float = 10.0
    selector_timeout_seconds: float = 3.0
    click_timeout_seconds: float = 10.0
    headless: bool = True

    @classmethod
    def from_env(cls) -> "ScrapeSettings":
        defaults = cls()
        return cls(
            primary_workers=max(1, _read_env("SCRAPE_PRIMARY_WORKERS", int, defaults.primary_workers)),
            primary_delay_seconds=max(
                0.0, _read_env("SCRAPE_PRIMARY_DELAY_SECONDS", float, defaults.primary_delay_seconds)
            ),
            retry_workers=max(1, _read_env("SCRAPE_RETRY_WORKERS", int, defaults.retry_workers)),
            retry_delay_seconds=max(
                0.0, _read_env("SCRAPE_RETRY_DELAY_SECONDS", float, defaults.retry_delay_seconds)
            ),
            navigation_timeout_seconds=max(
                1.0,
                _read_env("SCRAPE_NAVIGATION_TIMEOUT_SECONDS", float, defaults.navigation_timeout_seconds),
            ),
            selector_timeout_seconds=max(
                0.1,
                _read_env("SCRAPE_SELECTOR_TIMEOUT_SECONDS", float, defaults.selector_timeout_seconds),
            ),
            click_timeout_seconds=max(
                0.1,
                _read_env("SCRAPE_CLICK_TIMEOUT_SECONDS", float, defaults.click_timeout_seconds),
            ),
            headless=_read_env("SCRAPE_HEADLESS", _parse_bool, defaults.headless),
        )


@lru_cache(maxsize=1)
def get_scrape_settings() -> ScrapeSettings:
    """
    Return cached scrape settings from environment variables.
    """

    return ScrapeSettings.from_env()
