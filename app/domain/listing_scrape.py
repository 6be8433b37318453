"""
app/domain/listing_scrape.py

Domain models for listing scrape batches.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class CarouselSelectors:
    """
    Gallery trigger (thumbnail) and the images it reveals (full).

    `ready` elements are awaited before the thumbnail is clicked.
    """

    thumbnail: tuple[str, ...] = ()
    full: tuple[str, ...] = ()
    ready: tuple[str, ...] = ()

    @property
    def configured(self) -> bool:
        return bool(self.thumbnail) and bool(self.full)


@dataclass(frozen=True)
class SelectorConfig:
    """
    Selector cascades used to extract one listing page.

    Captured once per batch and never mutated while the batch runs.
    """

    content: tuple[str, ...] = ()
    photos: tuple[str, ...] = ()
    ref_pattern: str = ""
    carousel: CarouselSelectors = field(default_factory=CarouselSelectors)

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.photos


@dataclass(frozen=True)
class ExtractionTask:
    url: str
    selectors: SelectorConfig


@dataclass
class ExtractionResult:
    """
    Outcome of one extraction task. A set `error` means navigation failed.
    """

    url: str
    reference: str = ""
    content: str = ""
    photos: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchContext:
    """
    Everything one admitted batch needs, built at admission time.
    """

    name: str
    urls: tuple[str, ...]
    selectors: SelectorConfig
    batch_id: uuid.UUID = field(default_factory=uuid.uuid4)
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def tasks(self, urls: tuple[str, ...] | list[str] | None = None) -> list[ExtractionTask]:
        selected = self.urls if urls is None else urls
        return [ExtractionTask(url=url, selectors=self.selectors) for url in selected]


@dataclass(frozen=True)
class BatchSummary:
    """
    Final counts for one batch run.
    """

    batch_id: uuid.UUID
    name: str
    processed: int
    saved: int
    errors: int
    retried: int
    failed_links: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0
