"""
app/schemas/listing_scrape.py

Request and response schemas for listing scrape batches.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.listing_scrape import BatchSummary, CarouselSelectors, SelectorConfig


class CarouselSelectorsPayload(BaseModel):
    thumbnail: list[str] = Field(default_factory=list)
    full: list[str] = Field(default_factory=list)
    ready: list[str] = Field(default_factory=list)


class SelectorsPayload(BaseModel):
    """
    Selector cascades supplied with each batch.
    """

    ref: str = ""
    content: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    carousel_photos: CarouselSelectorsPayload = Field(default_factory=CarouselSelectorsPayload)

    def to_domain(self) -> SelectorConfig:
        return SelectorConfig(
            content=_clean(self.content),
            photos=_clean(self.photos),
            ref_pattern=self.ref.strip(),
            carousel=CarouselSelectors(
                thumbnail=_clean(self.carousel_photos.thumbnail),
                full=_clean(self.carousel_photos.full),
                ready=_clean(self.carousel_photos.ready),
            ),
        )


class ScrapeBatchRequest(BaseModel):
    name: str = ""
    urls: list[str] = Field(default_factory=list)
    selectors: SelectorsPayload = Field(default_factory=SelectorsPayload)


class ScrapeAcceptedResponse(BaseModel):
    status: str = "accepted"
    batch_id: UUID
    name: str
    total_urls: int = Field(..., ge=0)


class BatchSummaryResponse(BaseModel):
    batch_id: UUID
    name: str
    processed: int = Field(..., ge=0)
    saved: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)
    retried: int = Field(..., ge=0)
    failed_links: list[str] = Field(default_factory=list)
    elapsed_seconds: float = Field(..., ge=0)

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> "BatchSummaryResponse":
        return cls(
            batch_id=summary.batch_id,
            name=summary.name,
            processed=summary.processed,
            saved=summary.saved,
            errors=summary.errors,
            retried=summary.retried,
            failed_links=list(summary.failed_links),
            elapsed_seconds=summary.elapsed_seconds,
        )


class ScrapeStatusResponse(BaseModel):
    running: bool
    last_batch: BatchSummaryResponse | None = None


def _clean(selectors: list[str]) -> tuple[str, ...]:
    return tuple(item.strip() for item in selectors if item and item.strip())
