"""
app/schemas package marker.
"""

from app.schemas.listing_scrape import (
    BatchSummaryResponse,
    ScrapeAcceptedResponse,
    ScrapeBatchRequest,
    ScrapeStatusResponse,
    SelectorsPayload,
)

__all__ = [
    "BatchSummaryResponse",
    "ScrapeAcceptedResponse",
    "ScrapeBatchRequest",
    "ScrapeStatusResponse",
    "SelectorsPayload",
]
