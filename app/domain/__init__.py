"""
app/domain package marker.
"""

from app.domain.listing_scrape import (
    BatchContext,
    BatchSummary,
    CarouselSelectors,
    ExtractionResult,
    ExtractionTask,
    SelectorConfig,
)

__all__ = [
    "BatchContext",
    "BatchSummary",
    "CarouselSelectors",
    "ExtractionResult",
    "ExtractionTask",
    "SelectorConfig",
]
