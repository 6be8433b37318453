"""
app/services package marker.
"""

from app.services.listing_scrape_service import (
    ListingScrapeService,
    get_listing_scrape_service,
)

__all__ = [
    "ListingScrapeService",
    "get_listing_scrape_service",
]
