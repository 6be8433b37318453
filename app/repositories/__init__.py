"""
app/repositories package marker.
"""

from app.repositories.listing_repository import ListingRepository, ScrapeInfoRepository

__all__ = [
    "ListingRepository",
    "ScrapeInfoRepository",
]
