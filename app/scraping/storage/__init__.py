"""
Storage layer exports.
"""

from app.scraping.storage.base import ListingStorage
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyListingStorage

__all__ = ["ListingStorage", "SQLAlchemyListingStorage"]
