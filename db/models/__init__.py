"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.listing import Listing
from db.models.scrape_info import ScrapeInfo

__all__ = [
    "Listing",
    "ScrapeInfo",
]
