"""
Exceptions raised by the listing scrape pipeline.
"""

from __future__ import annotations


class ListingScrapeError(Exception):
    """Base exception for listing scrape failures."""


class ScrapeValidationError(ListingScrapeError, ValueError):
    """Raised when a batch submission is rejected before scheduling."""


class AdmissionConflictError(ListingScrapeError):
    """Raised when a batch is submitted while another one is running."""


class NavigationError(ListingScrapeError):
    """Raised by a page session when a URL cannot be loaded in time."""


class SessionOpenError(ListingScrapeError):
    """Raised when a page driver cannot open a browsing session."""


class ListingPersistenceError(ListingScrapeError):
    """Base exception for persistence collaborator failures."""


class ListingNotFoundError(ListingPersistenceError):
    """Raised when no listing matches the extracted reference."""


class ScrapeInfoNotFoundError(ListingPersistenceError):
    """Raised when there is no scrape-info row to attach failed links to."""


class ListingStorageError(ListingPersistenceError):
    """Raised when the storage backend rejects a write."""
