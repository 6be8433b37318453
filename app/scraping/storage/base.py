"""
Persistence collaborator interface for listing scrape batches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class ListingStorage(ABC):
    """
    Storage abstraction for listing refresh writes.
    """

    @abstractmethod
    def update_listing(self, *, reference: str, content: str, photos: Sequence[str]) -> None:
        """
        Persist scraped content for the listing matching `reference`.

        Raises ListingNotFoundError when nothing matched and
        ListingStorageError for any other failure.
        """

    @abstractmethod
    def record_failed_links(self, links: Sequence[str]) -> None:
        """
        Attach `links` to the most recent scrape-info record.
        """
