"""
SQLAlchemy-backed storage implementation for listing refreshes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.listing_repository import ListingRepository, ScrapeInfoRepository
from app.scraping.errors import ListingNotFoundError, ListingStorageError, ScrapeInfoNotFoundError
from app.scraping.storage.base import ListingStorage


class SQLAlchemyListingStorage(ListingStorage):
    """
    Opens one short-lived session per write.

    Writes arrive from the batch thread while request handlers use their own
    sessions, so no session is shared across threads.
    """

    def __init__(self, *, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def update_listing(self, *, reference: str, content: str, photos: Sequence[str]) -> None:
        with self._session_factory() as session:
            try:
                affected = ListingRepository(session).update_content_by_ref(
                    ref=reference,
                    content=content,
                    photos=photos,
                )
                if affected == 0:
                    session.rollback()
                    raise ListingNotFoundError(f"No listing found with ref {reference!r}")
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise ListingStorageError(f"Failed to update listing {reference!r}: {exc}") from exc

    def record_failed_links(self, links: Sequence[str]) -> None:
        with self._session_factory() as session:
            try:
                repository = ScrapeInfoRepository(session)
                latest = repository.get_latest()
                if latest is None:
                    raise ScrapeInfoNotFoundError("No scrape info record to attach failed links to")
                affected = repository.set_links_failed(scrape_info_id=latest.id, links=links)
                if affected == 0:
                    session.rollback()
                    raise ScrapeInfoNotFoundError(f"No scrape info found with id {latest.id}")
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise ListingStorageError(f"Failed to record failed links: {exc}") from exc
