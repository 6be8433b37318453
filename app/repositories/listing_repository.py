"""
app/repositories/listing_repository.py

Persistence for listing refreshes and scrape-info bookkeeping.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from db.models.listing import Listing
from db.models.scrape_info import ScrapeInfo


class ListingRepository:
    """
    Targeted UPDATEs keyed on the listing reference.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def update_content_by_ref(
        self,
        *,
        ref: str,
        content: str,
        photos: Sequence[str],
    ) -> int:
        """
        Overwrite content and photos for every listing with `ref`; returns affected rows.
        """

        stmt = (
            update(Listing)
            .where(Listing.ref == ref)
            .values(
                content=content,
                photos=list(photos),
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount or 0


class ScrapeInfoRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_latest(self) -> ScrapeInfo | None:
        stmt = select(ScrapeInfo).order_by(ScrapeInfo.created_at.desc()).limit(1)
        return self._session.scalars(stmt).first()

    def set_links_failed(self, *, scrape_info_id: int, links: Sequence[str]) -> int:
        stmt = (
            update(ScrapeInfo)
            .where(ScrapeInfo.id == scrape_info_id)
            .values(links_failed=list(links), updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount or 0
