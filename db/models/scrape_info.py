"""
db/models/scrape_info.py

Per-run bookkeeping written by the listing importer and the scrape batches.
"""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, RowTimestampsMixin


class ScrapeInfo(Base, RowTimestampsMixin):
    __tablename__ = "scrapped_infos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_listings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    links_failed: Mapped[list[str] | None] = mapped_column(
        ARRAY(Text),
        nullable=True,
        comment="URLs that still failed at the end of the last scrape batch",
    )

    __table_args__ = (Index("ix_scrapped_infos_created_at", "created_at"),)
