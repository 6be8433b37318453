"""
db/models/listing.py

Property listing record refreshed by scrape batches.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, RowTimestampsMixin


class Listing(Base, RowTimestampsMixin):
    """
    One listing as published by an agency.

    Scrape batches only write `content`, `photos` and `updated_at`, matched
    on `ref`; the remaining columns are owned by the listing importer.
    """

    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ref: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Agency listing reference, derived from the listing URL",
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    placeholder_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    area: Mapped[float | None] = mapped_column(Float, nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    parking: Mapped[int | None] = mapped_column(Integer, nullable=True)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    for_sale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    agency: Mapped[str | None] = mapped_column(String(255), nullable=True)
    agent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    photos: Mapped[list[str] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Ordered absolute photo URLs",
    )

    __table_args__ = (
        Index("ix_listings_ref", "ref"),
        Index("ix_listings_agency", "agency"),
    )
