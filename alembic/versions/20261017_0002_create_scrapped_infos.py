"""create scrapped_infos table

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 09:05:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scrapped_infos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("agency", sa.String(length=255), nullable=True),
        sa.Column("total_listings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_pages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("links_failed", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scrapped_infos_created_at", "scrapped_infos", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_scrapped_infos_created_at", table_name="scrapped_infos")
    op.drop_table("scrapped_infos")
