"""advertisements

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-17 09:41:03.552190

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

AD_POSITION = sa.Enum("header", "sidebar", "content", "footer", name="ad_position")
AD_STATUS = sa.Enum("active", "paused", "expired", "pending_approval", name="ad_status")


def upgrade() -> None:
    op.create_table(
        "advertisements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "business_id",
            sa.Integer(),
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(2048), nullable=False),
        sa.Column("link_url", sa.String(2048), nullable=True),
        sa.Column("position", AD_POSITION, nullable=False),
        sa.Column("status", AD_STATUS, nullable=False, server_default="pending_approval"),
        sa.Column("impressions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("clicks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_advertisements_business_id", "advertisements", ["business_id"])
    op.create_index("ix_advertisements_position", "advertisements", ["position"])
    op.create_index("ix_advertisements_status", "advertisements", ["status"])


def downgrade() -> None:
    op.drop_table("advertisements")

    bind = op.get_bind()
    for enum in (AD_STATUS, AD_POSITION):
        enum.drop(bind, checkfirst=True)
