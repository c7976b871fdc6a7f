"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- account (tier + credits)
- itinerary (owner, parent revision link, JSON payload)
- processed_event (payment events already applied)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_json = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create account and itinerary tables."""
    # account table
    op.create_table(
        "account",
        sa.Column("account_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("tier", sa.Text(), server_default="TRIAL", nullable=False),
        sa.Column("credits", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("credits >= 0", name="ck_account_credits_nonneg"),
    )

    # itinerary table
    op.create_table(
        "itinerary",
        sa.Column("itinerary_id", sa.Uuid(), primary_key=True),
        sa.Column("account_id", sa.Uuid(), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("data", _json, nullable=False),
        sa.Column("preferences", _json, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["itinerary.itinerary_id"]),
    )
    op.create_index(
        "idx_itinerary_account_created", "itinerary", ["account_id", "created_at"]
    )

    # processed_event table
    op.create_table(
        "processed_event",
        sa.Column("event_id", sa.Text(), primary_key=True),
        sa.Column("account_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("processed_event")
    op.drop_index("idx_itinerary_account_created", table_name="itinerary")
    op.drop_table("itinerary")
    op.drop_table("account")
