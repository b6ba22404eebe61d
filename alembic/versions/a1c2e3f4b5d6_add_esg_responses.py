"""add_esg_responses

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "a1c2e3f4b5d6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "esg_responses",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
        ),
        sa.Column("financial_year", sa.Integer, nullable=False),
        # Raw answers + autoCalculated block
        sa.Column("data", postgresql.JSONB, nullable=False),
        sa.UniqueConstraint(
            "user_id", "financial_year", name="uq_esg_response_user_year"
        ),
    )
    op.create_index("ix_esg_responses_user_id", "esg_responses", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_esg_responses_user_id", table_name="esg_responses")
    op.drop_table("esg_responses")
