"""feat: create fx_deals table

Revision ID: a3f1c2d4e5b6
Revises:
Create Date: 2026-10-19 09:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a3f1c2d4e5b6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "fx_deals",
        sa.Column("deal_id", sa.String(), nullable=False),
        sa.Column("from_currency", sa.String(length=3), nullable=False),
        sa.Column("to_currency", sa.String(length=3), nullable=False),
        sa.Column("deal_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deal_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("deal_id"),
    )
    op.create_index("ix_fx_deals_created_at", "fx_deals", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_fx_deals_created_at", table_name="fx_deals")
    op.drop_table("fx_deals")
