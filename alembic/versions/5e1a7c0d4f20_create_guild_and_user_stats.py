"""Create guild_stats and user_stats

Revision ID: 5e1a7c0d4f20
Revises:
Create Date: 2026-10-18 16:20:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5e1a7c0d4f20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "guild_stats",
        sa.Column("guild_id", sa.BigInteger(), autoincrement=False, primary_key=True),
        sa.Column("utc_offset_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_weed_times", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_weed_crimes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_chain", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "user_stats",
        sa.Column("user_id", sa.BigInteger(), autoincrement=False, primary_key=True),
        sa.Column("total_weed_times", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_weed_crimes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("chains_started", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("chains_broken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("user_stats")
    op.drop_table("guild_stats")
