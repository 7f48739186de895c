"""create farms table and membership tables

Revision ID: 003
Revises: 002
Create Date: 2025-06-03 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "farms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("size", sa.Float(), nullable=False),
        sa.Column("types", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.CheckConstraint("size >= 0", name="ck_farms_size_non_negative"),
    )
    op.create_index("ix_farms_id", "farms", ["id"], unique=False)
    op.create_index("ix_farms_owner_id", "farms", ["owner_id"], unique=False)

    for table_name in ("farm_managers", "farm_workers"):
        op.create_table(
            table_name,
            sa.Column("farm_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint("farm_id", "user_id"),
            sa.ForeignKeyConstraint(["farm_id"], ["farms.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )


def downgrade() -> None:
    op.drop_table("farm_workers")
    op.drop_table("farm_managers")
    op.drop_index("ix_farms_owner_id", table_name="farms")
    op.drop_index("ix_farms_id", table_name="farms")
    op.drop_table("farms")
