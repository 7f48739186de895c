"""create animals and health records tables

Revision ID: 004
Revises: 003
Create Date: 2025-06-04 11:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "animals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("farm_id", sa.Integer(), nullable=False),
        sa.Column("tag_number", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("breed", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="healthy"),
        sa.Column("mother_id", sa.Integer(), nullable=True),
        sa.Column("father_id", sa.Integer(), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("purchase_price", sa.Float(), nullable=True),
        sa.Column("purchase_supplier", sa.String(), nullable=True),
        sa.Column("sale_date", sa.Date(), nullable=True),
        sa.Column("sale_price", sa.Float(), nullable=True),
        sa.Column("sale_buyer", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["farm_id"], ["farms.id"]),
        sa.ForeignKeyConstraint(["mother_id"], ["animals.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["father_id"], ["animals.id"], ondelete="SET NULL"),
        sa.CheckConstraint("weight >= 0", name="ck_animals_weight_non_negative"),
    )
    op.create_index("ix_animals_id", "animals", ["id"], unique=False)
    op.create_index("ix_animals_farm_id", "animals", ["farm_id"], unique=False)
    op.create_index("ix_animals_tag_number", "animals", ["tag_number"], unique=True)

    op.create_table(
        "health_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("animal_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("veterinarian", sa.String(), nullable=True),
        sa.Column("next_due", sa.Date(), nullable=True),
        sa.Column("cost", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["animal_id"], ["animals.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_health_records_id", "health_records", ["id"], unique=False)
    op.create_index(
        "ix_health_records_animal_id", "health_records", ["animal_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_health_records_animal_id", table_name="health_records")
    op.drop_index("ix_health_records_id", table_name="health_records")
    op.drop_table("health_records")
    op.drop_index("ix_animals_tag_number", table_name="animals")
    op.drop_index("ix_animals_farm_id", table_name="animals")
    op.drop_index("ix_animals_id", table_name="animals")
    op.drop_table("animals")
