"""Create Food table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `Food` table holding catalog entries.
How:   Text primary key (UUID4 string), NUMERIC(10, 2) price, camelCase
       columns for the image URL and timestamps.

Rollback: downgrade() drops the table and every catalog entry with it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the Food table with its indexes. See food_catalog/models/food.py."""
    op.create_table(
        "Food",

        # Opaque string id, generated by the application
        sa.Column("id", sa.String(36), nullable=False),

        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),

        sa.Column(
            "price",
            sa.Numeric(10, 2),
            nullable=False,
            comment="Non-negative, two decimal places",
        ),

        sa.Column("category", sa.String(100), nullable=False),

        # Public URL under /api/uploads/foods/, NULL when no image
        sa.Column("imageUrl", sa.String(512), nullable=True),

        sa.Column(
            "available",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),

        sa.Column(
            "createdAt",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updatedAt",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("id"),
    )

    # Listing is newest-first
    op.create_index(
        "idx_food_created_at",
        "Food",
        [sa.text('"createdAt" DESC')],
    )
    op.create_index("ix_Food_category", "Food", ["category"])


def downgrade() -> None:
    """Drop the Food table. All catalog data is lost."""
    op.drop_index("ix_Food_category", table_name="Food")
    op.drop_index("idx_food_created_at", table_name="Food")
    op.drop_table("Food")
