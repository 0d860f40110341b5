"""
Food Catalog Backend: Food SQLAlchemy Model
============================================

What:  ORM model for the `Food` table.
Who:   Read and written by FoodRepository; tracked by Alembic.

Column naming:
    The table and its timestamp/image columns keep their camelCase names
    (`Food`, `imageUrl`, `createdAt`, `updatedAt`) so the schema matches the
    records exposed over HTTP. Python attributes are snake_case.

Index on createdAt DESC:
    Listing is always newest-first.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from food_catalog.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Food(Base):
    """
    A food catalog entry.

    Lifecycle:
        1. Created by FoodService.create_food (optionally with an image)
        2. Updated by FoodService.update_food (partial; may swap the image)
        3. Deleted by FoodService.delete_food (image file removed afterwards)

    Invariant: image_url is either None or points at a file in the upload
    directory. FoodService is the only writer that keeps it that way.
    """

    __tablename__ = "Food"

    # Opaque text id: a UUID4 rendered as a string. Text rather than a native
    # UUID column so any id arriving on the URL can be looked up as-is.
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    # NUMERIC(10, 2): cents precision, max 99,999,999.99
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Free-form; no enumeration
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Public URL of the image, e.g. /api/uploads/foods/3f2a...c9.png
    image_url: Mapped[str | None] = mapped_column(
        "imageUrl",
        String(512),
        nullable=True,
        default=None,
    )

    available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_food_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Food(id={self.id}, name='{self.name}', category='{self.category}', "
            f"available={self.available})>"
        )
