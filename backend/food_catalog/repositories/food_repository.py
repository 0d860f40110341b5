"""
Food Catalog Backend: Food Repository
======================================

What:  CRUD access to the `Food` table. No business rules.
How:   Wraps one AsyncSession. Every mutation commits before returning, so
       a record handed back to the caller is durable. Nothing is read back
       after a commit: attributes survive it and every column default is
       applied client-side, so a StoreError always means nothing was written.
Who:   Constructed per request by the route dependencies and injected into
       FoodService / FoodQueries.

Errors:
    NotFoundError  update/delete of an unknown id
    StoreError     any SQLAlchemy or driver failure (session rolled back)
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from food_catalog.exceptions import NotFoundError, StoreError
from food_catalog.models.food import Food
from food_catalog.schemas.food import FoodFilter

logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for food records."""

    async def create(self, fields: Dict[str, Any]) -> Food:
        """Insert a record and return it."""

    async def find_by_id(self, food_id: str) -> Optional[Food]:
        """Return the record, or None when it does not exist."""

    async def find_many(self, food_filter: FoodFilter) -> List[Food]:
        """Return matching records, newest first."""

    async def update(self, food_id: str, fields: Dict[str, Any]) -> Food:
        """Apply the given fields and return the updated record."""

    async def delete(self, food_id: str) -> None:
        """Remove the record."""


class SQLAlchemyFoodRepository:
    """FoodRepository backed by an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _fail(self, operation: str, error: Exception) -> StoreError:
        await self.session.rollback()
        logger.error("Store error during %s: %s", operation, str(error), exc_info=True)
        return StoreError(
            message=f"Failed to {operation} food item",
            operation=operation,
            context={"error_type": type(error).__name__, "error": str(error)},
        )

    async def create(self, fields: Dict[str, Any]) -> Food:
        food = Food(**fields)
        try:
            self.session.add(food)
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise await self._fail("create", e)
        logger.debug("Inserted food %s", food.id)
        return food

    async def find_by_id(self, food_id: str) -> Optional[Food]:
        try:
            return await self.session.get(Food, food_id)
        except (SQLAlchemyError, OSError) as e:
            raise await self._fail("fetch", e)

    async def find_many(self, food_filter: FoodFilter) -> List[Food]:
        query = select(Food)
        if food_filter.category is not None:
            query = query.where(Food.category == food_filter.category)
        if food_filter.available is not None:
            query = query.where(Food.available == food_filter.available)
        query = query.order_by(desc(Food.created_at))

        try:
            result = await self.session.execute(query)
        except (SQLAlchemyError, OSError) as e:
            raise await self._fail("list", e)
        return list(result.scalars().all())

    async def update(self, food_id: str, fields: Dict[str, Any]) -> Food:
        food = await self.find_by_id(food_id)
        if food is None:
            raise NotFoundError(resource="food", resource_id=food_id)

        for name, value in fields.items():
            setattr(food, name, value)
        try:
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise await self._fail("update", e)
        return food

    async def delete(self, food_id: str) -> None:
        food = await self.find_by_id(food_id)
        if food is None:
            raise NotFoundError(resource="food", resource_id=food_id)

        try:
            await self.session.delete(food)
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise await self._fail("delete", e)
