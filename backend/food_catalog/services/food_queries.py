"""
Food Catalog Backend: Food Queries
===================================

What:  Read side of the catalog: filtered listing and lookup by id.
Who:   GET /api/foods and GET /api/foods/{id}.
"""

import logging
from typing import List, Optional

from food_catalog.exceptions import NotFoundError
from food_catalog.repositories.food_repository import FoodRepository
from food_catalog.schemas.food import FoodFilter, FoodResponse
from food_catalog.services.parsing import coerce_available_filter

logger = logging.getLogger(__name__)


def build_filter(category: Optional[str] = None, available: Optional[str] = None) -> FoodFilter:
    """
    Translate query-string values into a FoodFilter.

    An empty category imposes no constraint; `available` follows
    coerce_available_filter ("true" → True, anything else → False).
    """
    return FoodFilter(
        category=category or None,
        available=coerce_available_filter(available),
    )


class FoodQueries:
    """Read-only façade over the food repository."""

    def __init__(self, repository: FoodRepository):
        self.repository = repository

    async def list_foods(
        self,
        category: Optional[str] = None,
        available: Optional[str] = None,
    ) -> List[FoodResponse]:
        """Matching foods, newest first. Empty list when nothing matches."""
        food_filter = build_filter(category, available)
        foods = await self.repository.find_many(food_filter)
        logger.debug("Listed %d foods (filter=%s)", len(foods), food_filter.model_dump())
        return [FoodResponse.from_record(food) for food in foods]

    async def get_food(self, food_id: str) -> FoodResponse:
        """
        Raises:
            NotFoundError: unknown id
        """
        food = await self.repository.find_by_id(food_id)
        if food is None:
            raise NotFoundError(resource="food", resource_id=food_id)
        return FoodResponse.from_record(food)
