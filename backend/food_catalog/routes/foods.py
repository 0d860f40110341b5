"""
Food Catalog Backend: Food Route Handlers
==========================================

What:  /api/foods CRUD endpoints.
How:   Form fields are collected into FoodInput/FoodPatch, the optional
       `image` field is staged by the upload dependency, and the work is
       delegated to FoodService (writes) or FoodQueries (reads).

Bodies are multipart/form-data (required when sending an image) or
application/x-www-form-urlencoded. All fields arrive as strings; parsing
happens in the service so that a rejected request can still clean up its
staged image.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_catalog.database import get_db_session
from food_catalog.middleware.upload import staged_image
from food_catalog.repositories.food_repository import SQLAlchemyFoodRepository
from food_catalog.schemas.food import (
    DeleteResponse,
    ErrorResponse,
    FoodEnvelope,
    FoodInput,
    FoodListEnvelope,
    FoodPatch,
)
from food_catalog.services.file_store import FileStore, StagedFile, get_file_store
from food_catalog.services.food_queries import FoodQueries
from food_catalog.services.food_service import FoodService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Foods"])


# ── Dependencies ──────────────────────────────────────────────────────────

def get_food_service(
    db: AsyncSession = Depends(get_db_session),
    store: FileStore = Depends(get_file_store),
) -> FoodService:
    return FoodService(repository=SQLAlchemyFoodRepository(db), file_store=store)


def get_food_queries(db: AsyncSession = Depends(get_db_session)) -> FoodQueries:
    return FoodQueries(repository=SQLAlchemyFoodRepository(db))


def _supplied(**fields: Optional[str]) -> dict:
    """Form values the client sent with a non-empty value."""
    return {name: value for name, value in fields.items() if value is not None}


async def _present(request: Request, **fields: Optional[str]) -> dict:
    """
    Form values whose key the client sent, empty ones included.

    FastAPI turns an empty form value into None, so presence is read from
    the raw form: `name=` on PUT is a blank name, not an omitted one.
    """
    form = await request.form()
    return {
        name: "" if value is None else value
        for name, value in fields.items()
        if name in form
    }


# ── Endpoints ─────────────────────────────────────────────────────────────

@router.post(
    "/foods",
    status_code=201,
    response_model=FoodEnvelope,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Create a food item with an optional image",
)
async def create_food(
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    available: Optional[str] = Form(default=None),
    staged: Optional[StagedFile] = Depends(staged_image),
    service: FoodService = Depends(get_food_service),
) -> FoodEnvelope:
    data = FoodInput(**_supplied(
        name=name, description=description, price=price,
        category=category, available=available,
    ))
    food = await service.create_food(data, staged)
    return FoodEnvelope(data=food, message="Food item created successfully")


@router.get(
    "/foods",
    response_model=FoodListEnvelope,
    summary="List food items",
    description="Optional filters: exact `category`, and `available` (\"true\" or anything else).",
)
async def list_foods(
    category: Optional[str] = Query(default=None),
    available: Optional[str] = Query(default=None),
    queries: FoodQueries = Depends(get_food_queries),
) -> FoodListEnvelope:
    foods = await queries.list_foods(category=category, available=available)
    return FoodListEnvelope(data=foods, count=len(foods))


@router.get(
    "/foods/{food_id}",
    response_model=FoodEnvelope,
    responses={404: {"description": "Food item not found", "model": ErrorResponse}},
    summary="Get a single food item",
)
async def get_food(
    food_id: str,
    queries: FoodQueries = Depends(get_food_queries),
) -> FoodEnvelope:
    food = await queries.get_food(food_id)
    return FoodEnvelope(data=food)


@router.put(
    "/foods/{food_id}",
    response_model=FoodEnvelope,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        404: {"description": "Food item not found", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Update a food item, optionally replacing its image",
    description=(
        "Only the fields sent are changed. An empty `description` clears it; "
        "an empty `name` or `category` is rejected."
    ),
)
async def update_food(
    food_id: str,
    request: Request,
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    available: Optional[str] = Form(default=None),
    staged: Optional[StagedFile] = Depends(staged_image),
    service: FoodService = Depends(get_food_service),
) -> FoodEnvelope:
    patch = FoodPatch(**await _present(
        request,
        name=name, description=description, price=price,
        category=category, available=available,
    ))
    food = await service.update_food(food_id, patch, staged)
    return FoodEnvelope(data=food, message="Food item updated successfully")


@router.delete(
    "/foods/{food_id}",
    response_model=DeleteResponse,
    responses={404: {"description": "Food item not found", "model": ErrorResponse}},
    summary="Delete a food item and its image",
)
async def delete_food(
    food_id: str,
    service: FoodService = Depends(get_food_service),
) -> DeleteResponse:
    await service.delete_food(food_id)
    return DeleteResponse()
