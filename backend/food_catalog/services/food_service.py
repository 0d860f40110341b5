"""
Food Catalog Backend: Food Lifecycle Service
=============================================

What:  Create, update and delete food records while keeping each record and
       its image file consistent.
How:   Each operation is a short sequence of awaited steps with a
       compensating file delete on failure:

    create:  validate ──▶ insert ──▶ done
                │            │
                ▼            ▼
          delete staged  delete staged

    update:  fetch ──▶ validate ──▶ update ──▶ delete OLD image
               │          │           │
               ▼          ▼           ▼
         delete staged  delete staged  delete staged (old kept)

    delete:  fetch ──▶ delete row ──▶ delete image (failure only logged)

Who:   Called by the /api/foods routes with a staged upload (or None).

Invariant:
    An old image is removed only after the record that replaced it has been
    committed; a staged image never outlives a failed operation.
"""

import logging
from typing import Any, Dict, Optional

from food_catalog.exceptions import NotFoundError, ValidationError
from food_catalog.repositories.food_repository import FoodRepository
from food_catalog.schemas.food import FoodInput, FoodPatch, FoodResponse
from food_catalog.services.file_store import FileStore, StagedFile
from food_catalog.services.parsing import (
    optional_text,
    parse_available,
    parse_price,
    require_text,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "price", "category")


class FoodService:
    """
    Lifecycle manager for food records.

    Args:
        repository: Persistence for Food rows (injected per request).
        file_store: Image storage used for compensating and post-commit
            deletes.
    """

    def __init__(self, repository: FoodRepository, file_store: FileStore):
        self.repository = repository
        self.file_store = file_store

    async def _discard(self, staged: Optional[StagedFile], reason: str) -> None:
        """Compensating delete of a staged upload; never raises."""
        if staged is None:
            return
        result = await self.file_store.delete(staged.filename)
        if result.error:
            logger.warning(
                "Could not clean up uploaded file %s after %s: %s",
                staged.filename, reason, result.error,
            )
        else:
            logger.info("Cleaned up uploaded file due to %s: %s", reason, staged.filename)

    # ── Validation ────────────────────────────────────────────────────────

    @staticmethod
    def _validate_new(data: FoodInput) -> Dict[str, Any]:
        missing = [
            field for field in REQUIRED_FIELDS
            if getattr(data, field) is None or str(getattr(data, field)).strip() == ""
        ]
        if missing:
            raise ValidationError(
                message="Name, price, and category are required",
                context={"missing": missing},
            )

        return {
            "name": require_text(data.name, "name"),
            "description": optional_text(data.description),
            "price": parse_price(data.price),
            "category": require_text(data.category, "category"),
            "available": True if data.available is None else parse_available(data.available),
        }

    @staticmethod
    def _validate_patch(patch: FoodPatch) -> Dict[str, Any]:
        supplied = patch.supplied()
        changes: Dict[str, Any] = {}
        if "name" in supplied:
            changes["name"] = require_text(supplied["name"], "name")
        if "description" in supplied:
            changes["description"] = optional_text(supplied["description"])
        if "price" in supplied:
            changes["price"] = parse_price(supplied["price"])
        if "category" in supplied:
            changes["category"] = require_text(supplied["category"], "category")
        if "available" in supplied:
            changes["available"] = parse_available(supplied["available"])
        return changes

    # ── Operations ────────────────────────────────────────────────────────

    async def create_food(
        self,
        data: FoodInput,
        staged: Optional[StagedFile] = None,
    ) -> FoodResponse:
        """
        Create a food record, claiming the staged image if one was uploaded.

        Raises:
            ValidationError: missing or invalid fields (staged file deleted)
            StoreError: insert failed (staged file deleted)
        """
        try:
            fields = self._validate_new(data)
        except ValidationError:
            await self._discard(staged, reason="validation error")
            raise

        fields["image_url"] = self.file_store.image_url(staged.filename) if staged else None

        try:
            food = await self.repository.create(fields)
        except Exception:
            await self._discard(staged, reason="database error")
            raise

        logger.info(
            "Created food %s (name=%r, category=%r, image=%s)",
            food.id, food.name, food.category, food.image_url or "none",
        )
        return FoodResponse.from_record(food)

    async def update_food(
        self,
        food_id: str,
        patch: FoodPatch,
        staged: Optional[StagedFile] = None,
    ) -> FoodResponse:
        """
        Apply a partial update, optionally replacing the image.

        Only the fields present in `patch` change. With a staged image the
        record points at the new file and the previous file is deleted once
        the update has been committed.

        Raises:
            NotFoundError: unknown id (staged file deleted)
            ValidationError: invalid supplied field (staged file deleted)
            StoreError: update failed (staged file deleted, old image kept)
        """
        try:
            existing = await self.repository.find_by_id(food_id)
            if existing is None:
                raise NotFoundError(resource="food", resource_id=food_id)
            changes = self._validate_patch(patch)
        except Exception as e:
            await self._discard(staged, reason=type(e).__name__)
            raise

        old_filename: Optional[str] = None
        if staged is not None:
            changes["image_url"] = self.file_store.image_url(staged.filename)
            old_filename = self.file_store.resolve_reference(existing.image_url)
            if existing.image_url and old_filename is None:
                logger.warning(
                    "Food %s image %r is outside the upload directory; leaving it in place",
                    food_id, existing.image_url,
                )

        try:
            updated = await self.repository.update(food_id, changes)
        except Exception:
            await self._discard(staged, reason="update error")
            raise

        if old_filename and old_filename != staged.filename:
            result = await self.file_store.delete(old_filename)
            if result:
                logger.info("Cleaned up old image: %s", old_filename)
            elif result.error:
                logger.warning("Old image %s left on disk: %s", old_filename, result.error)

        logger.info("Updated food %s (fields=%s)", food_id, sorted(changes))
        return FoodResponse.from_record(updated)

    async def delete_food(self, food_id: str) -> None:
        """
        Delete a food record and then its image.

        The record deletion is authoritative: if the image cannot be removed
        the file is left orphaned and the failure is only logged.

        Raises:
            NotFoundError: unknown id
            StoreError: delete failed (image untouched)
        """
        existing = await self.repository.find_by_id(food_id)
        if existing is None:
            raise NotFoundError(resource="food", resource_id=food_id)
        image_url = existing.image_url

        await self.repository.delete(food_id)
        logger.info("Deleted food %s", food_id)

        if not image_url:
            return

        filename = self.file_store.resolve_reference(image_url)
        if filename is None:
            logger.warning(
                "Food %s image %r is not a managed upload; nothing deleted",
                food_id, image_url,
            )
            return

        result = await self.file_store.delete(filename)
        if result.error:
            logger.warning("Image %s of deleted food %s left on disk: %s", filename, food_id, result.error)
