"""
Food Catalog Backend: Food Lifecycle Service Unit Tests
=======================================================

What:  Tests for FoodService create/update/delete, in particular that the
       image files on disk always match the records.
How:   InMemoryFoodRepository (with injected failures) plus a real
       FileStore in tmp_path, so every assertion about files is made
       against the filesystem.

Test Strategy:
    ✅ Happy paths with and without images
    ✅ Defaults and parsing on create
    ✅ Staged image removed on validation, not-found and store failures
    ✅ Old image removed only after a successful update
    ✅ Delete removes the record first, then its image
    ✅ Cleanup failures never fail the operation
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from food_catalog.exceptions import NotFoundError, ParseError, StoreError, ValidationError
from food_catalog.schemas.food import FoodInput, FoodPatch
from food_catalog.services.file_store import CleanupResult


def _files(upload_dir):
    return sorted(p.name for p in upload_dir.iterdir())


# ══════════════════════════════════════════════════════════════════════════
# Create
# ══════════════════════════════════════════════════════════════════════════


class TestCreateFood:

    @pytest.mark.asyncio
    async def test_create_without_image(self, food_service, memory_repository):
        """Required fields only: description empty, available defaults to true."""
        food = await food_service.create_food(
            FoodInput(name="Pizza", price="9.99", category="main")
        )

        assert food.name == "Pizza"
        assert food.price == 9.99
        assert food.category == "main"
        assert food.description is None
        assert food.image_url is None
        assert food.available is True
        assert food.id in memory_repository.foods

    @pytest.mark.asyncio
    async def test_create_with_image(self, food_service, file_store, upload_dir, png_bytes):
        """The record points at the staged file under the canonical prefix."""
        staged = await file_store.stage("burger.png", png_bytes)

        food = await food_service.create_food(
            FoodInput(name="Burger", price="5.50", category="main"), staged
        )

        assert food.image_url == f"/api/uploads/foods/{staged.filename}"
        assert _files(upload_dir) == [staged.filename]

    @pytest.mark.asyncio
    async def test_create_parses_available(self, food_service):
        food = await food_service.create_food(
            FoodInput(name="Soup", price="4", category="starter", available="false")
        )
        assert food.available is False

    @pytest.mark.asyncio
    async def test_create_trims_and_rounds(self, food_service, memory_repository):
        food = await food_service.create_food(
            FoodInput(name="  Salad ", price=" 7.125 ", category=" side ")
        )

        stored = memory_repository.foods[food.id]
        assert stored.name == "Salad"
        assert stored.category == "side"
        assert stored.price == Decimal("7.13")

    @pytest.mark.asyncio
    async def test_create_blank_description_stored_as_none(self, food_service):
        food = await food_service.create_food(
            FoodInput(name="Pizza", price="1", category="main", description="")
        )
        assert food.description is None

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, food_service, memory_repository):
        """Missing required fields are listed in the error context."""
        with pytest.raises(ValidationError, match="Name, price, and category are required") as exc_info:
            await food_service.create_food(FoodInput(name="Pizza"))

        assert exc_info.value.context["missing"] == ["price", "category"]
        assert memory_repository.foods == {}

    @pytest.mark.asyncio
    async def test_create_blank_field_counts_as_missing(self, food_service):
        with pytest.raises(ValidationError) as exc_info:
            await food_service.create_food(FoodInput(name="   ", price="1", category="main"))
        assert exc_info.value.context["missing"] == ["name"]

    @pytest.mark.asyncio
    async def test_validation_error_discards_staged(self, food_service, file_store, upload_dir, png_bytes):
        """A rejected create leaves no image behind."""
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(ValidationError):
            await food_service.create_food(FoodInput(name="Pizza", category="main"), staged)

        assert _files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_invalid_price_discards_staged(self, food_service, file_store, upload_dir, png_bytes):
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(ParseError):
            await food_service.create_food(
                FoodInput(name="Pizza", price="abc", category="main"), staged
            )

        assert _files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_invalid_available_rejected(self, food_service):
        with pytest.raises(ParseError):
            await food_service.create_food(
                FoodInput(name="Pizza", price="1", category="main", available="maybe")
            )

    @pytest.mark.asyncio
    async def test_store_failure_discards_staged(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        """If the insert fails, the staged image is deleted and the error propagates."""
        memory_repository.fail_on.add("create")
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(StoreError) as exc_info:
            await food_service.create_food(
                FoodInput(name="Pizza", price="9.99", category="main"), staged
            )

        assert exc_info.value.operation == "create"
        assert _files(upload_dir) == []
        assert memory_repository.foods == {}

    @pytest.mark.asyncio
    async def test_cleanup_failure_keeps_original_error(
        self, food_service, memory_repository, file_store, png_bytes
    ):
        """A failing compensating delete is logged; the caller still sees StoreError."""
        memory_repository.fail_on.add("create")
        staged = await file_store.stage("a.png", png_bytes)

        with patch.object(
            file_store, "delete",
            AsyncMock(return_value=CleanupResult(staged.filename, False, "Permission denied")),
        ):
            with pytest.raises(StoreError):
                await food_service.create_food(
                    FoodInput(name="Pizza", price="9.99", category="main"), staged
                )


# ══════════════════════════════════════════════════════════════════════════
# Update
# ══════════════════════════════════════════════════════════════════════════


class TestUpdateFood:

    @pytest.mark.asyncio
    async def test_partial_update(self, food_service, memory_repository):
        """Only supplied fields change."""
        existing = memory_repository.seed(name="Pizza", description="Cheesy", price=Decimal("9.99"))

        food = await food_service.update_food(existing.id, FoodPatch(price="12.50"))

        assert food.price == 12.5
        assert food.name == "Pizza"
        assert food.description == "Cheesy"
        assert food.category == "main"

    @pytest.mark.asyncio
    async def test_update_available(self, food_service, memory_repository):
        existing = memory_repository.seed()

        food = await food_service.update_food(existing.id, FoodPatch(available="FALSE"))

        assert food.available is False

    @pytest.mark.asyncio
    async def test_explicit_none_clears_description(self, food_service, memory_repository):
        existing = memory_repository.seed(description="Cheesy")

        food = await food_service.update_food(existing.id, FoodPatch(description=None))

        assert food.description is None

    @pytest.mark.asyncio
    async def test_blank_description_clears_it(self, food_service, memory_repository):
        existing = memory_repository.seed(description="Cheesy")

        food = await food_service.update_food(existing.id, FoodPatch(description="  "))

        assert food.description is None

    @pytest.mark.asyncio
    async def test_empty_patch_changes_nothing(self, food_service, memory_repository):
        existing = memory_repository.seed(name="Pizza")

        food = await food_service.update_food(existing.id, FoodPatch())

        assert food.name == "Pizza"

    @pytest.mark.asyncio
    async def test_replace_image_deletes_old(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        """After a successful update only the new image remains."""
        old = await file_store.stage("old.png", png_bytes)
        existing = memory_repository.seed(image_url=file_store.image_url(old.filename))
        new = await file_store.stage("new.png", png_bytes)

        food = await food_service.update_food(existing.id, FoodPatch(), new)

        assert food.image_url == f"/api/uploads/foods/{new.filename}"
        assert _files(upload_dir) == [new.filename]

    @pytest.mark.asyncio
    async def test_replace_legacy_image(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        """Records with a legacy /api/uploads/ URL still get their old file removed."""
        old = await file_store.stage("old.png", png_bytes)
        existing = memory_repository.seed(image_url=f"/api/uploads/{old.filename}")
        new = await file_store.stage("new.png", png_bytes)

        await food_service.update_food(existing.id, FoodPatch(), new)

        assert _files(upload_dir) == [new.filename]

    @pytest.mark.asyncio
    async def test_foreign_image_left_alone(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        existing = memory_repository.seed(image_url="https://cdn.example.com/pizza.png")
        new = await file_store.stage("new.png", png_bytes)

        with patch.object(file_store, "delete", wraps=file_store.delete) as delete:
            food = await food_service.update_food(existing.id, FoodPatch(), new)

        delete.assert_not_called()
        assert food.image_url == file_store.image_url(new.filename)

    @pytest.mark.asyncio
    async def test_missing_old_file_is_fine(
        self, food_service, memory_repository, file_store, png_bytes
    ):
        """The old image may already be gone; the update still succeeds."""
        existing = memory_repository.seed(image_url="/api/uploads/foods/vanished.png")
        new = await file_store.stage("new.png", png_bytes)

        food = await food_service.update_food(existing.id, FoodPatch(name="Calzone"), new)

        assert food.name == "Calzone"

    @pytest.mark.asyncio
    async def test_not_found_discards_staged(self, food_service, file_store, upload_dir, png_bytes):
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(NotFoundError):
            await food_service.update_food("missing-id", FoodPatch(name="X"), staged)

        assert _files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_invalid_field_discards_staged(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        existing = memory_repository.seed(price=Decimal("9.99"))
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(ParseError):
            await food_service.update_food(existing.id, FoodPatch(price="abc"), staged)

        assert _files(upload_dir) == []
        assert memory_repository.foods[existing.id].price == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, food_service, memory_repository):
        existing = memory_repository.seed()

        with pytest.raises(ValidationError):
            await food_service.update_food(existing.id, FoodPatch(name="  "))

    @pytest.mark.asyncio
    async def test_store_failure_keeps_old_image(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        """A failed update deletes the new image and keeps the old one."""
        old = await file_store.stage("old.png", png_bytes)
        old_url = file_store.image_url(old.filename)
        existing = memory_repository.seed(image_url=old_url)
        new = await file_store.stage("new.png", png_bytes)
        memory_repository.fail_on.add("update")

        with pytest.raises(StoreError):
            await food_service.update_food(existing.id, FoodPatch(name="X"), new)

        assert _files(upload_dir) == [old.filename]
        assert memory_repository.foods[existing.id].image_url == old_url

    @pytest.mark.asyncio
    async def test_fetch_failure_discards_staged(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        existing = memory_repository.seed()
        memory_repository.fail_on.add("fetch")
        staged = await file_store.stage("a.png", png_bytes)

        with pytest.raises(StoreError):
            await food_service.update_food(existing.id, FoodPatch(), staged)

        assert _files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_old_image_delete_failure_is_swallowed(
        self, food_service, memory_repository, file_store, png_bytes
    ):
        """The update has committed, so a failed cleanup does not fail it."""
        old = await file_store.stage("old.png", png_bytes)
        existing = memory_repository.seed(image_url=file_store.image_url(old.filename))
        new = await file_store.stage("new.png", png_bytes)

        with patch.object(
            file_store, "delete",
            AsyncMock(return_value=CleanupResult(old.filename, False, "Permission denied")),
        ):
            food = await food_service.update_food(existing.id, FoodPatch(), new)

        assert food.image_url == file_store.image_url(new.filename)


# ══════════════════════════════════════════════════════════════════════════
# Delete
# ══════════════════════════════════════════════════════════════════════════


class TestDeleteFood:

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_image(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        staged = await file_store.stage("a.png", png_bytes)
        existing = memory_repository.seed(image_url=file_store.image_url(staged.filename))

        result = await food_service.delete_food(existing.id)

        assert result is None
        assert existing.id not in memory_repository.foods
        assert _files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_delete_without_image(self, food_service, memory_repository, file_store):
        existing = memory_repository.seed()

        with patch.object(file_store, "delete", wraps=file_store.delete) as delete:
            await food_service.delete_food(existing.id)

        delete.assert_not_called()
        assert memory_repository.foods == {}

    @pytest.mark.asyncio
    async def test_delete_not_found(self, food_service):
        with pytest.raises(NotFoundError):
            await food_service.delete_food("missing-id")

    @pytest.mark.asyncio
    async def test_store_failure_keeps_image(
        self, food_service, memory_repository, file_store, upload_dir, png_bytes
    ):
        """The image is only touched after the record is gone."""
        staged = await file_store.stage("a.png", png_bytes)
        existing = memory_repository.seed(image_url=file_store.image_url(staged.filename))
        memory_repository.fail_on.add("delete")

        with pytest.raises(StoreError):
            await food_service.delete_food(existing.id)

        assert existing.id in memory_repository.foods
        assert _files(upload_dir) == [staged.filename]

    @pytest.mark.asyncio
    async def test_image_delete_failure_is_swallowed(
        self, food_service, memory_repository, file_store, png_bytes
    ):
        staged = await file_store.stage("a.png", png_bytes)
        existing = memory_repository.seed(image_url=file_store.image_url(staged.filename))

        with patch.object(
            file_store, "delete",
            AsyncMock(return_value=CleanupResult(staged.filename, False, "Read-only file system")),
        ):
            await food_service.delete_food(existing.id)

        assert memory_repository.foods == {}

    @pytest.mark.asyncio
    async def test_delete_with_foreign_image(self, food_service, memory_repository, file_store):
        existing = memory_repository.seed(image_url="https://cdn.example.com/pizza.png")

        with patch.object(file_store, "delete", wraps=file_store.delete) as delete:
            await food_service.delete_food(existing.id)

        delete.assert_not_called()
        assert memory_repository.foods == {}
