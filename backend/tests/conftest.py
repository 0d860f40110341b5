"""
Food Catalog Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any food_catalog import so the
       settings singleton, the engine and the file store all point at
       throwaway locations.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── file_store: FileStore rooted in tmp_path
    ├── memory_repository: InMemoryFoodRepository with failure injection
    ├── food_service / food_queries: services wired to the two above
    ├── png_bytes: small fake image content
    ├── db_session: AsyncSession on a fresh SQLite schema
    └── test_client: HTTPX AsyncClient against the FastAPI app
"""

import os
import shutil
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run BEFORE any food_catalog import
_TEST_ROOT = tempfile.mkdtemp(prefix="food_catalog_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads", "foods")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from food_catalog.exceptions import NotFoundError, StoreError  # noqa: E402
from food_catalog.models.food import Food  # noqa: E402
from food_catalog.schemas.food import FoodFilter  # noqa: E402
from food_catalog.services.file_store import FileStore  # noqa: E402
from food_catalog.services.food_queries import FoodQueries  # noqa: E402
from food_catalog.services.food_service import FoodService  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory repository
# ══════════════════════════════════════════════════════════════════════════

class InMemoryFoodRepository:
    """
    FoodRepository kept in a dict, for service tests without a database.

    Put an operation name ("create", "fetch", "list", "update", "delete")
    in `fail_on` to make that call raise StoreError.
    """

    def __init__(self):
        self.foods: Dict[str, Food] = {}
        self.fail_on: set = set()
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(
                message=f"Failed to {operation} food item",
                operation=operation,
                context={"error_type": "OperationalError", "error": "injected failure"},
            )

    async def create(self, fields: Dict[str, Any]) -> Food:
        self._maybe_fail("create")
        now = self._tick()
        values = {"available": True, "description": None, "image_url": None, **fields}
        food = Food(id=str(uuid.uuid4()), created_at=now, updated_at=now, **values)
        self.foods[food.id] = food
        return food

    async def find_by_id(self, food_id: str) -> Optional[Food]:
        self._maybe_fail("fetch")
        return self.foods.get(food_id)

    async def find_many(self, food_filter: FoodFilter) -> List[Food]:
        self._maybe_fail("list")
        foods = [
            food for food in self.foods.values()
            if (food_filter.category is None or food.category == food_filter.category)
            and (food_filter.available is None or food.available == food_filter.available)
        ]
        return sorted(foods, key=lambda food: food.created_at, reverse=True)

    async def update(self, food_id: str, fields: Dict[str, Any]) -> Food:
        food = self.foods.get(food_id)
        if food is None:
            raise NotFoundError(resource="food", resource_id=food_id)
        self._maybe_fail("update")
        for name, value in fields.items():
            setattr(food, name, value)
        food.updated_at = self._tick()
        return food

    async def delete(self, food_id: str) -> None:
        if food_id not in self.foods:
            raise NotFoundError(resource="food", resource_id=food_id)
        self._maybe_fail("delete")
        del self.foods[food_id]

    def seed(self, **fields: Any) -> Food:
        """Insert a record directly, bypassing failure injection."""
        now = self._tick()
        values = {
            "name": "Pizza",
            "description": None,
            "price": Decimal("9.99"),
            "category": "main",
            "image_url": None,
            "available": True,
            **fields,
        }
        food = Food(id=str(uuid.uuid4()), created_at=now, updated_at=now, **values)
        self.foods[food.id] = food
        return food


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def upload_dir(tmp_path) -> Path:
    path = tmp_path / "uploads" / "foods"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def file_store(upload_dir) -> FileStore:
    """FileStore with the default prefixes, rooted in a temp directory."""
    return FileStore(
        upload_dir=str(upload_dir),
        url_prefix="/api/uploads/foods/",
        legacy_prefixes=["/api/uploads/"],
        max_file_size=1024 * 1024,
    )


@pytest.fixture
def memory_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def food_service(memory_repository, file_store) -> FoodService:
    return FoodService(repository=memory_repository, file_store=file_store)


@pytest.fixture
def food_queries(memory_repository) -> FoodQueries:
    return FoodQueries(repository=memory_repository)


@pytest.fixture
def png_bytes() -> bytes:
    """PNG signature plus padding; content is never inspected."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest_asyncio.fixture
async def db_session():
    """
    AsyncSession bound to the test SQLite database with a fresh schema.

    Tables are created before and dropped after each test.
    """
    from food_catalog.database import Base, async_session_factory, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient talking to the FastAPI app over ASGI.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/foods")
            assert response.status_code == 200
    """
    from food_catalog.database import Base, engine
    from food_catalog.main import app
    from food_catalog.services.file_store import file_store

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    file_store.upload_dir.mkdir(parents=True, exist_ok=True)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    shutil.rmtree(file_store.upload_dir, ignore_errors=True)
    file_store.upload_dir.mkdir(parents=True, exist_ok=True)


@pytest.fixture
def uploaded_files():
    """List the filenames currently in the app's upload directory."""
    from food_catalog.services.file_store import file_store

    def _list() -> List[str]:
        return sorted(p.name for p in file_store.upload_dir.iterdir() if p.is_file())

    return _list
