"""
Food Catalog Backend: Application Package
=========================================

What:  HTTP backend for managing food catalog entries and their images.
Who:   Imported by uvicorn (`food_catalog.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, upload staging
    ├─────────────────────────────────────┤
    │   Services (Lifecycle + Queries)    │  ← validation, file reconciliation
    ├─────────────────────────────────────┤
    │  Repository / File Store (Storage)  │  ← Food table, image directory
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes never touch the session or the filesystem directly; the
    lifecycle service is the only place where a record and its image file
    change together.
"""

__version__ = "1.0.0"
