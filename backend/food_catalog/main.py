"""
Food Catalog Backend: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application.
Who:   uvicorn (`uvicorn food_catalog.main:app`) and the test client.

Application layout:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: RateLimit → RequestID → Logging → GZip/CORS │
    │                                                          │
    │  Routes:                                                 │
    │    /api/foods             POST, GET                      │
    │    /api/foods/{id}        GET, PUT, DELETE               │
    │    /api/uploads/foods/{f} GET (image files)              │
    │    /health                GET                            │
    │                                                          │
    │  Exception handlers:                                     │
    │    Validation→400  NotFound→404  429 from middleware     │
    │    Store→500 (details)  FileStorage→500  other→500       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the upload directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from food_catalog import __version__
from food_catalog.config import settings
from food_catalog.database import dispose_engine
from food_catalog.exceptions import (
    FileStorageError,
    FoodCatalogError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from food_catalog.middleware.logging import RequestLoggingMiddleware
from food_catalog.middleware.rate_limit import RateLimitMiddleware
from food_catalog.middleware.request_id import RequestIDMiddleware, request_id_var
from food_catalog.routes import foods, health, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once at startup.

    Format: 2024-01-15T12:00:00 [INFO] food_catalog.services.food_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Food Catalog backend %s starting up", __version__)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir.resolve())
    logger.info("Image URL prefix: %s", settings.image_url_prefix)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Food Catalog backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, exc: FoodCatalogError, include_details: bool = True) -> dict:
    body = {
        "error": error,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

        ValidationError / ParseError → 400
        NotFoundError                → 404
        StoreError                   → 500, with details
        FileStorageError             → 500
        FoodCatalogError (other)     → 500
        Exception                    → 500, traceback logged only
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", exc))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc, include_details=False),
        )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("[%s] Store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body("store_error", exc))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc, include_details=False),
        )

    @app.exception_handler(FoodCatalogError)
    async def handle_application_error(request: Request, exc: FoodCatalogError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc, include_details=False),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Food Catalog API",
        description=(
            "CRUD backend for food catalog entries with optional images. "
            "Images are stored on local disk and served from /api/uploads/foods/."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(foods.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
