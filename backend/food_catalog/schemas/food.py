"""
Food Catalog Backend: Pydantic Request/Response Schemas
========================================================

What:  The API contract: raw food input, partial updates, list filters and
       the response envelopes.
Who:   Routes build FoodInput/FoodPatch from form fields; services return
       FoodResponse; routes wrap them in envelopes.

Raw input:
    FoodInput and FoodPatch keep the values exactly as the client sent them
    (strings from a form, or native values from Python callers). Conversion
    happens in services.parsing, inside the lifecycle service, so a rejected
    value can still trigger cleanup of a staged image.

Wire format:
    Records are serialized with camelCase keys (imageUrl, createdAt,
    updatedAt). Fields are populated by their Python names.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class FoodInput(BaseModel):
    """Fields for creating a food entry, before validation."""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Union[str, int, float, Decimal]] = None
    category: Optional[str] = None
    available: Optional[Union[bool, str]] = None


class FoodPatch(BaseModel):
    """
    Partial update of a food entry.

    Presence is tracked by `model_fields_set`, not by value: a field that was
    never passed is left untouched, while an explicitly passed None or blank
    `description` clears it. Over HTTP a form key sent with an empty value
    counts as passed.

        FoodPatch(price="12.50").model_fields_set == {"price"}
    """

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Union[str, int, float, Decimal]] = None
    category: Optional[str] = None
    available: Optional[Union[bool, str]] = None

    def supplied(self) -> dict:
        """Only the fields the caller actually set, with their raw values."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class FoodFilter(BaseModel):
    """Listing constraints; None means "no constraint"."""

    category: Optional[str] = None
    available: Optional[bool] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class FoodResponse(BaseModel):
    """A stored food entry as returned by the API."""

    id: str = Field(description="Unique food identifier")
    name: str
    description: Optional[str] = None
    price: float = Field(description="Price, two decimal places")
    category: str
    image_url: Optional[str] = Field(
        default=None,
        alias="imageUrl",
        description="URL path of the food image, null when there is none",
    )
    available: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_record(cls, food) -> "FoodResponse":
        """Build the response from a Food ORM instance."""
        return cls(
            id=food.id,
            name=food.name,
            description=food.description,
            price=float(food.price),
            category=food.category,
            image_url=food.image_url,
            available=food.available,
            created_at=food.created_at,
            updated_at=food.updated_at,
        )


class FoodEnvelope(BaseModel):
    """Single-record response: POST, GET by id, PUT."""

    success: bool = True
    data: FoodResponse
    message: Optional[str] = None


class FoodListEnvelope(BaseModel):
    """GET /api/foods response."""

    success: bool = True
    data: List[FoodResponse]
    count: int


class DeleteResponse(BaseModel):
    """DELETE /api/foods/{id} confirmation."""

    success: bool = True
    message: str = "Food item deleted successfully"


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {
            "error": "not_found",
            "message": "food with ID '42' was not found",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Upload directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
