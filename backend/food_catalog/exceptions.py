"""
Food Catalog Backend: Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one per error category.
How:   Each exception carries a message and a context dict. Global handlers
       registered in main.py turn them into JSON responses.
Who:   Raised by services, the repository and the file store.

Exception Hierarchy:
    FoodCatalogError (base)
    ├── ValidationError          → 400 Bad Request
    │   └── ParseError           → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── StoreError               → 500 Internal Server Error (with details)
    ├── FileStorageError         → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

A failed image cleanup is deliberately absent from this list: the file
store reports it through CleanupResult and it never reaches a caller.
"""

from typing import Any, Dict, Optional


class FoodCatalogError(Exception):
    """
    Base exception for all Food Catalog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional structured info for logs and error details
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FoodCatalogError):
    """
    Raised when client input fails validation.

    When:    Missing name/price/category, negative or unparseable price,
             unsupported image extension, oversized upload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Name, price, and category are required",
            "details": {"missing": ["price"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ParseError(ValidationError):
    """
    Raised when a supplied value cannot be converted to its target type.

    Distinct from a missing value: `available="maybe"` is a ParseError,
    while an absent `available` simply takes its default.
    """

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["value"] = str(value)
        ctx["expected"] = expected
        super().__init__(
            message=f"Invalid value for '{field}': expected {expected}",
            field=field,
            context=ctx,
        )
        self.value = value


class NotFoundError(FoodCatalogError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/foods/{id} with an unknown id, or a request
             for an image file that is not on disk.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreError(FoodCatalogError):
    """
    Raised when the backing store rejects or fails an operation.

    When:    Connection lost, constraint violation, deadlock, driver error.
    HTTP:    500 Internal Server Error

    The repository rolls the session back before raising, so the stored
    record is never left half-written. `context` names the operation and
    the driver error type and is returned as `details`.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class FileStorageError(FoodCatalogError):
    """
    Raised when an uploaded image cannot be written to the upload directory.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(FoodCatalogError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
