"""
Bookshelf Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error kinds the API exposes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    BookshelfError (base)
    ├── ValidationError   → 422 Unprocessable Entity (lists failing fields)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error

Repositories signal absence by returning None; the service layer turns that
into NotFoundError where a missing row must abort the request (update and
delete). Get-one keeps returning null.
"""

from typing import Any, Dict, List, Optional


class BookshelfError(Exception):
    """
    Base exception for all Bookshelf application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned only by handlers
                  that choose to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookshelfError):
    """
    Raised when client input breaks a business rule that the request schema
    cannot check on its own (ISBN already taken).

    HTTP: 422, same envelope as FastAPI's schema validation failures:
        {
            "error": "validation_error",
            "message": "The isbn has already been taken.",
            "details": {"errors": {"isbn": ["The isbn has already been taken."]}},
            "request_id": "a1b2c3d4"
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if errors is None:
            errors = {field: [message]} if field else {}
        ctx = context or {}
        ctx["errors"] = errors
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors


class NotFoundError(BookshelfError):
    """
    Raised when an update or delete targets a row that does not exist.

    HTTP: 404 Not Found
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


class DatabaseError(BookshelfError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP: 500. The client always gets a generic message; the context
    (operation, original error type) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
