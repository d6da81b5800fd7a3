"""
Bookshelf Backend: Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract for the book resource.
How:   FastAPI validates request bodies against BookCreate / BookUpdate,
       serializes ORM rows through BookResponse, and documents all of them
       in the OpenAPI schema.

Mass-assignment allow-list:
    BookCreate and BookUpdate declare exactly the client-settable columns
    (title, authors, isbn, editorial, year, edition_number, language).
    Unknown keys, including `id` and the timestamps, are ignored when the
    body is parsed, so they can never reach the ORM.

Create rules:
    title, authors, isbn   required (blank strings count as missing)
    year                   required, numeric, exactly 4 digits
    edition_number         numeric when present
    isbn uniqueness        checked by BookService against the store
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


_NUMERIC = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_FOUR_DIGITS = re.compile(r"[0-9]{4}")


def _numeric_text(value: Any, label: str) -> str:
    """Returns the value as stripped text if it reads as a number, else raises ValueError."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"The {label} must be a number.")
    text = str(value).strip()
    if not _NUMERIC.fullmatch(text):
        raise ValueError(f"The {label} must be a number.")
    return text


def _label(field_name: str) -> str:
    return field_name.replace("_", " ")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BookCreate(BaseModel):
    """Body of POST /books."""

    title: str = Field(min_length=1, max_length=255, description="Book title")
    authors: str = Field(
        min_length=1, max_length=255,
        description="Author names as free text (e.g. 'Neil Gaiman, Terry Pratchett')",
    )
    isbn: str = Field(min_length=1, max_length=255, description="ISBN, unique per book")
    editorial: Optional[str] = Field(default=None, max_length=255, description="Publisher")
    year: int = Field(description="Publication year, exactly 4 digits")
    edition_number: Optional[int] = Field(default=None, description="Edition number")
    language: Optional[str] = Field(default=None, max_length=255, description="Language")

    model_config = {
        "extra": "ignore",
        "str_strip_whitespace": True,
        "json_schema_extra": {
            "example": {
                "title": "Dune",
                "authors": "Frank Herbert",
                "isbn": "9780441013593",
                "editorial": "Ace",
                "year": 1965,
                "edition_number": 1,
                "language": "en",
            }
        },
    }

    @field_validator("year", mode="before")
    @classmethod
    def validate_year(cls, v: Any) -> int:
        """Accepts 2024 or "2024"; rejects non-numbers and anything but 4 digits."""
        text = _numeric_text(v, "year")
        if not _FOUR_DIGITS.fullmatch(text):
            raise ValueError("The year must be 4 digits.")
        return int(text)

    @field_validator("edition_number", mode="before")
    @classmethod
    def validate_edition_number(cls, v: Any) -> Any:
        if v is None:
            return v
        return _numeric_text(v, "edition number")


class BookUpdate(BaseModel):
    """
    Body of PUT/PATCH /books/{id}.

    Every field is optional and only the fields present in the body are
    written. Create-time rules (4-digit year, ISBN uniqueness) are not
    re-applied. Explicit nulls are refused for the NOT NULL columns.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    authors: Optional[str] = Field(default=None, min_length=1, max_length=255)
    isbn: Optional[str] = Field(default=None, min_length=1, max_length=255)
    editorial: Optional[str] = Field(default=None, max_length=255)
    year: Optional[int] = None
    edition_number: Optional[int] = None
    language: Optional[str] = Field(default=None, max_length=255)

    model_config = {"extra": "ignore", "str_strip_whitespace": True}

    @field_validator("title", "authors", "isbn", "year")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"The {_label(info.field_name)} field may not be null.")
        return v

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookResponse(BaseModel):
    """
    Full JSON form of a book. Nothing is hidden: every column, including
    the store-owned id and timestamps, is returned.
    """

    id: int = Field(description="Store-assigned identifier")
    title: str
    authors: str
    isbn: str
    editorial: Optional[str] = None
    year: int
    edition_number: Optional[int] = None
    language: Optional[str] = None
    created_at: datetime = Field(description="When the book was created (UTC)")
    updated_at: datetime = Field(description="When the book was last updated (UTC)")

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "The given data was invalid.",
            "details": {"errors": {"year": ["The year must be 4 digits."]}},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
