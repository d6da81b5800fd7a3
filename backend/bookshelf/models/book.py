"""
Bookshelf Backend: Book SQLAlchemy Model
=========================================

What:  ORM model representing the `books` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Loaded and persisted by BookRepository; serialized by BookResponse.

Table Design:
    - id: Integer autoincrement primary key, assigned by the store, never reused
    - isbn: UNIQUE constraint; the store is the final arbiter of uniqueness
    - title / authors / isbn / year: NOT NULL
    - editorial / edition_number / language: nullable
    - created_at / updated_at: set in Python so the values are known on the
      instance right after flush (no refresh round-trip); the server default
      matches migration 001. Stored and returned as UTC (UTCDateTime).
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from bookshelf.database import Base


# Columns a client may set on create/update. Everything else (id, timestamps)
# is owned by the store.
FILLABLE_FIELDS = (
    "title",
    "authors",
    "isbn",
    "editorial",
    "year",
    "edition_number",
    "language",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetimes on every backend.

    PostgreSQL keeps the offset in TIMESTAMPTZ; SQLite stores bare text, so
    values read back naive. Writes are normalized to UTC and naive reads are
    tagged as UTC, so a row serializes the same before and after a round trip.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Book(Base):
    """
    One catalogued book.

    Lifecycle:
        1. Inserted by BookRepository.create (id assigned on flush)
        2. Overwritten field-by-field by BookRepository.update
        3. Removed for good by BookRepository.delete (hard delete)

    A new Book gets a single timestamp for both created_at and updated_at.
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Free text; no structured author relation
    authors: Mapped[str] = mapped_column(String(255), nullable=False)

    isbn: Mapped[str] = mapped_column(String(255), nullable=False)

    # Publisher
    editorial: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    year: Mapped[int] = mapped_column(Integer, nullable=False)

    edition_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    language: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    # server_default mirrors migration 001 for rows inserted outside the ORM
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("isbn", name="uq_books_isbn"),
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("created_at", _utcnow())
        kwargs.setdefault("updated_at", kwargs["created_at"])
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, isbn='{self.isbn}', title='{self.title}')>"
