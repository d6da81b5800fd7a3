"""
Bookshelf Backend: Book Repository
===================================

What:  Store access for the `books` table: find, find-all, create, update, delete.
How:   Thin wrapper over an AsyncSession passed in by the caller. Writes are
       flushed (so ids and constraint violations surface immediately) but
       never committed; the request's unit of work commits.
Who:   Used by BookService.

Absence is a value here, not an error: `find_by_id` returns None and the
service decides what a missing row means for each operation.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.models.book import FILLABLE_FIELDS, Book
from bookshelf.schemas.book import BookCreate


class BookRepository:
    """CRUD primitives over one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> List[Book]:
        """All books in insertion order (SELECT * FROM books ORDER BY id)."""
        result = await self.session.execute(select(Book).order_by(Book.id))
        return list(result.scalars().all())

    async def find_by_id(self, book_id: int) -> Optional[Book]:
        return await self.session.get(Book, book_id)

    async def isbn_exists(self, isbn: str) -> bool:
        result = await self.session.execute(
            select(Book.id).where(Book.isbn == isbn).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create(self, data: BookCreate) -> Book:
        """Insert a new row from the allow-listed fields; the id is set on flush."""
        book = Book(**_fillable(data.model_dump()))
        self.session.add(book)
        await self.session.flush()
        return book

    async def update(self, book: Book, changes: Dict[str, Any]) -> Book:
        """Overwrite the given allow-listed fields in place."""
        for field, value in _fillable(changes).items():
            setattr(book, field, value)
        await self.session.flush()
        return book

    async def delete(self, book: Book) -> None:
        await self.session.delete(book)
        await self.session.flush()


def _fillable(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if key in FILLABLE_FIELDS}
