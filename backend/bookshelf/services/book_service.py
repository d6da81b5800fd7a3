"""
Bookshelf Backend: Book Service (Business Rules)
=================================================

What:  The five book operations behind the HTTP routes.
How:   Builds a BookRepository over the request's session, applies the
       business rules, and converts ORM rows into BookResponse models.
Who:   Called by route handlers in routes/books.py.

Rules:
    - Get-one on a missing id returns None (the route answers JSON null).
    - Update and delete on a missing id raise NotFoundError (404).
    - Create rejects an ISBN that is already stored (ValidationError, 422).
      The unique constraint in the store backs this up when two creates race;
      its IntegrityError is reported the same way.
    - Any other SQLAlchemy failure becomes DatabaseError (500), with the
      original error logged but not returned.

BookService is stateless; every call receives the session it should use.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.exceptions import DatabaseError, NotFoundError, ValidationError
from bookshelf.models.book import Book
from bookshelf.repositories.book_repository import BookRepository
from bookshelf.schemas.book import BookCreate, BookResponse, BookUpdate

logger = logging.getLogger(__name__)

ISBN_TAKEN = "The isbn has already been taken."

# BIGINT bounds; larger ids cannot be bound as a query parameter
MIN_BOOK_ID = -(2 ** 63)
MAX_BOOK_ID = 2 ** 63 - 1


def _storable_id(book_id: int) -> bool:
    return MIN_BOOK_ID <= book_id <= MAX_BOOK_ID


class BookService:
    """Business logic layer for book operations."""

    async def list_books(self, db: AsyncSession) -> List[BookResponse]:
        try:
            books = await BookRepository(db).find_all()
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [BookResponse.model_validate(book) for book in books]

    async def get_book(self, db: AsyncSession, book_id: int) -> Optional[BookResponse]:
        """
        Retrieve a single book by ID.

        Returns:
            BookResponse, or None when no book has this id. A missing book is
            not an error for reads.
        """
        if not _storable_id(book_id):
            return None
        try:
            book = await BookRepository(db).find_by_id(book_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"book_id": book_id},
            )
        if book is None:
            return None
        return BookResponse.model_validate(book)

    async def create_book(self, db: AsyncSession, payload: BookCreate) -> BookResponse:
        """
        Persist a new book.

        Raises:
            ValidationError: the ISBN is already stored (→ 422)
            DatabaseError: insert failed for another reason (→ 500)
        """
        repository = BookRepository(db)
        try:
            if await repository.isbn_exists(payload.isbn):
                raise ValidationError(message=ISBN_TAKEN, field="isbn")
            book = await repository.create(payload)
        except IntegrityError as e:
            # Another request inserted the same ISBN between check and flush
            logger.warning("Integrity error creating book isbn=%s: %s", payload.isbn, e.orig)
            raise ValidationError(message=ISBN_TAKEN, field="isbn")
        except SQLAlchemyError as e:
            logger.error("Database error creating book: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the book. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Book created: id=%s isbn=%s", book.id, book.isbn)
        return BookResponse.model_validate(book)

    async def update_book(
        self, db: AsyncSession, book_id: int, payload: BookUpdate
    ) -> BookResponse:
        """
        Overwrite the fields present in the payload.

        Raises:
            NotFoundError: no book has this id (→ 404); nothing is written
            ValidationError: the new ISBN belongs to another book (→ 422)
            DatabaseError: update failed for another reason (→ 500)
        """
        repository = BookRepository(db)
        book = await self._get_or_fail(repository, book_id)
        changes = payload.changes()

        try:
            book = await repository.update(book, changes)
        except IntegrityError as e:
            logger.warning("Integrity error updating book %s: %s", book_id, e.orig)
            raise ValidationError(message=ISBN_TAKEN, field="isbn")
        except SQLAlchemyError as e:
            logger.error("Database error updating book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the book. Please try again.",
                context={"book_id": book_id, "error_type": type(e).__name__},
            )

        logger.info("Book updated: id=%s fields=%s", book_id, sorted(changes))
        return BookResponse.model_validate(book)

    async def delete_book(self, db: AsyncSession, book_id: int) -> None:
        """
        Remove a book permanently.

        Raises:
            NotFoundError: no book has this id (→ 404)
        """
        repository = BookRepository(db)
        book = await self._get_or_fail(repository, book_id)

        try:
            await repository.delete(book)
        except SQLAlchemyError as e:
            logger.error("Database error deleting book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the book. Please try again.",
                context={"book_id": book_id, "error_type": type(e).__name__},
            )

        logger.info("Book deleted: id=%s", book_id)

    async def _get_or_fail(self, repository: BookRepository, book_id: int) -> Book:
        if not _storable_id(book_id):
            raise NotFoundError(resource="book", resource_id=str(book_id))
        try:
            book = await repository.find_by_id(book_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"book_id": book_id},
            )
        if book is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        return book


# BookService holds no state; one instance serves every request
book_service = BookService()
