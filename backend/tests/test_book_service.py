"""
Bookshelf Backend: Book Service Unit Tests
===========================================

What:  Tests for BookService business rules.
How:   Uses a mock AsyncSession (no real database); ORM rows are transient
       Book instances built by the make_book fixture.

What we test:
    ✅ List and get convert rows to BookResponse; get on a missing id is None
    ✅ Create rejects a stored ISBN before inserting anything
    ✅ Create maps a unique-constraint IntegrityError to ValidationError
    ✅ Update/delete on a missing id raise NotFoundError and write nothing
    ✅ Ids outside the BIGINT range never reach the session
    ✅ Update writes only the fields that were sent
    ✅ Unexpected SQLAlchemy errors become DatabaseError
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from bookshelf.exceptions import DatabaseError, NotFoundError, ValidationError
from bookshelf.schemas.book import BookCreate, BookUpdate
from bookshelf.services.book_service import BookService


def _isbn_lookup_result(existing_id):
    result = MagicMock()
    result.scalar_one_or_none.return_value = existing_id
    return result


class TestBookServiceRead:
    """Tests for list_books and get_book."""

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_list_books_empty(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_books(mock_db_session) == []

    @pytest.mark.asyncio
    async def test_list_books_returns_every_row(self, mock_db_session, make_book):
        rows = [
            make_book(id=1, isbn="111"),
            make_book(id=2, isbn="222", title="Dune Messiah", year=1969),
        ]
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = rows
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_books(mock_db_session)

        assert [book.id for book in result] == [1, 2]
        assert result[1].title == "Dune Messiah"
        assert result[1].year == 1969

    @pytest.mark.asyncio
    async def test_list_books_database_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError):
            await self.service.list_books(mock_db_session)

    @pytest.mark.asyncio
    async def test_get_book_found(self, mock_db_session, make_book):
        mock_db_session.get.return_value = make_book(id=7, language="es")

        result = await self.service.get_book(mock_db_session, 7)

        assert result.id == 7
        assert result.language == "es"

    @pytest.mark.asyncio
    async def test_get_book_missing_returns_none(self, mock_db_session):
        mock_db_session.get.return_value = None

        assert await self.service.get_book(mock_db_session, 404) is None

    @pytest.mark.asyncio
    async def test_get_book_id_beyond_bigint_returns_none(self, mock_db_session):
        assert await self.service.get_book(mock_db_session, 2 ** 63) is None

        mock_db_session.get.assert_not_awaited()


class TestBookServiceCreate:
    """Tests for create_book."""

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_book_success(self, mock_db_session, sample_book_data):
        mock_db_session.execute.return_value = _isbn_lookup_result(None)

        # Simulate the store assigning the id and defaults on flush
        async def assign_id():
            book = mock_db_session.add.call_args[0][0]
            book.id = 42
            book.created_at = book.updated_at = datetime.now(timezone.utc)
        mock_db_session.flush = AsyncMock(side_effect=assign_id)

        result = await self.service.create_book(
            mock_db_session, BookCreate(**sample_book_data)
        )

        assert result.id == 42
        assert result.title == "Dune"
        assert result.year == 1965
        assert result.edition_number == 1
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_book_duplicate_isbn(self, mock_db_session, sample_book_data):
        mock_db_session.execute.return_value = _isbn_lookup_result(3)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_book(mock_db_session, BookCreate(**sample_book_data))

        assert exc_info.value.field == "isbn"
        assert exc_info.value.errors == {"isbn": ["The isbn has already been taken."]}
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_book_unique_constraint_race(self, mock_db_session, sample_book_data):
        mock_db_session.execute.return_value = _isbn_lookup_result(None)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: books.isbn"))
        )

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_book(mock_db_session, BookCreate(**sample_book_data))

        assert exc_info.value.field == "isbn"

    @pytest.mark.asyncio
    async def test_create_book_database_failure(self, mock_db_session, sample_book_data):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError):
            await self.service.create_book(mock_db_session, BookCreate(**sample_book_data))


class TestBookServiceUpdate:
    """Tests for update_book."""

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_update_book_missing(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError, match="book with ID '99' was not found"):
            await self.service.update_book(mock_db_session, 99, BookUpdate(title="X"))

        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_book_id_beyond_bigint_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_book(mock_db_session, -(2 ** 63) - 1, BookUpdate(title="X"))

        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_book_writes_only_sent_fields(self, mock_db_session, make_book):
        book = make_book(id=5, editorial="Chilton Books")
        mock_db_session.get.return_value = book

        result = await self.service.update_book(
            mock_db_session, 5, BookUpdate(title="Dune (Deluxe Edition)", edition_number=2)
        )

        assert result.id == 5
        assert result.title == "Dune (Deluxe Edition)"
        assert result.edition_number == 2
        assert result.authors == "Frank Herbert"
        assert result.editorial == "Chilton Books"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_book_isbn_collision(self, mock_db_session, make_book):
        mock_db_session.get.return_value = make_book(id=5)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("UPDATE", {}, Exception("UNIQUE constraint failed: books.isbn"))
        )

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_book(mock_db_session, 5, BookUpdate(isbn="taken"))

        assert exc_info.value.field == "isbn"


class TestBookServiceDelete:
    """Tests for delete_book."""

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_delete_book_missing(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.delete_book(mock_db_session, 12)

        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_book_id_beyond_bigint_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_book(mock_db_session, 10 ** 20)

        mock_db_session.get.assert_not_awaited()
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_book_success(self, mock_db_session, make_book):
        book = make_book(id=12)
        mock_db_session.get.return_value = book

        await self.service.delete_book(mock_db_session, 12)

        mock_db_session.delete.assert_awaited_once_with(book)
        mock_db_session.flush.assert_awaited_once()
