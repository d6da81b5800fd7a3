"""
Bookshelf Backend: Book Route Handlers
=======================================

What:  The five CRUD endpoints of the book resource.
How:   Each handler pulls its inputs (path id, JSON body), delegates to
       BookService, and picks the status code / response class.

Route Inventory:
    GET         /books        → 200, JSON array of books
    GET         /books/{id}   → 200, JSON book or JSON null
    POST        /books        → 201, JSON of the created book
    PUT, PATCH  /books/{id}   → 200, JSON of the updated book
    DELETE      /books/{id}   → 200, text/plain "Deleted Successfully"
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.database import get_db_session
from bookshelf.schemas.book import (
    BookCreate,
    BookResponse,
    BookUpdate,
    ErrorResponse,
)
from bookshelf.services.book_service import book_service

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Deleted Successfully"

router = APIRouter(prefix="/books", tags=["Books"])


@router.get(
    "",
    response_model=List[BookResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all books",
)
async def list_books(db: AsyncSession = Depends(get_db_session)) -> List[BookResponse]:
    return await book_service.list_books(db)


@router.get(
    "/{book_id}",
    response_model=Optional[BookResponse],
    responses={
        200: {"description": "The book, or null when no book has this id"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single book by ID",
)
async def get_book(
    book_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[BookResponse]:
    """
    Returns the book, or `null` with status 200 when the id is unknown.

    Unlike update and delete, a missing book is not an error here.
    """
    return await book_service.get_book(db, book_id)


@router.post(
    "",
    response_model=BookResponse,
    status_code=201,
    responses={
        201: {"description": "Book created", "model": BookResponse},
        422: {"description": "Validation failed", "model": ErrorResponse},
    },
    summary="Create a book",
)
async def create_book(
    payload: BookCreate,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    """
    Creates a book from the allow-listed fields of the body.

    Rules: title, authors and isbn required; isbn unique; year required,
    numeric and 4 digits long; edition_number numeric if given.
    """
    return await book_service.create_book(db, payload)


@router.api_route(
    "/{book_id}",
    methods=["PUT", "PATCH"],
    response_model=BookResponse,
    responses={
        404: {"description": "Book not found", "model": ErrorResponse},
        422: {"description": "Validation failed", "model": ErrorResponse},
    },
    summary="Update a book",
)
async def update_book(
    book_id: int,
    payload: BookUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    """Overwrites only the fields present in the body; PUT and PATCH behave the same."""
    return await book_service.update_book(db, book_id, payload)


@router.delete(
    "/{book_id}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Book deleted", "content": {"text/plain": {}}},
        404: {"description": "Book not found", "model": ErrorResponse},
    },
    summary="Delete a book",
)
async def delete_book(
    book_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> PlainTextResponse:
    await book_service.delete_book(db, book_id)
    return PlainTextResponse(DELETED_MESSAGE, status_code=200)
