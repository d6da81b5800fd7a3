"""
Bookshelf Backend: Application Package Initializer
===================================================

What: Marks the `bookshelf` directory as a Python package.
Who:  Imported by uvicorn (`bookshelf.main:app`), Alembic and pytest.

Architecture Note:
    The backend is a thin layered CRUD service for one resource, the book:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Rules)   │  ← ISBN uniqueness, not-found
    ├─────────────────────────────────────┤
    │     Repositories (Store Access)     │  ← find / create / update / delete
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic DTOs
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the session directly; services never build responses
    with status codes. Each layer can be tested on its own.
"""

__version__ = "1.0.0"
