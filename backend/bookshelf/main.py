"""
Bookshelf Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) returns a configured FastAPI
       instance. uvicorn serves the module-level `app`
       (uvicorn bookshelf.main:app); tests build their own with test settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌──────┐    │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│ CORS │    │
    │  └──────────┘ └─────────────┘ └──────┘ └──────┘    │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌─────────────────┐  │
    │  │ /books, /books/{id}      │ │ GET /health     │  │
    │  └──────────────────────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ Validation→422 │ NotFound→404 │ DB→500       │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → open Database → (optionally) create tables
    Shutdown: dispose Database (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from bookshelf import __version__
from bookshelf.config import Settings, settings as default_settings
from bookshelf.database import Database
from bookshelf.exceptions import (
    BookshelfError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from bookshelf.middleware.logging import RequestLoggingMiddleware
from bookshelf.middleware.request_id import RequestIDMiddleware, request_id_var
from bookshelf.routes import books, health

logger = logging.getLogger(__name__)

INVALID_DATA_MESSAGE = "The given data was invalid."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] bookshelf.services.book_service: Book created: id=1
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party libraries log every connection / query at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database handle on startup and release it on shutdown.

    The Database lives on `app.state.database`; `get_db_session` reads it
    from there for every request.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Bookshelf Backend starting up...")

    database = Database.from_settings(app_settings)
    if app_settings.db_create_tables:
        await database.create_all()
        logger.info("Database tables created")
    app.state.database = database

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Bookshelf Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_message(field: str, error: Dict[str, Any]) -> str:
    label = field.replace("_", " ")
    kind = error.get("type")
    ctx = error.get("ctx") or {}
    if kind == "missing" or (kind == "string_too_short" and ctx.get("min_length") == 1):
        return f"The {label} field is required."
    if kind == "value_error" and "error" in ctx:
        # Our own validators already phrase the message for the client
        return str(ctx["error"])
    return error.get("msg", "Invalid value")


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Collapse FastAPI/Pydantic error entries into {field: [messages]}.

    The location prefix ("body", "path", "query") is dropped, so
    ("body", "year") becomes "year". A body that is not valid JSON is
    located by character offset, ("body", 1), and is reported under "body".
    """
    formatted: Dict[str, List[str]] = {}
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if len(loc) > 1 and isinstance(loc[1], int):
            field = str(loc[0])
        elif len(loc) > 1:
            field = ".".join(str(part) for part in loc[1:])
        else:
            field = str(loc[0]) if loc else "request"
        formatted.setdefault(field, []).append(_error_message(field, error))
    return formatted


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler hierarchy:
        RequestValidationError → 422 (schema/type failures from FastAPI)
        ValidationError        → 422 (business rules, e.g. ISBN taken)
        NotFoundError          → 404
        DatabaseError          → 500 (generic message, context logged)
        BookshelfError (base)  → 500
        Exception (fallback)   → 500 (stack trace logged, never returned)
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = format_validation_errors(exc.errors())
        logger.warning("[%s] Request validation failed: %s", rid, sorted(errors))
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "message": INVALID_DATA_MESSAGE,
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": {"errors": exc.errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(BookshelfError)
    async def handle_bookshelf_error(request: Request, exc: BookshelfError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to run with; defaults to the environment-loaded
                      `bookshelf.config.settings`.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Bookshelf API",
        description="CRUD API for a catalogue of books.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RequestLoggingMiddleware, skip_paths=app_settings.access_log_skip_paths_list
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(books.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `bookshelf.main:app` to be importable
app = create_app()
