"""
Alembic Migration Environment
===============================

Migrations use the same Settings and Database handle as the running
application, so DATABASE_URL is read in one place and the async-driver check
in Settings applies to `alembic upgrade` too. Run from the backend/ directory.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection
from alembic import context

from bookshelf.config import settings
from bookshelf.database import Base, Database

# Registers the books table on Base.metadata for --autogenerate
from bookshelf.models.book import Book  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Write the migration SQL for settings.database_url to stdout."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def apply_migrations(connection: Connection) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    database = Database.from_settings(settings)
    try:
        async with database.engine.connect() as connection:
            await connection.run_sync(apply_migrations)
    finally:
        await database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
