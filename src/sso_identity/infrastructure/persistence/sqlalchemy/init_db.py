"""Database initialization utilities."""

import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Import models to register with IdentityBase.metadata
import sso_identity.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from sso_config.settings import get_settings
from sso_identity.dependencies import configure_logging, get_database_url
from sso_identity.infrastructure.persistence.sqlalchemy.base import IdentityBase

logger = logging.getLogger(__name__)


def _get_engine() -> AsyncEngine:
    """Get the database engine for initialization."""
    return create_async_engine(
        get_database_url(),
        echo=False,
        pool_pre_ping=True,
    )


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all identity tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.

    Parameters
    ----------
    engine
        Engine to use; a short-lived engine from settings when omitted
    """
    owned = engine is None
    engine = engine or _get_engine()
    logger.info("Ensuring all identity tables exist...")

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.create_all)

    if owned:
        await engine.dispose()
    logger.info("Database schema is up to date (missing tables created if needed)")


async def drop_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all identity tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    owned = engine is None
    engine = engine or _get_engine()
    logger.warning("Dropping all identity tables...")

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.drop_all)

    if owned:
        await engine.dispose()
    logger.info("Database tables dropped successfully")


def _display_url() -> str:
    database_url = get_settings().database_url
    # Hide credentials
    return database_url.split("@")[-1] if "@" in database_url else database_url


def _confirm_or_exit() -> None:
    print("WARNING: This will DELETE ALL DATA in the database!")
    print()
    response = input("Type 'yes' to confirm: ")
    if response.lower() != "yes":
        print("Aborted.")
        sys.exit(1)
    print()


async def _init_database() -> None:
    logger.info("Initializing database...")
    logger.info("Database: %s", _display_url())

    await create_tables()

    logger.info("Database initialized successfully!")


async def _drop_database() -> None:
    print(f"Database: {_display_url()}")
    print()
    _confirm_or_exit()

    await drop_tables()


async def _reset_database(force: bool = False) -> None:
    """Drop all tables and recreate them (USE WITH CAUTION!)."""
    print(f"Database: {_display_url()}")
    print()

    if not force:
        _confirm_or_exit()

    logger.info("Dropping all tables...")
    await drop_tables()

    logger.info("Creating all tables...")
    await create_tables()

    logger.info("Database recreated successfully!")


def db_init() -> None:
    """Initialize database (create tables)."""
    configure_logging(get_settings())
    asyncio.run(_init_database())


def db_drop() -> None:
    """Drop all database tables."""
    configure_logging(get_settings())
    asyncio.run(_drop_database())


def db_reset() -> None:
    """Drop and recreate all database tables."""
    configure_logging(get_settings())
    force = "--force" in sys.argv or "-f" in sys.argv
    asyncio.run(_reset_database(force=force))
