import asyncio
import logging
import pathlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import DBAPIError, IntegrityError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from ella_rises.config import settings
from ella_rises.errors import Conflict, StoreUnavailable

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> AsyncEngine:
    """Create an async engine with foreign keys on and a writer busy timeout."""
    new_engine = create_async_engine(url, connect_args={"timeout": settings.DB_BUSY_TIMEOUT})
    event.listen(new_engine.sync_engine, "connect", _enable_foreign_keys)
    return new_engine


def make_session_pool(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        autoflush=False,
        expire_on_commit=False,
    )


# Create an async engine
engine = make_engine(settings.async_db_url)

# Create a sync engine for Alembic migrations
sync_engine = create_engine(settings.sync_db_url)

# Create a session factory
SessionLocal = make_session_pool(engine)


@asynccontextmanager
async def store_transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a write block, translating store failures into service errors.

    The session is rolled back before the error leaves the block, so the
    caller always gets a usable session back.
    """
    try:
        yield session
    except IntegrityError as e:
        await session.rollback()
        raise Conflict(f"Constraint violated: {e.orig}") from e
    except (DBAPIError, PoolTimeoutError) as e:
        await session.rollback()
        logger.error("store_unavailable: %s", e)
        raise StoreUnavailable("The database is unavailable, try again later.") from e


def _run_migrations() -> None:
    from alembic import command
    from alembic.config import Config as AlembicConfig

    # Locate alembic.ini next to project root
    root_path = pathlib.Path(__file__).resolve().parent.parent
    alembic_ini = root_path / "alembic.ini"
    if not alembic_ini.exists():
        return
    cfg = AlembicConfig(str(alembic_ini))
    cfg.set_main_option("script_location", str(root_path / "alembic"))
    # Alembic is synchronous, so it gets the plain sqlite driver
    cfg.set_main_option("sqlalchemy.url", settings.sync_db_url)
    command.upgrade(cfg, "head")


async def init_db(bind: AsyncEngine | None = None, migrate: bool = True) -> None:
    """Apply migrations and make sure every table exists."""
    if migrate:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _run_migrations)

    # Ensure all models are imported so SQLModel metadata includes them
    import ella_rises.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database ready at %s", settings.DB_PATH)
