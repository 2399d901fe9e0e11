"""
Database engine and session management.

Provides the async SQLAlchemy engine and session factory for the catalog.
The catalog is a single SQLite file; FTS5 must be available in the SQLite
build for tier-1 search, but everything else works without it.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardcatalog.config import settings
from cardcatalog.models.db import Base


def _set_sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine.

    For file-backed SQLite the parent directory is created and WAL mode is
    switched on for every new connection, so readers never block the
    importer's batch commits.
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    new_engine = create_async_engine(database_url, echo=echo)
    if is_sqlite:
        event.listen(new_engine.sync_engine, "connect", _set_sqlite_pragmas)
    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory
async_session_factory = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.

    Creates the `cards` table and its indexes if missing. The search index
    is not created here; it is built by the import pipeline.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
