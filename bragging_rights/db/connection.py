"""
Database Connection Management
==============================

Process-wide async engine (SQLAlchemy AsyncIO over asyncpg) for the
vector store. A workflow run opens it once, borrows one session, and
disposes of it on the way out.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.utils.errors import DatabaseError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)

_NOT_INITIALIZED = {"hint": "Call DatabaseManager.initialize() first"}


class DatabaseManager:
    """
    Holds the engine and session factory shared by one process.

    Usage:
        await DatabaseManager.initialize(settings)
        async with DatabaseManager.get_session() as session:
            ...
        await DatabaseManager.close()
    """

    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    async def initialize(cls, settings: Settings | None = None) -> AsyncEngine:
        """
        Create the engine unless one already exists.

        Returns:
            The engine

        Raises:
            DatabaseError: If the engine cannot be created
        """
        if cls._engine is not None:
            return cls._engine

        settings = settings or get_settings()

        try:
            cls._engine = create_async_engine(
                settings.database_url,
                pool_size=settings.db_pool_min,
                max_overflow=max(settings.db_pool_max - settings.db_pool_min, 0),
                pool_pre_ping=True,
            )
        except Exception as e:
            raise DatabaseError(
                message="Database initialization failed",
                details={"error": str(e)},
            ) from e

        cls._session_factory = async_sessionmaker(
            cls._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            "Database engine created",
            pool_min=settings.db_pool_min,
            pool_max=settings.db_pool_max,
        )
        return cls._engine

    @classmethod
    async def close(cls) -> None:
        """Dispose of the engine; safe to call when nothing is open."""
        if cls._engine is None:
            return

        engine = cls._engine
        cls._engine = None
        cls._session_factory = None
        await engine.dispose()
        logger.info("Database engine disposed")

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        """
        Return the engine.

        Raises:
            DatabaseError: If ``initialize`` has not run
        """
        if cls._engine is None:
            raise DatabaseError(message="Database not initialized", details=_NOT_INITIALIZED)
        return cls._engine

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Borrow a session that commits on clean exit and rolls back otherwise.

        Raises:
            DatabaseError: If ``initialize`` has not run
        """
        if cls._session_factory is None:
            raise DatabaseError(message="Database not initialized", details=_NOT_INITIALIZED)

        async with cls._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                logger.warning("Session rolled back")
                raise

    @classmethod
    async def ping(cls) -> float:
        """
        Round-trip ``SELECT 1``.

        Returns:
            Latency in milliseconds

        Raises:
            DatabaseError: If the database cannot be reached
        """
        engine = cls.get_engine()
        start = time.perf_counter()

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseError(
                message="Database not reachable",
                details={"error": str(e)},
            ) from e

        return (time.perf_counter() - start) * 1000
