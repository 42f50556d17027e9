# exam_logistics/database.py

"""
Async database access for the allocation service.

PostgreSQL (asyncpg) is the deployment target; SQLite (aiosqlite) is accepted
for tests and local runs.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models.base import Base

logger = logging.getLogger(__name__)


def _normalize_url(db_url: str) -> str:
    # Convert sync prefixes to their async drivers
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("sqlite://") and "+aiosqlite" not in db_url:
        return db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


class DatabaseManager:
    """Manages async SQLAlchemy engine and async session factory."""

    def __init__(self) -> None:
        self.engine: Optional[AsyncEngine] = None
        self.AsyncSessionLocal: Optional[async_sessionmaker] = None
        self._is_initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    def bind(self, engine: AsyncEngine) -> None:
        """Attach an already-built engine (used by tests and embedding callers)."""
        self.engine = engine
        self.AsyncSessionLocal = async_sessionmaker(
            bind=engine, expire_on_commit=False, class_=AsyncSession
        )
        self._is_initialized = True

    async def initialize(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
        max_retries: int = 3,
        retry_delay: int = 1,
    ) -> None:
        """
        Initialize async engine and async session factory.
        Retries on failure.
        """
        if self._is_initialized:
            logger.warning("Database already initialized")
            return

        if not database_url:
            raise ValueError(
                "Database URL is required and must be async driver compatible"
            )
        db_url = _normalize_url(database_url)

        last_error: Optional[Exception] = None
        for attempt in range(max_retries):
            try:
                if db_url.startswith("sqlite"):
                    engine = create_async_engine(
                        db_url,
                        echo=echo,
                        poolclass=StaticPool,
                        connect_args={"check_same_thread": False},
                    )
                else:
                    engine = create_async_engine(
                        db_url,
                        echo=echo,
                        pool_size=pool_size,
                        max_overflow=max_overflow,
                        pool_timeout=pool_timeout,
                        pool_recycle=pool_recycle,
                        pool_pre_ping=True,
                    )

                self.bind(engine)
                await self._test_connection()
                logger.info("Async database initialized successfully")
                return
            except Exception as e:
                last_error = e
                self._is_initialized = False
                logger.error(
                    f"Database initialization attempt {attempt + 1}/{max_retries} failed: {e}"
                )
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay * (attempt + 1))

        raise RuntimeError(
            f"Failed to initialize async database after {max_retries} attempts"
        ) from last_error

    async def _test_connection(self) -> None:
        """Run a lightweight query to ensure connectivity."""
        if self.engine is None:
            raise RuntimeError("Engine not initialized")

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection test successful")

    async def create_all_tables(self) -> None:
        if self.engine is None:
            raise RuntimeError("Engine not initialized")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("All tables created successfully")

    async def get_connection_info(self) -> Dict[str, Any]:
        """Return pool information when available."""
        if not self.engine:
            return {"status": "Engine not initialized"}

        pool = self.engine.sync_engine.pool
        return {"pool": pool.__class__.__name__, "status": pool.status()}

    async def close(self) -> None:
        """Dispose the async engine."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.AsyncSessionLocal = None
        self._is_initialized = False


# Global manager
db_manager = DatabaseManager()


# FastAPI dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    if not db_manager.is_initialized or not db_manager.AsyncSessionLocal:
        raise RuntimeError("Database not initialized. Call initialize() first.")

    async with db_manager.AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise


async def init_db(
    database_url: str,
    create_tables: bool = False,
    **engine_options: Any,
) -> None:
    """Initialize the async database and optionally create the tables."""
    await db_manager.initialize(database_url=database_url, **engine_options)

    if create_tables:
        await db_manager.create_all_tables()


async def check_db_health() -> Dict[str, Any]:
    """Async health check."""
    try:
        engine = db_manager.engine
        if engine is None:
            raise RuntimeError("Engine not initialized")

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        info = await db_manager.get_connection_info()
        return {
            "status": "healthy",
            "connection_pool": info,
            "message": "Database is accessible",
        }
    except (SQLAlchemyError, RuntimeError, OSError) as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "message": "Database connection failed",
        }


__all__ = [
    "Base",
    "DatabaseManager",
    "db_manager",
    "get_db",
    "init_db",
    "check_db_health",
]
