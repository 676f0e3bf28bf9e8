"""SQLAlchemy base configuration and session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from cpa_auth.core.exceptions import PersistenceError
from cpa_auth.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class DatabaseSessionManager:
    """Manages database engine and session lifecycle."""

    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    def init(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        echo: bool = False,
    ):
        """Initialize database engine and session maker."""
        self._engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            echo=echo,
        )

        self._session_maker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def close(self):
        """Close database engine."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session."""
        if self._session_maker is None:
            raise RuntimeError("Database not initialized")

        async with self._session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run a unit of work that commits entirely or not at all.

    Protocol errors raised inside the block roll the work back and propagate
    unchanged. Database failures, including a failed commit, roll back and
    surface as ``PersistenceError`` so no token is handed out for a row that
    was never stored.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as err:
        await session.rollback()
        logger.error("transaction_failed", operation=operation, error=str(err))
        raise PersistenceError(f"Could not complete {operation}") from err
    except Exception:
        await session.rollback()
        raise


# Global database session manager
db_manager = DatabaseSessionManager()
