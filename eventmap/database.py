"""Database configuration and session management"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import DBAPIError, OperationalError, InterfaceError
from sqlalchemy import text

from eventmap.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

_engine = None
_async_session = None

# Connection error types
CONNECTION_ERRORS = (
    ConnectionError,
    ConnectionRefusedError,
    ConnectionResetError,
    BrokenPipeError,
    TimeoutError,
    asyncio.TimeoutError,
    OSError,
)


def is_connection_error(error: Exception) -> bool:
    """Check if an exception indicates a connection problem"""
    if isinstance(error, CONNECTION_ERRORS):
        return True

    if isinstance(error, (DBAPIError, OperationalError, InterfaceError)):
        error_str = str(error).lower()
        keywords = [
            'connection refused', 'connection reset', 'connection closed',
            'broken pipe', 'timeout', 'connect call failed',
            'server closed the connection', 'could not connect',
        ]
        return any(kw in error_str for kw in keywords)

    return False


def _create_engine(database_url: str):
    """Create a new SQLAlchemy async engine"""
    if database_url.startswith("sqlite"):
        # SQLite (local runs / tests): no server-side pool tuning
        return create_async_engine(database_url, echo=settings.debug)

    return create_async_engine(
        database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_timeout=30,
        connect_args={
            "server_settings": {"timezone": "UTC"},
            "command_timeout": 60,
        }
    )


def init_engine(database_url: str = None):
    """Initialize the database engine and session factory"""
    global _engine, _async_session

    _engine = _create_engine(database_url or settings.database_url)
    _async_session = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )
    logger.info("Database engine initialized")


def get_engine():
    """Return the engine, creating it on first use"""
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Return the session factory, creating the engine on first use"""
    if _async_session is None:
        init_engine()
    return _async_session


# Base class for models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session for one request"""
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            if is_connection_error(e):
                logger.error(f"Database connection error: {e}")
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work on a session: commit when the block succeeds,
    roll back everything written inside it when it raises.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise


async def init_db():
    """Initialize database tables"""
    # Import models so they register with Base.metadata
    from eventmap import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def health_check() -> dict:
    """Check database connection health"""
    start = time.time()
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency = (time.time() - start) * 1000
        return {'healthy': True, 'latency_ms': latency, 'error': None}
    except Exception as e:
        latency = (time.time() - start) * 1000
        logger.warning(f"Database health check failed: {e}")
        return {'healthy': False, 'latency_ms': latency, 'error': str(e)}


async def close_db():
    """Close database engine gracefully"""
    global _engine, _async_session
    if _engine:
        await _engine.dispose()
        _engine = None
        _async_session = None
        logger.info("Database engine closed")
