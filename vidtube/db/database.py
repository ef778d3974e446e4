"""
Database configuration and connection management
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import MetaData
from datetime import datetime, timezone
import structlog

from vidtube.core.config import settings

logger = structlog.get_logger()


def _engine_options(url: str) -> dict:
    options = {
        "echo": settings.DATABASE_ECHO,
        "future": True,
        "pool_pre_ping": True,
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_recycle=300,
            pool_size=5,
            max_overflow=5,
            pool_timeout=30,
        )
    return options


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Create declarative base with naming convention for constraints
metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
})

Base = declarative_base(metadata=metadata)


def utcnow() -> datetime:
    """Timestamp default for model columns (microsecond resolution on every backend)"""
    return datetime.now(timezone.utc)


async def create_tables():
    """Create all database tables when AUTO_CREATE_TABLES is enabled.

    Deployed databases are managed with alembic (`alembic upgrade head`).
    """
    # Import models so they are registered on the metadata
    from vidtube import models  # noqa: F401

    if not settings.AUTO_CREATE_TABLES:
        logger.info("Database table creation skipped - using Alembic migrations")
        return

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def get_db():
    """Database session dependency for FastAPI"""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", error=str(e))
            raise
        finally:
            await session.close()
