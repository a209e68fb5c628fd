"""Database engine and session dependency.

Postgres only holds the per-user sync records, so the pool is small.
"""

from collections.abc import AsyncGenerator

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from src.core.config import settings
from src.core.infrastructure.health import ComponentHealth, HealthStatus

async_engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.ENVIRONMENT == "local",
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One transaction per request; committed when the handler returns."""
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        async with session.begin():
            yield session


async def init_db() -> None:
    try:
        async with async_engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


async def close_db() -> None:
    await async_engine.dispose()


async def check_db_health() -> ComponentHealth:
    try:
        async with async_engine.connect() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return ComponentHealth(status=HealthStatus.ERROR, connected=False, error=str(e))

    return ComponentHealth(
        status=HealthStatus.OK,
        connected=True,
        version=version.split(",")[0] if version else None,
    )
