from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from devon_farm.core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    """Pool and timeout options for the configured driver."""
    if url.startswith("sqlite"):
        return {"future": True, "echo": settings.DEBUG}
    return {
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "future": True,
        "echo": settings.DEBUG,
        # asyncpg aborts any statement that runs longer than this
        "connect_args": {
            "timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
            "command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
        },
    }


# Create engine for PostgreSQL
engine = create_async_engine(settings.POSTGRES_URL, **engine_options(settings.POSTGRES_URL))

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass
