import logging
from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from sqlbridge.core.config import settings

logger = logging.getLogger(__name__)


def connect_args() -> Dict[str, Any]:
    """Driver arguments shared by every engine we build."""
    if settings.DB_SSL:
        return {"ssl": settings.DB_SSL}
    return {}


# One pooled engine for the whole process; sessions are handed out per request
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
    connect_args=connect_args(),
)

# Talk to the DB through async sessions without refreshes after closed conn to avoid errors in async programming
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


# This is the "Bridge" that gives my routes access to postgres
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


def create_engine_for(
    database: str, isolation_level: Optional[str] = None
) -> AsyncEngine:
    """
    Build a short-lived, unpooled engine pointing at another database
    on the same server (used for CREATE DATABASE and the tables that follow).
    """
    url = make_url(settings.DATABASE_URL).set(database=database)
    kwargs: Dict[str, Any] = {
        "echo": settings.DB_ECHO,
        "poolclass": NullPool,
        "connect_args": connect_args(),
    }
    if isolation_level:
        kwargs["isolation_level"] = isolation_level
    return create_async_engine(url, **kwargs)


# All the models are "stored" in the Base class will be processed by the Engine
class Base(DeclarativeBase):
    pass


async def rollback_quietly(session: AsyncSession) -> None:
    """Roll back after a failed statement; a rollback that fails too is only logged."""
    try:
        await session.rollback()
    except Exception as error:
        logger.error(f"Rollback failed: {error}")
