from typing import Any, AsyncGenerator

from sqlalchemy import NullPool
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tutorhub.config import get_settings
from tutorhub.model import Base

settings = get_settings()


def build_engine(database_url: str) -> AsyncEngine:
    # No pooling: one connection per request session, for PostgreSQL and SQLite alike
    return create_async_engine(database_url, echo=settings.database_echo, poolclass=NullPool)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession | Any, Any]:
    async with AsyncSessionLocal() as session:
        yield session


async def create_schema(bind: AsyncEngine = engine):
    """Create every table that does not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    if settings.environment == "development":
        await create_schema()


async def close_db():
    await engine.dispose()
