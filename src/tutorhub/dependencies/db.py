from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.db.session import get_db


async def get_database() -> AsyncGenerator[AsyncSession | Any, Any]:
    """
    Dependency that injects the request-scoped database session
    """
    async for session in get_db():
        yield session
