import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.cors import CORSMiddleware

from tutorhub.api.router import api_router
from tutorhub.clients.redis_client import RedisClient
from tutorhub.config import get_settings
from tutorhub.db.session import close_db, init_db
from tutorhub.dependencies.db import get_database
from tutorhub.dependencies.services import close_redis_client, get_redis_client
from tutorhub.schemas.generic import HealthResponse
from tutorhub.utils.exception_handlers import register_exception_handlers
from tutorhub.utils.log import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator:
    """Lifecycle events"""
    # STARTUP
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version} ({settings.environment})")
    await init_db()

    redis_client = await get_redis_client()
    if redis_client.is_available():
        logger.info("Redis client initialized")
    else:
        logger.info("Running without Redis: attendance locks and dashboard cache disabled")

    yield

    # SHUTDOWN
    logger.info(f"🛑 Shutting down {settings.app_name}")
    await close_db()
    await close_redis_client()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Tutoring institution management API",
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.get("/health", response_model=HealthResponse)
async def health_check(
        session: AsyncSession = Depends(get_database),
        redis_client: RedisClient = Depends(get_redis_client),
):
    """Liveness plus a round trip to the database and, when configured, Redis."""
    try:
        await session.execute(text("SELECT 1"))
        database = "up"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        database = "down"

    if not redis_client.is_configured():
        redis = "disabled"
    elif not redis_client.is_available():
        # Configured but the startup connection failed
        redis = "down"
    else:
        try:
            redis = "up" if await redis_client.ping() else "down"
        except RedisError as e:
            logger.error(f"Health check Redis error: {e}")
            redis = "down"

    return HealthResponse(
        status="healthy" if database == "up" and redis != "down" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        redis=redis,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tutorhub.main:app", host=settings.app_host, port=settings.app_port)
