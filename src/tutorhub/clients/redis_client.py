"""
Redis client for distributed locking and short-lived caching.

Features:
    - Distributed lock per (course, day) so two bulk attendance writes for
      the same class session cannot interleave their delete/recreate steps
    - JSON cache with TTL for expensive read models (dashboard statistics)

Every feature degrades to a no-op when Redis is not configured.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from tutorhub.config import Settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client for locking and caching"""

    def __init__(self, settings: Settings, client: Optional[Redis] = None):
        self._redis_url = settings.redis_url
        self._lock_ttl = settings.attendance_lock_ttl
        self._cache_ttl = settings.dashboard_cache_ttl
        # An already connected client can be handed in; otherwise connect() builds one
        self._client: Optional[Redis] = client

    async def connect(self):
        """Establish Redis connection"""
        if not self._redis_url:
            logger.warning("Redis URL not configured, Redis features disabled")
            return

        try:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True
            )
            await self._client.ping()
            logger.info("Redis connection established successfully")
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._client = None

    async def disconnect(self):
        """Close Redis connection"""
        if self._client:
            await self._client.aclose()
            logger.info("Redis connection closed")

    def is_configured(self) -> bool:
        """True when a Redis URL is set, whether or not the connection succeeded"""
        return bool(self._redis_url)

    def is_available(self) -> bool:
        """Check if Redis is available"""
        return self._client is not None

    async def ping(self) -> bool:
        if not self.is_available():
            return False
        return await self._client.ping()

    # =============================
    #   Distributed Lock
    # =============================
    @staticmethod
    def _attendance_lock_key(course_id: int, day: date) -> str:
        return f"attendance:lock:{course_id}:{day.isoformat()}"

    @asynccontextmanager
    async def acquire_attendance_lock(self, course_id: int, day: date):
        """
        Acquire the lock guarding bulk attendance for one course and day.

        Args:
            course_id: Course whose session is being written
            day: Calendar day of the session

        Raises:
            LockError: If another bulk write for the same course and day holds the lock
        """
        if not self.is_available():
            yield True
            return

        lock_key = self._attendance_lock_key(course_id, day)
        lock = self._client.lock(lock_key, timeout=self._lock_ttl, blocking=False)

        acquired = await lock.acquire(blocking=False)
        if not acquired:
            raise LockError(f"Attendance for course {course_id} on {day} is being saved")

        logger.debug(f"Acquired lock {lock_key}")
        try:
            yield True
        finally:
            try:
                await lock.release()
            except LockError:
                # Lock expired before release
                logger.warning(f"Lock {lock_key} expired before release")

    # =============================
    #   Cache
    # =============================
    async def get_json(self, key: str) -> Optional[Any]:
        if not self.is_available():
            return None

        try:
            data = await self._client.get(key)
        except RedisError as e:
            logger.error(f"Failed to read cache key {key}: {e}")
            return None
        return json.loads(data) if data else None

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None):
        if not self.is_available():
            return

        try:
            await self._client.setex(key, ttl or self._cache_ttl, json.dumps(value))
        except RedisError as e:
            logger.error(f"Failed to write cache key {key}: {e}")
