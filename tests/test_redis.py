"""Tests for the Redis-backed attendance lock, dashboard cache and health report."""

import fakeredis
import pytest

from tutorhub.clients.redis_client import RedisClient
from tutorhub.config import get_settings
from tutorhub.dependencies.services import get_redis_client
from tutorhub.main import app
from tutorhub.model.enums import UserRole

DAY = "2024-03-05"


def redis_settings():
    return get_settings().model_copy(update={"redis_url": "redis://cache.test:6379/0"})


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_store(redis_server):
    """Synchronous view of the same fake server the app talks to."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def redis_api(client, redis_server):
    """API client wired to a fake Redis; one event loop for the whole test."""
    fake = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    redis_client = RedisClient(redis_settings(), client=fake)
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    with client:
        yield client


class TestAttendanceLock:
    """Bulk attendance writes are serialized per course and day."""

    def test_held_lock_rejects_write(self, redis_api, redis_store, student, tutor_headers, active_enrollment):
        course_id = active_enrollment["course_id"]
        lock_key = f"attendance:lock:{course_id}:{DAY}"
        payload = {
            "date": DAY,
            "course_id": course_id,
            "attendance": [{"student_id": student.id, "status": "present"}],
        }
        redis_store.set(lock_key, "another-writer")

        response = redis_api.post("/api/tutor/attendance/bulk", json=payload, headers=tutor_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Attendance for this class is already being saved, try again shortly"

        redis_store.delete(lock_key)
        response = redis_api.post("/api/tutor/attendance/bulk", json=payload, headers=tutor_headers)
        assert response.status_code == 200
        assert response.json()["data"]["records"] == 1
        assert redis_store.exists(lock_key) == 0

    def test_lock_is_per_day(self, redis_api, redis_store, tutor_headers, active_enrollment):
        course_id = active_enrollment["course_id"]
        redis_store.set(f"attendance:lock:{course_id}:2024-03-04", "another-writer")

        response = redis_api.post(
            "/api/tutor/attendance/bulk",
            json={"date": DAY, "course_id": course_id, "cancel_reason": "Snow"},
            headers=tutor_headers,
        )
        assert response.status_code == 200


class TestDashboardCache:
    """Dashboard statistics are cached for a short TTL."""

    def test_second_read_is_served_from_cache(self, redis_api, redis_store, db, admin_headers):
        first = redis_api.get("/api/dashboard/stats", headers=admin_headers).json()["data"]
        assert 0 < redis_store.ttl("dashboard:stats") <= get_settings().dashboard_cache_ttl

        db.user(UserRole.STUDENT)
        second = redis_api.get("/api/dashboard/stats", headers=admin_headers).json()["data"]
        assert second == first
        assert second["statistics"]["total_users"]["count"] == 1

        redis_store.delete("dashboard:stats")
        third = redis_api.get("/api/dashboard/stats", headers=admin_headers).json()["data"]
        assert third["statistics"]["total_users"]["count"] == 2
        assert third["users_by_role"]["STUDENT"] == 1


class TestRedisHealth:
    """Health reports Redis state when a URL is configured."""

    def test_reachable_redis_is_up(self, redis_api):
        body = redis_api.get("/health").json()
        assert body["redis"] == "up"
        assert body["status"] == "healthy"

    def test_configured_but_unconnected_is_down(self, client):
        app.dependency_overrides[get_redis_client] = lambda: RedisClient(redis_settings())
        body = client.get("/health").json()
        assert body["redis"] == "down"
        assert body["status"] == "degraded"
