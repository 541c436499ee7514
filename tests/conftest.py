"""Shared fixtures: isolated SQLite database per test, API client, users and tokens."""

import asyncio
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./tutorhub-unused.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from tutorhub.config import get_settings
from tutorhub.db.session import build_engine, build_session_factory, create_schema
from tutorhub.dependencies.db import get_database
from tutorhub.main import app
from tutorhub.model import User
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.services.auth_service import AuthService

PASSWORD = "Password123!"


class Database:
    """Synchronous access to the test database for arranging data."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._counter = 0

    def run(self, fn):
        """Run fn(session) in a fresh session and return its result."""

        async def runner():
            async with self.session_factory() as session:
                return await fn(session)

        return asyncio.run(runner())

    def add(self, *objs):
        async def fn(session):
            session.add_all(objs)
            await session.commit()
            return objs

        result = self.run(fn)
        return result[0] if len(result) == 1 else result

    def user(
            self,
            role: UserRole = UserRole.STUDENT,
            email: str = None,
            name: str = None,
            status: UserStatus = UserStatus.ACTIVE,
            password: str = PASSWORD,
    ) -> User:
        self._counter += 1
        label = role.value.lower()
        return self.add(
            User(
                email=email or f"{label}{self._counter}@example.com",
                name=name or f"{label.title()} {self._counter}",
                role=role,
                status=status,
                password_hash=AuthService.hash_password(password),
            )
        )


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    asyncio.run(create_schema(engine))
    yield build_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def db(session_factory):
    return Database(session_factory)


@pytest.fixture
def client(session_factory):
    """API client bound to the per-test database."""

    async def override_get_database():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_database] = override_get_database
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {AuthService.create_access_token(user, get_settings())}"}


@pytest.fixture
def super_admin(db):
    return db.user(UserRole.SUPER_ADMIN, email="root@example.com", name="Root")


@pytest.fixture
def admin(db):
    return db.user(UserRole.ADMIN, email="admin@example.com", name="Admin")


@pytest.fixture
def tutor(db):
    return db.user(UserRole.TUTOR, email="tutor@example.com", name="Tess Tutor")


@pytest.fixture
def student(db):
    return db.user(UserRole.STUDENT, email="student@example.com", name="Sam Student")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def tutor_headers(tutor):
    return auth_headers(tutor)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


@pytest.fixture
def category(client, admin_headers):
    response = client.post("/api/categories", json={"name": "Mathematics"}, headers=admin_headers)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def course(client, admin_headers, category):
    response = client.post(
        "/api/courses",
        json={
            "title": "Algebra Basics",
            "short_description": "Equations and expressions",
            "category_id": category["id"],
            "group_price": 200,
            "status": "PUBLISHED",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def assigned_course(client, admin_headers, course, tutor):
    response = client.put(
        f"/api/courses/{course['id']}/tutors",
        json={"tutor_ids": [tutor.id], "primary_tutor_id": tutor.id},
        headers=admin_headers,
    )
    assert response.status_code == 200
    return course


def enroll(client, headers, student_id: int, course_id: int, **overrides) -> dict:
    payload = {
        "student_id": student_id,
        "course_id": course_id,
        "format": "GROUP",
        "session_count": 10,
        "session_duration": 60,
        "base_price": 100,
    }
    payload.update(overrides)
    response = client.post("/api/enrollments", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def active_enrollment(client, admin_headers, assigned_course, student):
    enrollment = enroll(client, admin_headers, student.id, assigned_course["id"])
    response = client.put(
        f"/api/enrollments/{enrollment['id']}", json={"status": "ACTIVE"}, headers=admin_headers
    )
    assert response.status_code == 200
    return response.json()["data"]
