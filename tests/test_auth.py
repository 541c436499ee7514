"""Tests for login, token handling, password recovery and first-run setup."""

from datetime import timedelta

import jwt
from sqlalchemy import select

from conftest import PASSWORD, auth_headers
from tutorhub.config import get_settings
from tutorhub.model import PasswordResetToken
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.utils.date_utils import utcnow


def reset_tokens(db):
    async def fn(session):
        return (await session.execute(select(PasswordResetToken))).scalars().all()

    return db.run(fn)


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_login_returns_token_and_user(self, client, student):
        response = client.post("/api/auth/login", json={"email": student.email, "password": PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token_type"] == "bearer"
        assert body["data"]["user"]["email"] == student.email

        decoded = jwt.decode(body["data"]["access_token"], "test-secret", algorithms=["HS256"])
        assert decoded["sub"] == str(student.id)
        assert decoded["role"] == "STUDENT"

    def test_login_wrong_password(self, client, student):
        response = client.post("/api/auth/login", json={"email": student.email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_login_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
        assert response.status_code == 401

    def test_login_inactive_user(self, client, db):
        user = db.user(status=UserStatus.INACTIVE)
        response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
        assert response.status_code == 401

    def test_login_updates_last_login(self, client, student, student_headers):
        client.post("/api/auth/login", json={"email": student.email, "password": PASSWORD})
        me = client.get("/api/auth/me", headers=student_headers).json()["data"]
        assert me["last_login"] is not None

    def test_login_validation_error(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email"})
        assert response.status_code == 400
        assert "Validation Error" in response.json()["message"]


class TestBearerToken:
    """Tests for the bearer token dependency."""

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401

    def test_me_with_malformed_header(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_me_with_expired_token(self, client, student):
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(student.id), "exp": utcnow() - timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    def test_me_for_deactivated_user(self, client, db):
        user = db.user(status=UserStatus.SUSPENDED)
        response = client.get("/api/auth/me", headers=auth_headers(user))
        assert response.status_code == 401

    def test_me_returns_current_user(self, client, tutor, tutor_headers):
        response = client.get("/api/auth/me", headers=tutor_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == tutor.id

    def test_wrong_role_is_forbidden(self, client, student_headers):
        response = client.get("/api/users", headers=student_headers)
        assert response.status_code == 403


class TestCheckEmail:
    """Tests for POST /api/auth/check-email."""

    def test_check_email(self, client, student):
        assert client.post("/api/auth/check-email", json={"email": student.email}).json()["data"]["exists"] is True
        assert client.post("/api/auth/check-email", json={"email": "nobody@example.com"}).json()["data"][
            "exists"
        ] is False


class TestPasswordReset:
    """Tests for the forgot/reset password flow."""

    def test_forgot_password_unknown_email_still_succeeds(self, client, db):
        response = client.post("/api/auth/password/forgot", json={"email": "ghost@example.com"})
        assert response.status_code == 200
        assert reset_tokens(db) == []

    def test_forgot_password_skips_admins(self, client, db, admin):
        client.post("/api/auth/password/forgot", json={"email": admin.email})
        assert reset_tokens(db) == []

    def test_full_reset_flow(self, client, db, student):
        client.post("/api/auth/password/forgot", json={"email": student.email})
        tokens = reset_tokens(db)
        assert len(tokens) == 1
        assert tokens[0].expires_at > utcnow() + timedelta(minutes=29)

        response = client.post(
            "/api/auth/password/reset", json={"token": tokens[0].token, "password": "BrandNew123"}
        )
        assert response.status_code == 200

        login = client.post("/api/auth/login", json={"email": student.email, "password": "BrandNew123"})
        assert login.status_code == 200

        again = client.post("/api/auth/password/reset", json={"token": tokens[0].token, "password": "Another123"})
        assert again.status_code == 400

    def test_reset_with_unknown_token(self, client):
        response = client.post("/api/auth/password/reset", json={"token": "missing", "password": "BrandNew123"})
        assert response.status_code == 400

    def test_reset_with_expired_token(self, client, db, student):
        db.add(PasswordResetToken(user_id=student.id, token="stale", expires_at=utcnow() - timedelta(minutes=1)))
        response = client.post("/api/auth/password/reset", json={"token": "stale", "password": "BrandNew123"})
        assert response.status_code == 400
        assert response.json()["message"] == "Reset token has expired"

    def test_reset_requires_eight_characters(self, client):
        response = client.post("/api/auth/password/reset", json={"token": "abc", "password": "short"})
        assert response.status_code == 400


class TestSuperAdminSetup:
    """Tests for /api/setup/superadmin."""

    def test_setup_is_idempotent(self, client):
        assert client.get("/api/setup/superadmin").json()["data"]["exists"] is False

        first = client.post("/api/setup/superadmin")
        assert first.status_code == 200
        assert first.json()["data"]["role"] == UserRole.SUPER_ADMIN.value
        assert first.json()["message"] == "Super admin created successfully"

        second = client.post("/api/setup/superadmin")
        assert second.json()["message"] == "Super admin already exists"
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert client.get("/api/setup/superadmin").json()["data"]["exists"] is True
