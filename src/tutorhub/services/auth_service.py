"""
Auth Service - credentials, bearer tokens and password recovery
"""
import logging
from datetime import timedelta

import jwt
from fastapi import Request
from werkzeug.security import check_password_hash, generate_password_hash

from tutorhub.config import Settings
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.model.user_models import User
from tutorhub.repositories.user_repo import PasswordResetTokenRepository, UserRepository
from tutorhub.schemas.auth import TokenResponse
from tutorhub.schemas.user import UserSummary
from tutorhub.utils.date_utils import utcnow
from tutorhub.utils.exceptions import BadRequestException, UnauthorizedException
from tutorhub.utils.text_utils import random_token

logger = logging.getLogger(__name__)

# Only these roles may recover a password through the public reset flow
RESETTABLE_ROLES = (UserRole.STUDENT, UserRole.TUTOR)


class AuthService:
    def __init__(
            self,
            settings: Settings,
            user_repository: UserRepository,
            token_repository: PasswordResetTokenRepository,
    ):
        self._settings = settings
        self._user_repository = user_repository
        self._token_repository = token_repository

    # =============================
    #   Passwords & tokens
    # =============================
    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password)

    @staticmethod
    def verify_password(password_hash: str | None, password: str) -> bool:
        if not password_hash:
            return False
        return check_password_hash(password_hash, password)

    @staticmethod
    def create_access_token(user: User, settings: Settings) -> str:
        now = utcnow()
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "status": user.status.value,
            "iat": now,
            "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    @staticmethod
    def get_decoded_jwt(request: Request, settings: Settings) -> dict:
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise UnauthorizedException("Authorization header missing")
        if not auth_header.startswith("Bearer "):
            raise UnauthorizedException("Invalid Authorization header format")

        token = auth_header.split(" ", 1)[1].strip()
        try:
            decoded = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedException("Token expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedException("Invalid token")

        if not str(decoded.get("sub", "")).isdigit():
            raise UnauthorizedException("Invalid token")
        return decoded

    # =============================
    #   Login
    # =============================
    async def login(self, email: str, password: str) -> TokenResponse:
        user = await self._user_repository.get_by_email(email)
        if not user or not self.verify_password(user.password_hash, password):
            logger.info(f"Failed login attempt for {email}")
            raise UnauthorizedException("Invalid email or password")
        if user.status != UserStatus.ACTIVE:
            raise UnauthorizedException("Account is not active")

        await self._user_repository.update(user, {"last_login": utcnow()})
        logger.info(f"User {user.id} logged in")

        return TokenResponse(
            access_token=self.create_access_token(user, self._settings),
            expires_in=self._settings.access_token_expire_minutes * 60,
            user=UserSummary.model_validate(user),
        )

    async def email_exists(self, email: str) -> bool:
        return await self._user_repository.get_by_email(email) is not None

    # =============================
    #   Password recovery
    # =============================
    async def forgot_password(self, email: str) -> None:
        """
        Issue a reset token when the account may use self-service recovery.

        Always returns normally so callers cannot discover which emails exist.
        """
        user = await self._user_repository.get_by_email(email)
        if not user or user.role not in RESETTABLE_ROLES:
            logger.info(f"Password reset requested for unknown or non-resettable account {email}")
            return

        token = random_token()
        await self._token_repository.create(
            {
                "user_id": user.id,
                "token": token,
                "expires_at": utcnow() + timedelta(minutes=self._settings.password_reset_ttl_minutes),
            }
        )
        # Delivery is out of band; the link is logged for operators
        logger.info(
            f"Password reset link for user {user.id}: "
            f"{self._settings.app_url}/reset-password?token={token}"
        )

    async def reset_password(self, token: str, password: str) -> None:
        now = utcnow()
        reset = await self._token_repository.get_by_token(token)
        if not reset or reset.used_at is not None:
            raise BadRequestException("Invalid or already used reset token")
        if reset.expires_at < now:
            raise BadRequestException("Reset token has expired")

        user = await self._user_repository.get_by_id(reset.user_id)
        if not user:
            raise BadRequestException("Invalid or already used reset token")

        user.password_hash = self.hash_password(password)
        reset.used_at = now
        await self._token_repository.purge_expired(user.id, now)
        await self._token_repository.commit()
        logger.info(f"Password reset completed for user {user.id}")

    # =============================
    #   Bootstrap
    # =============================
    async def super_admin_exists(self) -> bool:
        return await self._user_repository.count_by_filters({"role": UserRole.SUPER_ADMIN}) > 0

    async def setup_super_admin(self) -> tuple[User, bool]:
        """
        Create the first super admin from configured credentials.

        Returns:
            (super admin, created) where created is False when one already existed
        """
        existing = await self._user_repository.get_by_field("role", UserRole.SUPER_ADMIN)
        if existing:
            return existing, False

        user = await self._user_repository.create(
            {
                "email": self._settings.superadmin_email.lower(),
                "name": self._settings.superadmin_name,
                "password_hash": self.hash_password(self._settings.superadmin_password),
                "role": UserRole.SUPER_ADMIN,
                "status": UserStatus.ACTIVE,
            }
        )
        logger.info(f"Super admin {user.email} created")
        return user, True
