"""
Authentication and role gate dependencies
"""
from fastapi import Depends, Request

from tutorhub.config import Settings, get_settings
from tutorhub.dependencies.repositories import get_user_repository
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.model.user_models import User
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.services.auth_service import AuthService
from tutorhub.utils.exceptions import AccessDeniedException, UnauthorizedException


async def get_current_user(
        request: Request,
        settings: Settings = Depends(get_settings),
        user_repository: UserRepository = Depends(get_user_repository),
) -> User:
    """The ACTIVE user named by the bearer token."""
    decoded = AuthService.get_decoded_jwt(request, settings)

    user = await user_repository.get_by_id(int(decoded["sub"]))
    if not user:
        raise UnauthorizedException("User no longer exists")
    if user.status != UserStatus.ACTIVE:
        raise UnauthorizedException("Account is not active")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory rejecting authenticated users outside the given roles with 403."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AccessDeniedException("You do not have permission to perform this action")
        return user

    return checker


require_admin = require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN)
require_staff = require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.TUTOR)
require_tutor = require_roles(UserRole.TUTOR)
require_student = require_roles(UserRole.STUDENT)
