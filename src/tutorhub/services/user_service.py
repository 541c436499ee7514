"""
User Service - admin user management, student lookups and self-service profile
"""
import logging
from typing import Optional, Sequence

from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.model.user_models import User
from tutorhub.repositories.course_repo import CourseTutorRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.enrollment import StudentDetail, StudentEnrollment
from tutorhub.schemas.generic import Pagination
from tutorhub.schemas.user import (
    ProfileUpdateRequest,
    StudentUpdateRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from tutorhub.services.auth_service import AuthService
from tutorhub.utils.exceptions import (
    AccessDeniedException,
    ConflictException,
    ResourceNotFoundException,
)
from tutorhub.utils.text_utils import random_password

logger = logging.getLogger(__name__)

ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class UserService:
    def __init__(
            self,
            user_repository: UserRepository,
            enrollment_repository: EnrollmentRepository,
            course_tutor_repository: CourseTutorRepository,
    ):
        self._user_repository = user_repository
        self._enrollment_repository = enrollment_repository
        self._course_tutor_repository = course_tutor_repository

    async def list_users(
            self,
            search: Optional[str],
            role: Optional[UserRole],
            status: Optional[UserStatus],
            sort_by: str,
            sort_desc: bool,
            page: int,
            limit: int,
    ) -> UserListResponse:
        users, total = await self._user_repository.search(
            search=search,
            role=role,
            status=status,
            sort_by=sort_by,
            sort_desc=sort_desc,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return UserListResponse(
            items=[UserResponse.model_validate(u) for u in users],
            pagination=Pagination.build(page, limit, total),
            stats=await self._user_repository.count_by_role(),
        )

    async def get_user(self, user_id: int) -> User:
        user = await self._user_repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFoundException(f"User not found with ID: {user_id}")
        return user

    async def create_user(self, request: UserCreateRequest, actor: User) -> User:
        if request.role in ADMIN_ROLES and actor.role != UserRole.SUPER_ADMIN:
            raise AccessDeniedException("Only a super admin can create admin accounts")

        email = request.email.lower()
        if await self._user_repository.get_by_email(email):
            raise ConflictException("A user with this email already exists")

        data = request.model_dump(exclude_none=True)
        data["email"] = email
        # Users choose their own password through the reset flow
        data["password_hash"] = AuthService.hash_password(random_password())
        user = await self._user_repository.create(data)
        logger.info(f"User {user.id} ({user.role.value}) created by {actor.id}")
        return user

    async def update_user(self, user_id: int, request: UserUpdateRequest, actor: User) -> User:
        user = await self.get_user(user_id)

        if actor.role == UserRole.ADMIN and user.role in ADMIN_ROLES and user.id != actor.id:
            raise AccessDeniedException("Admins cannot modify other admin accounts")
        if request.role in ADMIN_ROLES and actor.role != UserRole.SUPER_ADMIN:
            raise AccessDeniedException("Only a super admin can assign admin roles")

        data = request.model_dump(exclude_unset=True)
        if "email" in data and data["email"] is not None:
            data["email"] = data["email"].lower()
            if await self._user_repository.exists_by_field("email", data["email"], exclude_id=user.id):
                raise ConflictException("Email is already in use by another account")

        password = data.pop("password", None)
        if password:
            data["password_hash"] = AuthService.hash_password(password)

        user = await self._user_repository.update(user, data)
        logger.info(f"User {user.id} updated by {actor.id}")
        return user

    async def delete_user(self, user_id: int, actor: User) -> User:
        """Soft delete: the account is switched to INACTIVE."""
        user = await self.get_user(user_id)

        if user.id == actor.id:
            raise AccessDeniedException("You cannot delete your own account")
        if actor.role == UserRole.ADMIN and user.role in ADMIN_ROLES:
            raise AccessDeniedException("Admins cannot delete admin accounts")

        if await self._enrollment_repository.count_for_student(user.id):
            raise ConflictException("User has enrollments and cannot be deleted")
        if await self._course_tutor_repository.count_by_filters({"tutor_id": user.id}):
            raise ConflictException("User is assigned to courses and cannot be deleted")

        user = await self._user_repository.update(user, {"status": UserStatus.INACTIVE})
        logger.info(f"User {user.id} deactivated by {actor.id}")
        return user

    # =============================
    #   Students
    # =============================
    async def list_students(self, search: Optional[str]) -> Sequence[User]:
        return await self._user_repository.list_students(search)

    async def email_exists(self, email: str) -> bool:
        return await self._user_repository.get_by_email(email) is not None

    async def get_student(self, student_id: int) -> StudentDetail:
        student = await self._require_student(student_id)
        enrollments = await self._enrollment_repository.with_payments_for_student(student.id)
        return StudentDetail(
            **UserResponse.model_validate(student).model_dump(),
            enrollments=[StudentEnrollment.model_validate(e) for e in enrollments],
            enrollment_count=len(enrollments),
        )

    async def update_student(self, student_id: int, request: StudentUpdateRequest, actor: User) -> StudentDetail:
        student = await self._require_student(student_id)
        await self._user_repository.update(student, request.model_dump(exclude_unset=True))
        logger.info(f"Student {student_id} updated by {actor.id}")
        return await self.get_student(student_id)

    async def _require_student(self, student_id: int) -> User:
        student = await self._user_repository.get_by_id(student_id)
        if not student or student.role != UserRole.STUDENT:
            raise ResourceNotFoundException(f"Student not found with ID: {student_id}")
        return student

    # =============================
    #   Profile
    # =============================
    async def update_profile(self, user: User, request: ProfileUpdateRequest) -> User:
        data = request.model_dump(exclude_unset=True)
        if data.get("avatar") == "":
            data["avatar"] = None
        if "name" in data and data["name"] is None:
            data.pop("name")
        return await self._user_repository.update(user, data)
