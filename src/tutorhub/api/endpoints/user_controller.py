import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from tutorhub.dependencies.auth import get_current_user, require_admin, require_staff
from tutorhub.dependencies.services import get_user_service
from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.model.user_models import User
from tutorhub.schemas.enrollment import StudentDetail
from tutorhub.schemas.generic import ApiResponse
from tutorhub.schemas.user import (
    EmailExistsResponse,
    ProfileUpdateRequest,
    StudentSummary,
    StudentUpdateRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from tutorhub.services.user_service import UserService
from tutorhub.utils.parser_utils import ParserUtils

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])
students_router = APIRouter(prefix="/students", tags=["Students"])
profile_router = APIRouter(prefix="/profile", tags=["Profile"])

SORTABLE_FIELDS = Literal["created_date", "name", "email", "role", "status", "last_login"]


@router.get(
    "",
    response_model=ApiResponse[UserListResponse],
    summary="List users",
    description="Search, filter and page through users, with per-role counts.",
)
async def list_users(
        search: Optional[str] = None,
        role: Optional[str] = Query(None, description="Role name or ALL"),
        user_status: Optional[str] = Query(None, alias="status", description="Status name or ALL"),
        sort_by: SORTABLE_FIELDS = "created_date",
        sort_order: Literal["asc", "desc"] = "desc",
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        _: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserListResponse]:
    result = await user_service.list_users(
        search=search,
        role=ParserUtils.enum_filter(UserRole, role),
        status=ParserUtils.enum_filter(UserStatus, user_status),
        sort_by=sort_by,
        sort_desc=sort_order == "desc",
        page=page,
        limit=limit,
    )
    return ApiResponse[UserListResponse].ok(data=result)


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
        request: UserCreateRequest,
        actor: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    """
    Create a user account. A random password is set; the user chooses
    their own through the password reset flow.

    Raises:
        - 403 Forbidden: a non super admin creating an admin account
        - 409 Conflict: email already registered
    """
    logger.info(f"Admin {actor.id} creating {request.role.value} account {request.email}")
    user = await user_service.create_user(request, actor)
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user), message="User created successfully")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
        user_id: int,
        _: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.get_user(user_id)
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
        user_id: int,
        request: UserUpdateRequest,
        actor: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user(user_id, request, actor)
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user), message="User updated successfully")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Deactivate user",
    description="Soft delete: the account is set to INACTIVE.",
)
async def delete_user(
        user_id: int,
        actor: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.delete_user(user_id, actor)
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user), message="User deleted successfully")


# =============================
#   Students
# =============================
@students_router.get("", response_model=ApiResponse[List[StudentSummary]])
async def list_students(
        search: Optional[str] = None,
        _: User = Depends(require_staff),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[List[StudentSummary]]:
    students = await user_service.list_students(search)
    return ApiResponse[List[StudentSummary]].ok(data=[StudentSummary.model_validate(s) for s in students])


@students_router.get("/check-email", response_model=ApiResponse[EmailExistsResponse])
async def check_student_email(
        email: str = Query(..., min_length=3),
        _: User = Depends(require_staff),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[EmailExistsResponse]:
    exists = await user_service.email_exists(email)
    return ApiResponse[EmailExistsResponse].ok(data=EmailExistsResponse(email=email, exists=exists))


@students_router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentDetail],
    description="404 unless the user exists and is a student.",
)
async def get_student(
        student_id: int,
        _: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[StudentDetail]:
    return ApiResponse[StudentDetail].ok(data=await user_service.get_student(student_id))


@students_router.put("/{student_id}", response_model=ApiResponse[StudentDetail])
async def update_student(
        student_id: int,
        request: StudentUpdateRequest,
        actor: User = Depends(require_admin),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[StudentDetail]:
    student = await user_service.update_student(student_id, request, actor)
    return ApiResponse[StudentDetail].ok(data=student, message="Student updated successfully")


# =============================
#   Profile
# =============================
@profile_router.get("", response_model=ApiResponse[UserResponse])
async def get_profile(user: User = Depends(get_current_user)) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user))


@profile_router.put("", response_model=ApiResponse[UserResponse])
async def update_profile(
        request: ProfileUpdateRequest,
        user: User = Depends(get_current_user),
        user_service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_profile(user, request)
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user), message="Profile updated successfully")
