import logging

from fastapi import APIRouter, Depends, status

from tutorhub.dependencies.auth import get_current_user
from tutorhub.dependencies.services import get_auth_service
from tutorhub.model.user_models import User
from tutorhub.schemas.auth import (
    EmailRequest,
    LoginRequest,
    ResetPasswordRequest,
    SetupStatusResponse,
    TokenResponse,
)
from tutorhub.schemas.generic import ApiResponse
from tutorhub.schemas.user import EmailExistsResponse, UserResponse
from tutorhub.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])
setup_router = APIRouter(prefix="/setup", tags=["Setup"])


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    summary="Login",
    description="Exchange email and password for a bearer token.",
)
async def login(
        request: LoginRequest,
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[TokenResponse]:
    """
    Authenticate with email and password.

    Raises:
        - 401 Unauthorized: unknown email, wrong password or inactive account
    """
    logger.info(f"Login attempt for {request.email}")
    token = await auth_service.login(request.email, request.password)
    return ApiResponse[TokenResponse].ok(data=token, message="Login successful")


@router.get("/me", response_model=ApiResponse[UserResponse], summary="Current user")
async def me(user: User = Depends(get_current_user)) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user))


@router.post("/check-email", response_model=ApiResponse[EmailExistsResponse], summary="Check email")
async def check_email(
        request: EmailRequest,
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[EmailExistsResponse]:
    exists = await auth_service.email_exists(request.email)
    return ApiResponse[EmailExistsResponse].ok(data=EmailExistsResponse(email=request.email, exists=exists))


@router.post(
    "/password/forgot",
    response_model=ApiResponse[None],
    summary="Request a password reset",
    description="Always succeeds so that registered emails cannot be discovered.",
)
async def forgot_password(
        request: EmailRequest,
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    await auth_service.forgot_password(request.email)
    return ApiResponse[None].ok(
        message="If an account exists for this email, a password reset link has been sent"
    )


@router.post("/password/reset", response_model=ApiResponse[None], summary="Reset password")
async def reset_password(
        request: ResetPasswordRequest,
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    """
    Set a new password with a reset token.

    Raises:
        - 400 Bad Request: unknown, used or expired token
    """
    await auth_service.reset_password(request.token, request.password)
    return ApiResponse[None].ok(message="Password has been reset successfully")


# =============================
#   First-run setup
# =============================
@setup_router.get("/superadmin", response_model=ApiResponse[SetupStatusResponse])
async def super_admin_status(
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[SetupStatusResponse]:
    exists = await auth_service.super_admin_exists()
    return ApiResponse[SetupStatusResponse].ok(data=SetupStatusResponse(exists=exists))


@setup_router.post(
    "/superadmin",
    response_model=ApiResponse[UserResponse],
    summary="Create the super admin",
    description="Creates the super admin from configured credentials when none exists yet.",
)
async def setup_super_admin(
        auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserResponse]:
    user, created = await auth_service.setup_super_admin()
    message = "Super admin created successfully" if created else "Super admin already exists"
    return ApiResponse[UserResponse].ok(data=UserResponse.model_validate(user), message=message)
