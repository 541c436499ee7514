import logging

from fastapi import APIRouter, Depends

from tutorhub.dependencies.auth import get_current_user, require_admin
from tutorhub.dependencies.services import get_settings_service
from tutorhub.model.user_models import User
from tutorhub.schemas.generic import ApiResponse
from tutorhub.schemas.settings import SettingsResponse, SettingsUpdate
from tutorhub.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=ApiResponse[SettingsResponse], summary="Institution settings")
async def get_settings(
        _: User = Depends(get_current_user),
        settings_service: SettingsService = Depends(get_settings_service),
) -> ApiResponse[SettingsResponse]:
    institution = await settings_service.get_settings()
    return ApiResponse[SettingsResponse].ok(data=SettingsResponse.model_validate(institution))


@router.put(
    "",
    response_model=ApiResponse[SettingsResponse],
    summary="Update institution settings",
    description="Replaces the active settings document.",
)
async def update_settings(
        request: SettingsUpdate,
        user: User = Depends(require_admin),
        settings_service: SettingsService = Depends(get_settings_service),
) -> ApiResponse[SettingsResponse]:
    logger.info(f"Settings updated by {user.id}")
    institution = await settings_service.update_settings(request)
    return ApiResponse[SettingsResponse].ok(
        data=SettingsResponse.model_validate(institution), message="Settings updated successfully"
    )
