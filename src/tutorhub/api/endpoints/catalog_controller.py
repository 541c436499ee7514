import logging
from typing import List

from fastapi import APIRouter, Depends, status

from tutorhub.dependencies.auth import get_current_user, require_admin
from tutorhub.dependencies.services import (
    get_category_service,
    get_course_format_service,
    get_course_type_service,
    get_curriculum_service,
)
from tutorhub.model.user_models import User
from tutorhub.schemas.catalog import (
    CatalogEntryCreate,
    CatalogEntryResponse,
    CatalogEntryUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CurriculumCreate,
    CurriculumResponse,
    CurriculumUpdate,
)
from tutorhub.schemas.generic import ApiResponse
from tutorhub.services.catalog_service import CatalogService, CurriculumService

logger = logging.getLogger(__name__)

categories_router = APIRouter(prefix="/categories", tags=["Categories"])
course_types_router = APIRouter(prefix="/course-types", tags=["Course Types"])
course_formats_router = APIRouter(prefix="/course-formats", tags=["Course Formats"])
curriculum_router = APIRouter(prefix="/curriculum", tags=["Curriculum"])


# =============================
#   Categories
# =============================
@categories_router.get(
    "",
    response_model=ApiResponse[List[CategoryResponse]],
    summary="List categories",
    description="Active categories ordered by sort order, each with its course count.",
)
async def list_categories(
        include_inactive: bool = False,
        _: User = Depends(get_current_user),
        category_service: CatalogService = Depends(get_category_service),
) -> ApiResponse[List[CategoryResponse]]:
    categories = await category_service.list_entries(include_inactive)
    return ApiResponse[List[CategoryResponse]].ok(data=categories)


@categories_router.post(
    "",
    response_model=ApiResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
        request: CategoryCreate,
        _: User = Depends(require_admin),
        category_service: CatalogService = Depends(get_category_service),
) -> ApiResponse[CategoryResponse]:
    logger.info(f"Creating category {request.name}")
    category = await category_service.create_entry(request)
    return ApiResponse[CategoryResponse].ok(data=category, message="Category created successfully")


@categories_router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
async def get_category(
        category_id: int,
        _: User = Depends(get_current_user),
        category_service: CatalogService = Depends(get_category_service),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.get_entry(category_id)
    return ApiResponse[CategoryResponse].ok(data=category)


@categories_router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
async def update_category(
        category_id: int,
        request: CategoryUpdate,
        _: User = Depends(require_admin),
        category_service: CatalogService = Depends(get_category_service),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.update_entry(category_id, request)
    return ApiResponse[CategoryResponse].ok(data=category, message="Category updated successfully")


@categories_router.delete("/{category_id}", response_model=ApiResponse[CategoryResponse])
async def delete_category(
        category_id: int,
        _: User = Depends(require_admin),
        category_service: CatalogService = Depends(get_category_service),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.archive_entry(category_id)
    return ApiResponse[CategoryResponse].ok(data=category, message="Category archived successfully")


# =============================
#   Course types
# =============================
@course_types_router.get("", response_model=ApiResponse[List[CatalogEntryResponse]])
async def list_course_types(
        include_inactive: bool = False,
        _: User = Depends(get_current_user),
        course_type_service: CatalogService = Depends(get_course_type_service),
) -> ApiResponse[List[CatalogEntryResponse]]:
    course_types = await course_type_service.list_entries(include_inactive)
    return ApiResponse[List[CatalogEntryResponse]].ok(data=course_types)


@course_types_router.post(
    "",
    response_model=ApiResponse[CatalogEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_course_type(
        request: CatalogEntryCreate,
        _: User = Depends(require_admin),
        course_type_service: CatalogService = Depends(get_course_type_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_type = await course_type_service.create_entry(request)
    return ApiResponse[CatalogEntryResponse].ok(data=course_type, message="Course type created successfully")


@course_types_router.put("/{course_type_id}", response_model=ApiResponse[CatalogEntryResponse])
async def update_course_type(
        course_type_id: int,
        request: CatalogEntryUpdate,
        _: User = Depends(require_admin),
        course_type_service: CatalogService = Depends(get_course_type_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_type = await course_type_service.update_entry(course_type_id, request)
    return ApiResponse[CatalogEntryResponse].ok(data=course_type, message="Course type updated successfully")


@course_types_router.delete("/{course_type_id}", response_model=ApiResponse[CatalogEntryResponse])
async def delete_course_type(
        course_type_id: int,
        _: User = Depends(require_admin),
        course_type_service: CatalogService = Depends(get_course_type_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_type = await course_type_service.archive_entry(course_type_id)
    return ApiResponse[CatalogEntryResponse].ok(data=course_type, message="Course type archived successfully")


# =============================
#   Course formats
# =============================
@course_formats_router.get("", response_model=ApiResponse[List[CatalogEntryResponse]])
async def list_course_formats(
        include_inactive: bool = False,
        _: User = Depends(get_current_user),
        course_format_service: CatalogService = Depends(get_course_format_service),
) -> ApiResponse[List[CatalogEntryResponse]]:
    course_formats = await course_format_service.list_entries(include_inactive)
    return ApiResponse[List[CatalogEntryResponse]].ok(data=course_formats)


@course_formats_router.post(
    "",
    response_model=ApiResponse[CatalogEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_course_format(
        request: CatalogEntryCreate,
        _: User = Depends(require_admin),
        course_format_service: CatalogService = Depends(get_course_format_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_format = await course_format_service.create_entry(request)
    return ApiResponse[CatalogEntryResponse].ok(data=course_format, message="Course format created successfully")


@course_formats_router.put("/{course_format_id}", response_model=ApiResponse[CatalogEntryResponse])
async def update_course_format(
        course_format_id: int,
        request: CatalogEntryUpdate,
        _: User = Depends(require_admin),
        course_format_service: CatalogService = Depends(get_course_format_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_format = await course_format_service.update_entry(course_format_id, request)
    return ApiResponse[CatalogEntryResponse].ok(data=course_format, message="Course format updated successfully")


@course_formats_router.delete("/{course_format_id}", response_model=ApiResponse[CatalogEntryResponse])
async def delete_course_format(
        course_format_id: int,
        _: User = Depends(require_admin),
        course_format_service: CatalogService = Depends(get_course_format_service),
) -> ApiResponse[CatalogEntryResponse]:
    course_format = await course_format_service.archive_entry(course_format_id)
    return ApiResponse[CatalogEntryResponse].ok(data=course_format, message="Course format archived successfully")


# =============================
#   Curriculum
# =============================
@curriculum_router.get("", response_model=ApiResponse[List[CurriculumResponse]])
async def list_curricula(
        _: User = Depends(get_current_user),
        curriculum_service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[List[CurriculumResponse]]:
    curricula = await curriculum_service.list_curricula()
    return ApiResponse[List[CurriculumResponse]].ok(data=[CurriculumResponse.model_validate(c) for c in curricula])


@curriculum_router.post(
    "",
    response_model=ApiResponse[CurriculumResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create curriculum",
    description="The (name, type, level) triple must be unique.",
)
async def create_curriculum(
        request: CurriculumCreate,
        _: User = Depends(require_admin),
        curriculum_service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[CurriculumResponse]:
    logger.info(f"Creating curriculum {request.name} ({request.type}, {request.level})")
    curriculum = await curriculum_service.create_curriculum(request)
    return ApiResponse[CurriculumResponse].ok(
        data=CurriculumResponse.model_validate(curriculum), message="Curriculum created successfully"
    )


@curriculum_router.put("/{curriculum_id}", response_model=ApiResponse[CurriculumResponse])
async def update_curriculum(
        curriculum_id: int,
        request: CurriculumUpdate,
        _: User = Depends(require_admin),
        curriculum_service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[CurriculumResponse]:
    curriculum = await curriculum_service.update_curriculum(curriculum_id, request)
    return ApiResponse[CurriculumResponse].ok(
        data=CurriculumResponse.model_validate(curriculum), message="Curriculum updated successfully"
    )


@curriculum_router.delete("/{curriculum_id}", response_model=ApiResponse[CurriculumResponse])
async def delete_curriculum(
        curriculum_id: int,
        _: User = Depends(require_admin),
        curriculum_service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[CurriculumResponse]:
    curriculum = await curriculum_service.archive_curriculum(curriculum_id)
    return ApiResponse[CurriculumResponse].ok(
        data=CurriculumResponse.model_validate(curriculum), message="Curriculum archived successfully"
    )
