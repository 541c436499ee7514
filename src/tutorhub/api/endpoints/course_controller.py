import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tutorhub.dependencies.auth import get_current_user, require_admin
from tutorhub.dependencies.services import get_course_service, get_syllabus_service
from tutorhub.model.enums import CourseStatus
from tutorhub.model.user_models import User
from tutorhub.schemas.course import (
    CourseBulkRequest,
    CourseBulkResult,
    CourseCreate,
    CourseDetail,
    CourseListItem,
    CourseTutorResponse,
    CourseTutorsUpdate,
    CourseUpdate,
)
from tutorhub.schemas.generic import ApiResponse, PaginatedData
from tutorhub.schemas.syllabus import ItemCreate, ItemResponse, PhaseCreate, PhaseResponse, SyllabusResponse
from tutorhub.services.course_service import CourseService
from tutorhub.services.syllabus_service import SyllabusService
from tutorhub.utils.parser_utils import ParserUtils

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[CourseListItem]],
    summary="List courses",
    description="Tutors only see the courses they are assigned to.",
)
async def list_courses(
        search: Optional[str] = None,
        course_status: Optional[str] = Query(None, alias="status"),
        category: Optional[str] = Query(None, description="Category slug"),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        user: User = Depends(get_current_user),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[PaginatedData[CourseListItem]]:
    result = await course_service.list_courses(
        actor=user,
        search=search,
        status=ParserUtils.enum_filter(CourseStatus, course_status),
        category_slug=category,
        page=page,
        limit=limit,
    )
    return ApiResponse[PaginatedData[CourseListItem]].ok(data=result)


@router.post(
    "",
    response_model=ApiResponse[CourseDetail],
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
        request: CourseCreate,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseDetail]:
    """
    Create a course; the slug is derived from the title.

    Raises:
        - 400 Bad Request: referenced category, type, format or curriculum does not exist
    """
    logger.info(f"Creating course {request.title}")
    course = await course_service.create_course(request)
    return ApiResponse[CourseDetail].ok(data=course, message="Course created successfully")


@router.post(
    "/bulk",
    response_model=ApiResponse[CourseBulkResult],
    summary="Bulk course action",
    description="publish, archive, delete (archives courses without active enrollments) or assign-tutors.",
)
async def bulk_action(
        request: CourseBulkRequest,
        actor: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseBulkResult]:
    """
    Raises:
        - 400 Bad Request: delete with active enrollments, assign-tutors without tutor_ids
        - 404 Not Found: unknown course id
    """
    logger.info(f"User {actor.id} running bulk {request.action} on {len(request.course_ids)} course(s)")
    result = await course_service.bulk_action(request)
    return ApiResponse[CourseBulkResult].ok(data=result, message=f"Bulk {request.action} completed successfully")


@router.get("/{course_id}", response_model=ApiResponse[CourseDetail])
async def get_course(
        course_id: int,
        _: User = Depends(get_current_user),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseDetail]:
    return ApiResponse[CourseDetail].ok(data=await course_service.get_course(course_id))


@router.put("/{course_id}", response_model=ApiResponse[CourseDetail])
async def update_course(
        course_id: int,
        request: CourseUpdate,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseDetail]:
    course = await course_service.update_course(course_id, request)
    return ApiResponse[CourseDetail].ok(data=course, message="Course updated successfully")


@router.delete("/{course_id}", response_model=ApiResponse[CourseDetail], summary="Archive course")
async def delete_course(
        course_id: int,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseDetail]:
    course = await course_service.archive_course(course_id)
    return ApiResponse[CourseDetail].ok(data=course, message="Course archived successfully")


# =============================
#   Tutors
# =============================
@router.get("/{course_id}/tutors", response_model=ApiResponse[List[CourseTutorResponse]])
async def list_course_tutors(
        course_id: int,
        _: User = Depends(get_current_user),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[List[CourseTutorResponse]]:
    return ApiResponse[List[CourseTutorResponse]].ok(data=await course_service.list_tutors(course_id))


@router.put(
    "/{course_id}/tutors",
    response_model=ApiResponse[List[CourseTutorResponse]],
    summary="Replace course tutors",
    description="The primary tutor must be one of tutor_ids and every id must belong to a tutor.",
)
async def set_course_tutors(
        course_id: int,
        request: CourseTutorsUpdate,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[List[CourseTutorResponse]]:
    logger.info(f"Setting tutors of course {course_id} to {request.tutor_ids}")
    tutors = await course_service.set_tutors(course_id, request)
    return ApiResponse[List[CourseTutorResponse]].ok(data=tutors, message="Course tutors updated successfully")


# =============================
#   Syllabus
# =============================
@router.get("/{course_id}/syllabus/phases", response_model=ApiResponse[SyllabusResponse])
async def get_syllabus(
        course_id: int,
        _: User = Depends(get_current_user),
        course_service: CourseService = Depends(get_course_service),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
) -> ApiResponse[SyllabusResponse]:
    await course_service.require_course(course_id)
    return ApiResponse[SyllabusResponse].ok(data=await syllabus_service.get_syllabus(course_id))


@router.post(
    "/{course_id}/syllabus/phases",
    response_model=ApiResponse[PhaseResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_phase(
        course_id: int,
        request: PhaseCreate,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
) -> ApiResponse[PhaseResponse]:
    await course_service.require_course(course_id)
    phase = await syllabus_service.create_phase(course_id, request)
    return ApiResponse[PhaseResponse].ok(data=phase, message="Phase created successfully")


@router.delete("/{course_id}/syllabus/phases/{phase_id}", response_model=ApiResponse[None])
async def delete_phase(
        course_id: int,
        phase_id: int,
        _: User = Depends(require_admin),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
) -> ApiResponse[None]:
    await syllabus_service.delete_phase(course_id, phase_id)
    return ApiResponse[None].ok(message="Phase deleted successfully")


@router.post(
    "/{course_id}/syllabus/items",
    response_model=ApiResponse[ItemResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_item(
        course_id: int,
        request: ItemCreate,
        _: User = Depends(require_admin),
        course_service: CourseService = Depends(get_course_service),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
) -> ApiResponse[ItemResponse]:
    await course_service.require_course(course_id)
    item = await syllabus_service.create_item(course_id, request)
    return ApiResponse[ItemResponse].ok(data=item, message="Item created successfully")
