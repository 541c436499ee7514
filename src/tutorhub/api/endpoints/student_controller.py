import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from tutorhub.dependencies.auth import require_student
from tutorhub.dependencies.repositories import get_enrollment_repository
from tutorhub.dependencies.services import (
    get_assignment_service,
    get_enrollment_service,
    get_syllabus_service,
)
from tutorhub.model.user_models import User
from tutorhub.repositories.enrollment_repo import EnrollmentRepository
from tutorhub.schemas.assignment import StudentAssignmentItem
from tutorhub.schemas.enrollment import StudentCourseItem
from tutorhub.schemas.generic import ApiResponse
from tutorhub.schemas.syllabus import ConfirmRequest, ConfirmResponse, PhaseProgress
from tutorhub.services.assignment_service import AssignmentService
from tutorhub.services.enrollment_service import EnrollmentService
from tutorhub.services.syllabus_service import SyllabusService
from tutorhub.utils.exceptions import AccessDeniedException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student", tags=["Student"])


@router.get("/courses", response_model=ApiResponse[List[StudentCourseItem]], summary="My courses")
async def my_courses(
        student: User = Depends(require_student),
        enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[List[StudentCourseItem]]:
    return ApiResponse[List[StudentCourseItem]].ok(data=await enrollment_service.student_courses(student))


@router.get("/assignments", response_model=ApiResponse[List[StudentAssignmentItem]], summary="My assignments")
async def my_assignments(
        course_id: Optional[int] = None,
        student: User = Depends(require_student),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[List[StudentAssignmentItem]]:
    items = await assignment_service.student_assignments(student, course_id)
    return ApiResponse[List[StudentAssignmentItem]].ok(data=items)


@router.post(
    "/courses/{course_id}/syllabus/{target_id}/confirm",
    response_model=ApiResponse[ConfirmResponse],
    summary="Confirm a phase or item",
    description="target_id may name a phase or an item of the course.",
)
async def confirm_syllabus(
        course_id: int,
        target_id: int,
        student: User = Depends(require_student),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
        request: Optional[ConfirmRequest] = None,
) -> ApiResponse[ConfirmResponse]:
    logger.info(f"Student {student.id} confirming syllabus target {target_id} in course {course_id}")
    completed_at = request.completed_at if request else None
    result = await syllabus_service.confirm_as_student(course_id, target_id, student, completed_at)
    return ApiResponse[ConfirmResponse].ok(data=result, message="Progress confirmed")


@router.get("/courses/{course_id}/syllabus/progress", response_model=ApiResponse[List[PhaseProgress]])
async def syllabus_progress(
        course_id: int,
        student: User = Depends(require_student),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
) -> ApiResponse[List[PhaseProgress]]:
    if not await enrollment_repository.has_any(student.id, course_id):
        raise AccessDeniedException("You are not enrolled in this course")
    progress = await syllabus_service.get_progress(course_id, student.id)
    return ApiResponse[List[PhaseProgress]].ok(data=progress)
