import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tutorhub.dependencies.auth import get_current_user, require_staff, require_student
from tutorhub.dependencies.services import get_assignment_service
from tutorhub.model.user_models import User
from tutorhub.schemas.assignment import (
    AssignmentCreate,
    AssignmentCreated,
    AssignmentListItem,
    AssignmentResponse,
    AssignmentUpdate,
    GradeRequest,
    SubmissionCreate,
    SubmissionDetail,
    SubmissionResponse,
    SubmissionWithStudent,
)
from tutorhub.schemas.generic import ApiResponse, PaginatedData
from tutorhub.services.assignment_service import AssignmentService
from tutorhub.utils.parser_utils import ParserUtils

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[AssignmentListItem]],
    summary="List assignments",
    description="Active assignments by default; tutors only see the ones they created.",
)
async def list_assignments(
        assignment_status: Optional[str] = Query("active", alias="status", description="active, inactive or all"),
        course_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[PaginatedData[AssignmentListItem]]:
    result = await assignment_service.list_assignments(
        actor=user,
        is_active=ParserUtils.active_filter(assignment_status),
        course_id=course_id,
        search=search,
        page=page,
        limit=limit,
    )
    return ApiResponse[PaginatedData[AssignmentListItem]].ok(data=result)


@router.post(
    "",
    response_model=ApiResponse[AssignmentCreated],
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
)
async def create_assignment(
        request: AssignmentCreate,
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentCreated]:
    """
    Create an assignment and hand it out to its target students.

    Raises:
        - 400 Bad Request: empty course or student targets, unknown course
    """
    logger.info(f"User {user.id} creating assignment {request.title} for {request.target_type.value}")
    assignment = await assignment_service.create_assignment(request, user)
    return ApiResponse[AssignmentCreated].ok(
        data=assignment,
        message=f"Assignment created and assigned to {assignment.assigned_count} student(s)",
    )


@router.get("/{assignment_id}", response_model=ApiResponse[AssignmentResponse])
async def get_assignment(
        assignment_id: int,
        _: User = Depends(get_current_user),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    assignment = await assignment_service.get_assignment(assignment_id)
    return ApiResponse[AssignmentResponse].ok(data=AssignmentResponse.model_validate(assignment))


@router.put("/{assignment_id}", response_model=ApiResponse[AssignmentResponse])
async def update_assignment(
        assignment_id: int,
        request: AssignmentUpdate,
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    assignment = await assignment_service.update_assignment(assignment_id, request, user)
    return ApiResponse[AssignmentResponse].ok(
        data=AssignmentResponse.model_validate(assignment), message="Assignment updated successfully"
    )


@router.delete("/{assignment_id}", response_model=ApiResponse[AssignmentResponse], summary="Deactivate assignment")
async def delete_assignment(
        assignment_id: int,
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    assignment = await assignment_service.deactivate_assignment(assignment_id, user)
    return ApiResponse[AssignmentResponse].ok(
        data=AssignmentResponse.model_validate(assignment), message="Assignment deactivated successfully"
    )


# =============================
#   Submissions
# =============================
@router.post(
    "/{assignment_id}/submit",
    response_model=ApiResponse[SubmissionResponse],
    summary="Submit assignment",
    description="Past the due date the submission is LATE, or rejected when late work is not allowed.",
)
async def submit_assignment(
        assignment_id: int,
        request: SubmissionCreate,
        student: User = Depends(require_student),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[SubmissionResponse]:
    logger.info(f"Student {student.id} submitting assignment {assignment_id} as {request.submission_type.value}")
    submission = await assignment_service.submit(assignment_id, request, student)
    return ApiResponse[SubmissionResponse].ok(data=submission, message="Assignment submitted successfully")


@router.get("/{assignment_id}/submissions", response_model=ApiResponse[List[SubmissionWithStudent]])
async def list_submissions(
        assignment_id: int,
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[List[SubmissionWithStudent]]:
    submissions = await assignment_service.list_submissions(assignment_id, user)
    return ApiResponse[List[SubmissionWithStudent]].ok(data=submissions)


@router.put("/submissions/{submission_id}/grade", response_model=ApiResponse[SubmissionResponse])
async def grade_submission(
        submission_id: int,
        request: GradeRequest,
        user: User = Depends(require_staff),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[SubmissionResponse]:
    submission = await assignment_service.grade(submission_id, request, user)
    return ApiResponse[SubmissionResponse].ok(data=submission, message="Submission graded successfully")


@router.get(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionDetail],
    description="Students see their own submissions; staff need review rights on the assignment.",
)
async def get_submission(
        submission_id: int,
        user: User = Depends(get_current_user),
        assignment_service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[SubmissionDetail]:
    return ApiResponse[SubmissionDetail].ok(data=await assignment_service.get_submission(submission_id, user))
