import logging
from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from tutorhub.dependencies.auth import require_tutor
from tutorhub.dependencies.services import (
    get_attendance_service,
    get_course_service,
    get_syllabus_service,
    get_tutor_service,
)
from tutorhub.model.user_models import User
from tutorhub.schemas.attendance import (
    AttendanceRecordResponse,
    BulkAttendanceRequest,
    BulkAttendanceResult,
    BulkAttendanceView,
    CalendarEvent,
    CourseReport,
    MarkAttendanceRequest,
    RosterStudent,
    SessionAttendanceView,
    SessionResponse,
    StudentProgressReport,
    TutorCourseItem,
    TutorStats,
)
from tutorhub.schemas.generic import ApiResponse
from tutorhub.schemas.syllabus import ConfirmRequest, ConfirmResponse
from tutorhub.schemas.user import StudentSummary
from tutorhub.services.attendance_service import AttendanceService
from tutorhub.services.course_service import CourseService
from tutorhub.services.syllabus_service import SyllabusService
from tutorhub.services.tutor_service import TutorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tutor", tags=["Tutor"])

ReportRange = Literal["last_7_days", "last_30_days", "this_quarter", "this_year"]


@router.get("/courses", response_model=ApiResponse[List[TutorCourseItem]], summary="Assigned courses")
async def list_courses(
        search: Optional[str] = None,
        course_status: Optional[str] = Query(None, alias="status"),
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[TutorCourseItem]]:
    courses = await tutor_service.list_courses(tutor, search, course_status)
    return ApiResponse[List[TutorCourseItem]].ok(data=courses)


@router.get("/courses/{course_id}/students", response_model=ApiResponse[List[StudentSummary]])
async def list_students(
        course_id: int,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[StudentSummary]]:
    return ApiResponse[List[StudentSummary]].ok(data=await tutor_service.list_students(course_id, tutor))


@router.get("/courses/{course_id}/sessions", response_model=ApiResponse[List[SessionResponse]])
async def list_sessions(
        course_id: int,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[SessionResponse]]:
    return ApiResponse[List[SessionResponse]].ok(data=await tutor_service.list_sessions(course_id, tutor))


@router.get(
    "/courses/{course_id}/sessions/{session_id}/attendance",
    response_model=ApiResponse[SessionAttendanceView],
    summary="Attendance for one session",
    description="Every actively enrolled student with their record for the session, or null.",
)
async def get_session_attendance(
        course_id: int,
        session_id: int,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[SessionAttendanceView]:
    view = await tutor_service.session_attendance(course_id, session_id, tutor)
    return ApiResponse[SessionAttendanceView].ok(data=view)


@router.post(
    "/courses/{course_id}/sessions/{session_id}/attendance",
    response_model=ApiResponse[AttendanceRecordResponse],
    summary="Mark one student for a session",
)
async def mark_session_attendance(
        course_id: int,
        session_id: int,
        request: MarkAttendanceRequest,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[AttendanceRecordResponse]:
    """
    Raises:
        - 403 Forbidden: tutor not assigned to the course
        - 404 Not Found: session not in the course, or student without an active enrollment
    """
    record = await tutor_service.mark_session_attendance(course_id, session_id, request, tutor)
    return ApiResponse[AttendanceRecordResponse].ok(data=record, message="Attendance marked successfully")


# =============================
#   Bulk attendance
# =============================
@router.get(
    "/attendance/bulk",
    response_model=ApiResponse[BulkAttendanceView],
    summary="Attendance for a day",
    description="The course's session on the given day and its records; empty when no session exists.",
)
async def get_bulk_attendance(
        course_id: int,
        day: date = Query(..., alias="date"),
        tutor: User = Depends(require_tutor),
        attendance_service: AttendanceService = Depends(get_attendance_service),
) -> ApiResponse[BulkAttendanceView]:
    return ApiResponse[BulkAttendanceView].ok(data=await attendance_service.get_day(course_id, day, tutor))


@router.post(
    "/attendance/bulk",
    response_model=ApiResponse[BulkAttendanceResult],
    summary="Save attendance for a day",
    description="Cancels the class, marks a holiday, or replaces the day's attendance records.",
)
async def save_bulk_attendance(
        request: BulkAttendanceRequest,
        tutor: User = Depends(require_tutor),
        attendance_service: AttendanceService = Depends(get_attendance_service),
) -> ApiResponse[BulkAttendanceResult]:
    """
    Raises:
        - 400 Bad Request: attendance missing when neither a cancel nor a holiday reason is given
        - 403 Forbidden: tutor not assigned to the course
        - 409 Conflict: the same day is being saved concurrently
    """
    logger.info(f"Tutor {tutor.id} saving attendance for course {request.course_id} on {request.date}")
    result = await attendance_service.save_day(request, tutor)
    return ApiResponse[BulkAttendanceResult].ok(data=result, message=result.message)


# =============================
#   Calendar and stats
# =============================
@router.get("/sessions/calendar", response_model=ApiResponse[List[CalendarEvent]])
async def calendar(
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        course_id: Optional[int] = None,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[CalendarEvent]]:
    events = await tutor_service.calendar(tutor, start, end, course_id)
    return ApiResponse[List[CalendarEvent]].ok(data=events)


@router.get("/stats", response_model=ApiResponse[TutorStats])
async def stats(
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[TutorStats]:
    return ApiResponse[TutorStats].ok(data=await tutor_service.stats(tutor))


# =============================
#   Student progress
# =============================
@router.get(
    "/courses/{course_id}/students/{student_id}/progress",
    response_model=ApiResponse[StudentProgressReport],
)
async def student_progress(
        course_id: int,
        student_id: int,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[StudentProgressReport]:
    report = await tutor_service.student_progress(course_id, student_id, tutor)
    return ApiResponse[StudentProgressReport].ok(data=report)


@router.post(
    "/courses/{course_id}/students/{student_id}/syllabus/{target_id}/confirm",
    response_model=ApiResponse[ConfirmResponse],
    summary="Confirm a phase or item for a student",
)
async def confirm_syllabus(
        course_id: int,
        student_id: int,
        target_id: int,
        tutor: User = Depends(require_tutor),
        course_service: CourseService = Depends(get_course_service),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
        request: Optional[ConfirmRequest] = None,
) -> ApiResponse[ConfirmResponse]:
    await course_service.ensure_tutor_assigned(course_id, tutor)
    logger.info(f"Tutor {tutor.id} confirming syllabus target {target_id} for student {student_id}")
    completed_at = request.completed_at if request else None
    result = await syllabus_service.confirm_as_tutor(course_id, student_id, target_id, completed_at)
    return ApiResponse[ConfirmResponse].ok(data=result, message="Progress confirmed")


# =============================
#   Reports and roster
# =============================
@router.get(
    "/reports",
    response_model=ApiResponse[List[CourseReport]],
    summary="Per-course report",
    description="Students, attendance rate and average assignment score of each assigned course.",
)
async def reports(
        report_range: ReportRange = Query("last_30_days", alias="range"),
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[CourseReport]]:
    return ApiResponse[List[CourseReport]].ok(data=await tutor_service.reports(tutor, report_range))


@router.get("/students", response_model=ApiResponse[List[RosterStudent]], summary="Students across courses")
async def roster(
        search: Optional[str] = None,
        enrollment_status: Optional[str] = Query(None, alias="status"),
        course_id: Optional[int] = None,
        tutor: User = Depends(require_tutor),
        tutor_service: TutorService = Depends(get_tutor_service),
) -> ApiResponse[List[RosterStudent]]:
    students = await tutor_service.roster(tutor, search, enrollment_status, course_id)
    return ApiResponse[List[RosterStudent]].ok(data=students)
