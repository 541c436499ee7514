"""
Tutor Service - the tutor portal: assigned courses, their students, sessions and progress
"""
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Optional

from tutorhub.model.enums import AttendanceStatus, CourseStatus, EnrollmentStatus
from tutorhub.model.session_models import ClassSession
from tutorhub.model.user_models import User
from tutorhub.repositories.assignment_repo import SubmissionRepository
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository
from tutorhub.repositories.session_repo import AttendanceRecordRepository, ClassSessionRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.assignment import SubmissionResponse
from tutorhub.schemas.attendance import (
    AttendanceRecordResponse,
    AttendanceSummary,
    CalendarEvent,
    CalendarResource,
    CourseReport,
    CurrentAttendance,
    MarkAttendanceRequest,
    RosterCourse,
    RosterStudent,
    SessionAttendanceView,
    SessionResponse,
    SessionStudent,
    StudentProgressReport,
    TutorCourseItem,
    TutorStats,
)
from tutorhub.schemas.user import StudentSummary, UserSummary
from tutorhub.services.course_service import CourseService, course_to_list_item
from tutorhub.services.syllabus_service import SyllabusService
from tutorhub.utils.date_utils import (
    month_windows,
    report_window,
    round_half_up,
    to_naive_utc,
    utcnow,
    week_window,
)
from tutorhub.utils.exceptions import AccessDeniedException, ResourceNotFoundException
from tutorhub.utils.parser_utils import ParserUtils

logger = logging.getLogger(__name__)

MAX_EVENT_MINUTES = 24 * 60


def attendance_rate(present: int, total: int) -> int:
    return round_half_up(present / total * 100) if total else 0


def session_to_event(class_session: ClassSession) -> CalendarEvent:
    """Calendar event for a session with course and attendance loaded."""
    records = class_session.attendance
    present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
    duration = min(class_session.duration, MAX_EVENT_MINUTES)
    return CalendarEvent(
        id=class_session.id,
        title=class_session.title,
        start=class_session.scheduled_at,
        end=class_session.scheduled_at + timedelta(minutes=duration),
        resource=CalendarResource(
            course_id=class_session.course_id,
            course_name=class_session.course.title,
            student_count=len(records),
            attendance_rate=attendance_rate(present, len(records)),
            status=class_session.status.value.lower().replace("_", "-"),
        ),
    )


def summarize_attendance(statuses) -> AttendanceSummary:
    counts = Counter(statuses)
    total = len(statuses)
    present = counts[AttendanceStatus.PRESENT]
    return AttendanceSummary(
        total=total,
        present=present,
        absent=counts[AttendanceStatus.ABSENT],
        late=counts[AttendanceStatus.LATE],
        excused=counts[AttendanceStatus.EXCUSED],
        rate=attendance_rate(present, total),
    )


class TutorService:
    def __init__(
            self,
            course_service: CourseService,
            syllabus_service: SyllabusService,
            course_repository: CourseRepository,
            course_tutor_repository: CourseTutorRepository,
            enrollment_repository: EnrollmentRepository,
            session_repository: ClassSessionRepository,
            attendance_repository: AttendanceRecordRepository,
            submission_repository: SubmissionRepository,
            user_repository: UserRepository,
    ):
        self._course_service = course_service
        self._syllabus_service = syllabus_service
        self._course_repository = course_repository
        self._course_tutor_repository = course_tutor_repository
        self._enrollment_repository = enrollment_repository
        self._session_repository = session_repository
        self._attendance_repository = attendance_repository
        self._submission_repository = submission_repository
        self._user_repository = user_repository

    async def list_courses(self, tutor: User, search: Optional[str], status: Optional[str]) -> list[TutorCourseItem]:
        course_status = ParserUtils.enum_filter(CourseStatus, status, strict=False)

        courses, _ = await self._course_repository.search(
            search=search, status=course_status, tutor_id=tutor.id, skip=0, limit=None
        )
        counts = await self._course_repository.enrollment_counts([c.id for c in courses])

        items = []
        for course in courses:
            item = TutorCourseItem(**course_to_list_item(course, counts.get(course.id, 0)).model_dump())
            item.is_primary = any(
                link.tutor_id == tutor.id and link.is_primary for link in course.course_tutors
            )
            items.append(item)
        return items

    async def list_students(self, course_id: int, tutor: User) -> list[StudentSummary]:
        await self._course_service.ensure_tutor_assigned(course_id, tutor)
        enrollments = await self._enrollment_repository.students_in_course(course_id)

        seen = {}
        for enrollment in enrollments:
            seen.setdefault(enrollment.student_id, enrollment.student)
        return [StudentSummary.model_validate(student) for student in seen.values()]

    async def list_sessions(self, course_id: int, tutor: User) -> list[SessionResponse]:
        await self._course_service.ensure_tutor_assigned(course_id, tutor)
        sessions = await self._session_repository.list_for_course(course_id)
        counts = await self._attendance_repository.counts_by_session([s.id for s in sessions])

        responses = []
        for class_session in sessions:
            response = SessionResponse.model_validate(class_session)
            response.attendance_count = counts.get(class_session.id, 0)
            responses.append(response)
        return responses

    async def calendar(
            self,
            tutor: User,
            start: Optional[datetime],
            end: Optional[datetime],
            course_id: Optional[int],
    ) -> list[CalendarEvent]:
        course_ids = await self._course_tutor_repository.course_ids_for_tutor(tutor.id)
        if course_id is not None:
            course_ids = [c for c in course_ids if c == course_id]

        # The window only applies when both ends are given
        if start is None or end is None:
            start = end = None
        sessions = await self._session_repository.in_range(
            course_ids,
            to_naive_utc(start) if start else None,
            to_naive_utc(end) if end else None,
        )
        return [session_to_event(s) for s in sessions]

    async def stats(self, tutor: User) -> TutorStats:
        now = utcnow()
        course_ids = await self._course_tutor_repository.course_ids_for_tutor(tutor.id)
        week_start, week_end = week_window(now)
        month_start, _, _ = month_windows(now)

        return TutorStats(
            total_courses=len(course_ids),
            upcoming_sessions_this_week=await self._session_repository.count_scheduled_between(
                course_ids, week_start, week_end
            ),
            completed_sessions_this_month=await self._session_repository.count_completed_between(
                course_ids, month_start, now + timedelta(seconds=1)
            ),
        )

    async def student_progress(self, course_id: int, student_id: int, tutor: User) -> StudentProgressReport:
        """Syllabus, attendance and assignment picture of one student in one course."""
        await self._course_service.ensure_tutor_assigned(course_id, tutor)

        student = await self._user_repository.get_by_id(student_id)
        if not student:
            raise ResourceNotFoundException(f"Student not found with ID: {student_id}")
        if not await self._enrollment_repository.has_any(student_id, course_id):
            raise AccessDeniedException("Student is not enrolled in this course")

        statuses = await self._attendance_repository.statuses_for_student(student_id, course_id)
        submissions = await self._submission_repository.list_for_student(student_id, course_id)
        return StudentProgressReport(
            student=UserSummary.model_validate(student),
            syllabus=await self._syllabus_service.get_progress(course_id, student_id),
            attendance=summarize_attendance(statuses),
            submissions=[SubmissionResponse.model_validate(s) for s in submissions],
        )

    # =============================
    #   Reports and roster
    # =============================
    async def reports(self, tutor: User, range_name: str) -> list[CourseReport]:
        """
        Per-course figures for the window.

        Expected attendance is the course's ACTIVE enrollments times its
        completed sessions; the score is the mean of each assignment's
        average graded score.
        """
        start, end = report_window(range_name, utcnow())
        courses, _ = await self._course_repository.search(tutor_id=tutor.id, skip=0, limit=None)
        if not courses:
            return []

        course_ids = [c.id for c in courses]
        students = await self._enrollment_repository.active_counts(course_ids)
        sessions = await self._session_repository.completed_between(course_ids, start, end)
        present = await self._attendance_repository.present_counts([sid for sid, _ in sessions])

        sessions_by_course = defaultdict(list)
        for session_id, course_id in sessions:
            sessions_by_course[course_id].append(session_id)
        scores_by_course = defaultdict(list)
        for course_id, average in await self._submission_repository.graded_averages(course_ids, start, end):
            scores_by_course[course_id].append(average)

        rows = []
        for course in courses:
            session_ids = sessions_by_course[course.id]
            expected = students.get(course.id, 0) * len(session_ids)
            attended = sum(present.get(sid, 0) for sid in session_ids)
            scores = scores_by_course[course.id]
            rows.append(
                CourseReport(
                    course_id=course.id,
                    course_title=course.title,
                    total_students=students.get(course.id, 0),
                    attendance_rate=attended / expected if expected else 0,
                    avg_assignment_score=sum(scores) / len(scores) if scores else 0,
                )
            )
        return rows

    async def roster(
            self,
            tutor: User,
            search: Optional[str],
            status: Optional[str],
            course_id: Optional[int],
    ) -> list[RosterStudent]:
        """Students of the tutor's courses, one entry per student with every matching enrollment."""
        course_ids = await self._course_tutor_repository.course_ids_for_tutor(tutor.id)
        if course_id is not None:
            course_ids = [c for c in course_ids if c == course_id]

        enrollments = await self._enrollment_repository.in_courses(
            course_ids,
            search=search,
            status=ParserUtils.enum_filter(EnrollmentStatus, status, strict=False),
        )

        students: dict[int, RosterStudent] = {}
        for enrollment in enrollments:
            entry = students.get(enrollment.student_id)
            if entry is None:
                entry = await self._roster_entry(enrollment.student, course_ids)
                students[enrollment.student_id] = entry
            entry.courses.append(
                RosterCourse(
                    course_id=enrollment.course_id,
                    course_title=enrollment.course.title,
                    enrollment_id=enrollment.id,
                    status=enrollment.status,
                    enrolled_at=enrollment.enrolled_at,
                )
            )
        return list(students.values())

    async def _roster_entry(self, student: User, course_ids: list[int]) -> RosterStudent:
        sessions = await self._session_repository.count_completed(course_ids)
        present = await self._attendance_repository.count_present(student.id, course_ids)
        total, turned_in, last_submitted = await self._submission_repository.totals_for_student(
            student.id, course_ids
        )
        last_attended = await self._attendance_repository.last_attended(student.id, course_ids)
        activity = [t for t in (last_attended, last_submitted) if t is not None]
        return RosterStudent(
            id=student.id,
            name=student.name,
            email=student.email,
            avatar=student.avatar,
            total_attendance_rate=attendance_rate(present, sessions),
            total_completed_assignments=turned_in,
            total_assignments=total,
            last_activity=max(activity) if activity else None,
        )

    # =============================
    #   Single session attendance
    # =============================
    async def session_attendance(self, course_id: int, session_id: int, tutor: User) -> SessionAttendanceView:
        class_session = await self._session_in_course(course_id, session_id, tutor)
        records = {r.student_id: r for r in await self._attendance_repository.list_for_session(session_id)}
        enrollments = await self._enrollment_repository.active_in_course(course_id)

        students = {}
        for enrollment in enrollments:
            student = enrollment.student
            if student.id in students:
                continue
            record = records.get(student.id)
            students[student.id] = SessionStudent(
                id=student.id,
                name=student.name,
                email=student.email,
                avatar=student.avatar,
                current_attendance=CurrentAttendance(
                    status=record.status,
                    check_in_time=record.check_in_time,
                    check_out_time=record.check_out_time,
                    notes=record.notes,
                ) if record else None,
            )
        return SessionAttendanceView(
            session=SessionResponse.model_validate(class_session),
            students=list(students.values()),
        )

    async def mark_session_attendance(
            self,
            course_id: int,
            session_id: int,
            request: MarkAttendanceRequest,
            tutor: User,
    ) -> AttendanceRecordResponse:
        """
        Create or replace one student's record for the session.

        Raises:
            AccessDeniedException: tutor not assigned to the course
            ResourceNotFoundException: session not in the course, or student without an ACTIVE enrollment
        """
        await self._session_in_course(course_id, session_id, tutor)
        if not await self._enrollment_repository.get_active(request.student_id, course_id):
            raise ResourceNotFoundException("Student not enrolled in this course")

        values = {
            "status": request.status,
            "check_in_time": to_naive_utc(request.check_in_time) if request.check_in_time else None,
            "check_out_time": to_naive_utc(request.check_out_time) if request.check_out_time else None,
            "notes": request.notes,
            "marked_at": utcnow(),
            "marked_by": tutor.id,
        }
        record = await self._attendance_repository.get_for(session_id, request.student_id)
        if record:
            record = await self._attendance_repository.update(record, values)
        else:
            record = await self._attendance_repository.create(
                {"session_id": session_id, "student_id": request.student_id, **values}
            )
        logger.info(
            f"Tutor {tutor.id} marked student {request.student_id} "
            f"{request.status.value} for session {session_id}"
        )
        return AttendanceRecordResponse.model_validate(record)

    async def _session_in_course(self, course_id: int, session_id: int, tutor: User) -> ClassSession:
        await self._course_service.ensure_tutor_assigned(course_id, tutor)
        class_session = await self._session_repository.get_in_course(session_id, course_id)
        if not class_session:
            raise ResourceNotFoundException("Session not found")
        return class_session
