"""
Attendance Service - bulk attendance marking for one course and day
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from redis.exceptions import LockError

from tutorhub.clients.redis_client import RedisClient
from tutorhub.model.enums import (
    AbsenceStatus,
    ActivityStatus,
    AttendanceStatus,
    SessionStatus,
    SessionType,
)
from tutorhub.model.session_models import ClassSession
from tutorhub.model.user_models import User
from tutorhub.repositories.session_repo import (
    AttendanceRecordRepository,
    ClassSessionRepository,
    StudentAbsenceRepository,
    StudentActivityRepository,
)
from tutorhub.schemas.attendance import (
    AttendanceRecordView,
    BulkAttendanceRequest,
    BulkAttendanceResult,
    BulkAttendanceView,
    SessionResponse,
)
from tutorhub.services.course_service import CourseService
from tutorhub.utils.date_utils import day_bounds, to_naive_utc, utcnow
from tutorhub.utils.exceptions import BadRequestException, ConflictException

logger = logging.getLogger(__name__)

DEFAULT_START = timedelta(hours=9)
DEFAULT_DURATION = 60

CANCELLED_TITLE = "Cancelled Session"
HOLIDAY_TITLE = "Holiday"
CLASS_TITLE = "Class Session"


class AttendanceService:
    def __init__(
            self,
            course_service: CourseService,
            session_repository: ClassSessionRepository,
            attendance_repository: AttendanceRecordRepository,
            activity_repository: StudentActivityRepository,
            absence_repository: StudentAbsenceRepository,
            redis_client: RedisClient,
    ):
        self._course_service = course_service
        self._session_repository = session_repository
        self._attendance_repository = attendance_repository
        self._activity_repository = activity_repository
        self._absence_repository = absence_repository
        self._redis_client = redis_client

    async def get_day(self, course_id: int, day: date, tutor: User) -> BulkAttendanceView:
        """Attendance already recorded for the course's session on the given day."""
        await self._course_service.ensure_tutor_assigned(course_id, tutor)

        class_session = await self._find_session(course_id, day)
        if not class_session:
            return BulkAttendanceView()

        records = await self._attendance_repository.list_for_session(class_session.id)
        activities = await self._activity_repository.by_student(class_session.id)
        absences = await self._absence_repository.by_student(class_session.id)

        views = []
        for record in records:
            activity = activities.get(record.student_id)
            absence = absences.get(record.student_id)
            views.append(
                AttendanceRecordView(
                    id=record.id,
                    student_id=record.student_id,
                    student_name=record.student.name,
                    student_email=record.student.email,
                    status=record.status.value.lower(),
                    activity=activity.activity if activity else None,
                    remarks=record.notes,
                    absence_reason=absence.reason if absence else None,
                    check_in_time=record.check_in_time,
                    check_out_time=record.check_out_time,
                    marked_at=record.marked_at,
                )
            )

        session_view = SessionResponse.model_validate(class_session)
        session_view.attendance_count = len(views)
        return BulkAttendanceView(session=session_view, records=views)

    async def save_day(self, request: BulkAttendanceRequest, tutor: User) -> BulkAttendanceResult:
        """
        Cancel, mark as holiday, or record attendance for one course and day.

        Writes for the same course and day are serialized through a Redis
        lock when Redis is configured.

        Raises:
            ConflictException: another write for the same course and day is in progress
        """
        await self._course_service.ensure_tutor_assigned(request.course_id, tutor)

        try:
            async with self._redis_client.acquire_attendance_lock(request.course_id, request.date):
                if request.cancel_reason:
                    return await self._close_day(request, tutor, request.cancel_reason, holiday=False)
                if request.holiday_reason:
                    return await self._close_day(request, tutor, request.holiday_reason, holiday=True)
                return await self._mark_attendance(request, tutor)
        except LockError as e:
            logger.warning(str(e))
            raise ConflictException("Attendance for this class is already being saved, try again shortly")

    async def _close_day(
            self, request: BulkAttendanceRequest, tutor: User, reason: str, holiday: bool
    ) -> BulkAttendanceResult:
        class_session = await self._find_session(request.course_id, request.date)
        if class_session:
            class_session.status = SessionStatus.CANCELLED
            class_session.notes = reason
            if holiday:
                class_session.title = HOLIDAY_TITLE
        else:
            title = HOLIDAY_TITLE if holiday else CANCELLED_TITLE
            class_session = await self._session_repository.add(
                {**self._new_session(request, tutor, title, SessionStatus.CANCELLED), "notes": reason}
            )

        await self._session_repository.commit()
        logger.info(
            f"Course {request.course_id} session on {request.date} "
            f"{'marked as holiday' if holiday else 'cancelled'} by tutor {tutor.id}"
        )
        return BulkAttendanceResult(
            session_id=class_session.id,
            session_status=SessionStatus.CANCELLED,
            records=0,
            message="Day marked as holiday successfully" if holiday else "Class cancelled successfully",
        )

    async def _mark_attendance(self, request: BulkAttendanceRequest, tutor: User) -> BulkAttendanceResult:
        if request.attendance is None:
            raise BadRequestException("Attendance data is required")

        now = utcnow()
        class_session = await self._find_session(request.course_id, request.date)
        if class_session:
            if class_session.status == SessionStatus.CANCELLED:
                original = class_session.notes or "No reason provided"
                class_session.notes = (
                    f"Session reactivated from cancelled state. Original cancellation: {original}"
                )
            class_session.status = SessionStatus.COMPLETED
            class_session.ended_at = now
            await self._session_repository.flush()
        else:
            class_session = await self._session_repository.add(
                {
                    **self._new_session(request, tutor, CLASS_TITLE, SessionStatus.COMPLETED),
                    "ended_at": now,
                }
            )

        # The day's rows are replaced, never accumulated
        filters = {"session_id": class_session.id}
        await self._attendance_repository.delete_by_filters(filters)
        await self._activity_repository.delete_by_filters(filters)
        await self._absence_repository.delete_by_filters(filters)

        records, activities, absences = [], [], []
        for entry in request.attendance:
            records.append(
                {
                    "session_id": class_session.id,
                    "student_id": entry.student_id,
                    "status": entry.status,
                    "notes": entry.remarks,
                    "check_in_time": _naive(entry.check_in_time),
                    "check_out_time": _naive(entry.check_out_time),
                    "marked_at": now,
                    "marked_by": tutor.id,
                }
            )
            if entry.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE) and entry.activity:
                activities.append(
                    {
                        "session_id": class_session.id,
                        "student_id": entry.student_id,
                        "activity": entry.activity,
                        "status": ActivityStatus.COMPLETED,
                        "remarks": entry.remarks,
                        "created_by": tutor.id,
                    }
                )
            if entry.status == AttendanceStatus.ABSENT and entry.absence_reason:
                absences.append(
                    {
                        "session_id": class_session.id,
                        "student_id": entry.student_id,
                        "reason": entry.absence_reason,
                        "status": AbsenceStatus.APPROVED,
                        "created_by": tutor.id,
                    }
                )

        if records:
            await self._attendance_repository.add_many(records)
        if activities:
            await self._activity_repository.add_many(activities)
        if absences:
            await self._absence_repository.add_many(absences)
        await self._session_repository.commit()

        logger.info(
            f"Tutor {tutor.id} marked {len(records)} attendance record(s) "
            f"for course {request.course_id} on {request.date}"
        )
        return BulkAttendanceResult(
            session_id=class_session.id,
            session_status=SessionStatus.COMPLETED,
            records=len(records),
            message="Attendance marked successfully",
        )

    async def _find_session(self, course_id: int, day: date) -> Optional[ClassSession]:
        day_start, day_end = day_bounds(day)
        return await self._session_repository.find_on_day(course_id, day_start, day_end)

    @staticmethod
    def _new_session(request: BulkAttendanceRequest, tutor: User, title: str, status: SessionStatus) -> dict:
        day_start, _ = day_bounds(request.date)
        return {
            "course_id": request.course_id,
            "tutor_id": tutor.id,
            "title": title,
            "scheduled_at": day_start + DEFAULT_START,
            "duration": DEFAULT_DURATION,
            "type": SessionType.GROUP,
            "status": status,
        }


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else None
