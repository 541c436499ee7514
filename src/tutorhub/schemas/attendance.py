from datetime import date as DateType, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tutorhub.model.enums import AttendanceStatus, EnrollmentStatus, SessionStatus, SessionType
from tutorhub.schemas.course import CourseListItem
from tutorhub.schemas.assignment import SubmissionResponse
from tutorhub.schemas.syllabus import PhaseProgress
from tutorhub.schemas.user import UserSummary


# =============================
#   Bulk attendance
# =============================
class AttendanceEntry(BaseModel):
    student_id: int
    status: AttendanceStatus
    activity: Optional[str] = None
    remarks: Optional[str] = None
    absence_reason: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, value):
        # The UI sends "present", "absent", ...
        return value.upper() if isinstance(value, str) else value


class BulkAttendanceRequest(BaseModel):
    date: DateType
    course_id: int
    attendance: Optional[List[AttendanceEntry]] = None
    cancel_reason: Optional[str] = Field(None, min_length=1)
    holiday_reason: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def one_entry_per_student(self):
        seen = set()
        for entry in self.attendance or []:
            if entry.student_id in seen:
                raise ValueError(f"Student {entry.student_id} appears more than once")
            seen.add(entry.student_id)
        return self


class BulkAttendanceResult(BaseModel):
    session_id: int
    session_status: SessionStatus
    records: int = Field(..., description="Attendance records written")
    message: str


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    tutor_id: int
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int
    ended_at: Optional[datetime] = None
    type: SessionType
    status: SessionStatus
    notes: Optional[str] = None
    attendance_count: int = 0


class AttendanceRecordView(BaseModel):
    id: int
    student_id: int
    student_name: str
    student_email: str
    status: str = Field(..., description="Lower-case attendance status")
    activity: Optional[str] = None
    remarks: Optional[str] = None
    absence_reason: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    marked_at: Optional[datetime] = None


class BulkAttendanceView(BaseModel):
    session: Optional[SessionResponse] = None
    records: List[AttendanceRecordView] = Field(default_factory=list)


# =============================
#   Single session attendance
# =============================
class MarkAttendanceRequest(BaseModel):
    student_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, value):
        return value.upper() if isinstance(value, str) else value


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    student_id: int
    status: AttendanceStatus
    notes: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    marked_at: Optional[datetime] = None
    marked_by: Optional[int] = None


class CurrentAttendance(BaseModel):
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None


class SessionStudent(BaseModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None
    current_attendance: Optional[CurrentAttendance] = None


class SessionAttendanceView(BaseModel):
    session: SessionResponse
    students: List[SessionStudent] = Field(..., description="Every ACTIVE enrollment of the course")


# =============================
#   Tutor views
# =============================
class CalendarResource(BaseModel):
    course_id: int
    course_name: str
    student_count: int
    attendance_rate: int
    status: str


class CalendarEvent(BaseModel):
    id: int
    title: str
    start: datetime
    end: datetime
    resource: CalendarResource


class TutorStats(BaseModel):
    total_courses: int
    upcoming_sessions_this_week: int
    completed_sessions_this_month: int


class TutorCourseItem(CourseListItem):
    is_primary: bool = False


class AttendanceSummary(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    rate: int = 0


class StudentProgressReport(BaseModel):
    student: UserSummary
    syllabus: List[PhaseProgress]
    attendance: AttendanceSummary
    submissions: List[SubmissionResponse]


class CourseReport(BaseModel):
    course_id: int
    course_title: str
    total_students: int = Field(..., description="ACTIVE enrollments")
    attendance_rate: float = Field(..., description="PRESENT records over expected attendance, 0 to 1")
    avg_assignment_score: float = Field(..., description="Mean of the per-assignment average graded score")


class RosterCourse(BaseModel):
    course_id: int
    course_title: str
    enrollment_id: int
    status: EnrollmentStatus
    enrolled_at: datetime


class RosterStudent(BaseModel):
    """One student across every course the tutor teaches"""

    id: int
    name: str
    email: str
    avatar: Optional[str] = None
    courses: List[RosterCourse] = Field(default_factory=list)
    total_attendance_rate: int = 0
    total_completed_assignments: int = 0
    total_assignments: int = 0
    last_activity: Optional[datetime] = None
