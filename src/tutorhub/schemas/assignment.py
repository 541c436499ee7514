from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tutorhub.model.enums import (
    AssignmentType,
    SubmissionStatus,
    SubmissionType,
    TargetType,
)
from tutorhub.schemas.enrollment import CourseRef, EnrollmentRef
from tutorhub.schemas.generic import PartialUpdate
from tutorhub.schemas.user import UserSummary


# =============================
#   Request Schemas
# =============================
class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = None
    attachments: List[str] = Field(default_factory=list, description="URLs of hosted files")
    due_date: Optional[datetime] = None
    max_points: int = Field(default=100, ge=1, le=1000)
    assignment_type: AssignmentType = AssignmentType.REGULAR
    target_type: TargetType = TargetType.ALL_STUDENTS
    target_course_ids: List[int] = Field(default_factory=list)
    target_student_ids: List[int] = Field(default_factory=list)
    allow_late: bool = False
    late_penalty: Optional[float] = Field(None, ge=0, le=100)
    expected_submission_types: List[SubmissionType] = Field(default_factory=list)
    course_id: Optional[int] = None

    @model_validator(mode="after")
    def check_targets(self):
        if self.target_type == TargetType.COURSES and not self.target_course_ids:
            raise ValueError("At least one course must be selected")
        if self.target_type == TargetType.SELECTED_INDIVIDUALS and not self.target_student_ids:
            raise ValueError("At least one student must be selected")
        return self


class AssignmentUpdate(PartialUpdate):
    non_nullable = (
        "title", "attachments", "max_points", "assignment_type",
        "allow_late", "expected_submission_types", "is_active",
    )

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = None
    attachments: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    max_points: Optional[int] = Field(None, ge=1, le=1000)
    assignment_type: Optional[AssignmentType] = None
    allow_late: Optional[bool] = None
    late_penalty: Optional[float] = Field(None, ge=0, le=100)
    expected_submission_types: Optional[List[SubmissionType]] = None
    is_active: Optional[bool] = None


class SubmissionCreate(BaseModel):
    """
    Student submission. Which fields are required depends on submission_type:
    TEXT needs content, GITHUB_URL needs repository_url, LIVE_URL needs url,
    file based types need at least one file URL.
    """

    submission_type: SubmissionType
    content: Optional[str] = None
    repository_url: Optional[str] = None
    branch: str = "main"
    url: Optional[str] = None
    files: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_payload(self):
        kind = self.submission_type
        if kind == SubmissionType.TEXT and not (self.content and self.content.strip()):
            raise ValueError("Text submissions require content")
        if kind == SubmissionType.GITHUB_URL and not self.repository_url:
            raise ValueError("GitHub submissions require repository_url")
        if kind == SubmissionType.LIVE_URL and not self.url:
            raise ValueError("Live URL submissions require url")
        if kind in (
            SubmissionType.SCREENSHOTS,
            SubmissionType.SCREENRECORDINGS,
            SubmissionType.FILE_UPLOAD,
        ) and not self.files:
            raise ValueError("File submissions require at least one file")
        return self

    def attachments(self) -> dict:
        """Structured payload stored alongside the submission"""
        kind = self.submission_type
        if kind == SubmissionType.GITHUB_URL:
            return {"repository_url": self.repository_url, "branch": self.branch}
        if kind == SubmissionType.LIVE_URL:
            return {"url": self.url, "description": self.description}
        if kind == SubmissionType.TEXT:
            return {}
        payload = {"files": self.files}
        if kind == SubmissionType.MULTIPLE_TYPES:
            payload.update(
                repository_url=self.repository_url,
                branch=self.branch,
                url=self.url,
            )
        return payload


class GradeRequest(BaseModel):
    score: float = Field(..., ge=0, le=100)
    feedback: Optional[str] = None
    status: Literal["GRADED", "RETURNED"] = "GRADED"


# =============================
#   Response Schemas
# =============================
class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    max_points: int
    assignment_type: AssignmentType
    target_type: TargetType
    target_course_ids: List[int] = Field(default_factory=list)
    target_student_ids: List[int] = Field(default_factory=list)
    allow_late: bool
    late_penalty: Optional[float] = None
    expected_submission_types: List[SubmissionType] = Field(default_factory=list)
    course_id: Optional[int] = None
    creator_id: int
    is_active: bool
    created_date: datetime


class AssignmentListItem(AssignmentResponse):
    submission_count: int = 0
    submitted_count: int = 0


class AssignmentCreated(AssignmentResponse):
    assigned_count: int = Field(..., description="Number of students the assignment was fanned out to")


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: int
    student_id: int
    enrollment_id: Optional[int] = None
    content: Optional[str] = None
    submission_type: Optional[SubmissionType] = None
    attachments: Optional[Any] = None
    status: SubmissionStatus
    score: Optional[float] = None
    feedback: Optional[str] = None
    is_graded: bool
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


class SubmissionWithStudent(SubmissionResponse):
    student: Optional[UserSummary] = None


class StudentAssignmentItem(BaseModel):
    submission: SubmissionResponse
    assignment: AssignmentResponse


class SubmissionDetail(SubmissionWithStudent):
    assignment: AssignmentResponse
    course: Optional[CourseRef] = None
    enrollment: Optional[EnrollmentRef] = None
