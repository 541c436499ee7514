from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tutorhub.model.enums import CourseStatus
from tutorhub.schemas.generic import PartialUpdate


# =============================
#   Request Schemas
# =============================
class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    short_description: str = Field(..., min_length=1)
    long_description: Optional[str] = None
    category_id: int
    course_type_id: Optional[int] = None
    course_format_id: Optional[int] = None
    curriculum_id: Optional[int] = None
    one_to_one_price: Optional[float] = Field(None, ge=0)
    group_price: Optional[float] = Field(None, ge=0)
    status: CourseStatus = CourseStatus.DRAFT


class CourseUpdate(PartialUpdate):
    non_nullable = ("title", "short_description", "category_id", "status")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    short_description: Optional[str] = Field(None, min_length=1)
    long_description: Optional[str] = None
    category_id: Optional[int] = None
    course_type_id: Optional[int] = None
    course_format_id: Optional[int] = None
    curriculum_id: Optional[int] = None
    one_to_one_price: Optional[float] = Field(None, ge=0)
    group_price: Optional[float] = Field(None, ge=0)
    status: Optional[CourseStatus] = None


class CourseTutorsUpdate(BaseModel):
    """Replaces the whole tutor set of a course"""

    tutor_ids: List[int] = Field(default_factory=list)
    primary_tutor_id: Optional[int] = None


class CourseBulkRequest(BaseModel):
    action: Literal["publish", "archive", "delete", "assign-tutors"]
    course_ids: List[int] = Field(..., min_length=1, description="At least one course must be selected")
    tutor_ids: List[int] = Field(default_factory=list, description="Required for assign-tutors")
    primary_tutor_id: Optional[int] = None


# =============================
#   Response Schemas
# =============================
class LookupRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: Optional[str] = None


class CourseTutorResponse(BaseModel):
    tutor_id: int
    name: str
    email: str
    is_primary: bool
    specialization: Optional[str] = None
    can_teach_one_to_one: bool = True
    can_teach_group: bool = True


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    short_description: str
    long_description: Optional[str] = None
    status: CourseStatus
    one_to_one_price: Optional[float] = None
    group_price: Optional[float] = None
    category_id: int
    course_type_id: Optional[int] = None
    course_format_id: Optional[int] = None
    curriculum_id: Optional[int] = None
    created_date: datetime
    updated_date: datetime


class CourseListItem(CourseResponse):
    category: Optional[LookupRef] = None
    tutors: List[CourseTutorResponse] = Field(default_factory=list)
    enrollment_count: int = 0


class CourseDetail(CourseListItem):
    course_type: Optional[LookupRef] = None
    course_format: Optional[LookupRef] = None
    curriculum: Optional[LookupRef] = None
    phase_count: int = 0


class CourseBulkResult(BaseModel):
    count: int = Field(..., description="Courses updated, or tutor links created for assign-tutors")
