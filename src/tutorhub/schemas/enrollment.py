from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tutorhub.model.enums import (
    DiscountType,
    EnrollmentFormat,
    EnrollmentStatus,
    PaymentMethod,
    PaymentPlan,
    PaymentStatus,
)
from tutorhub.schemas.generic import PartialUpdate
from tutorhub.schemas.user import UserResponse, UserSummary


# =============================
#   Request Schemas
# =============================
class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int
    format: EnrollmentFormat
    session_count: int = Field(..., gt=0)
    session_duration: int = Field(..., gt=0, description="Minutes per session")
    base_price: float = Field(..., gt=0)
    discount_type: DiscountType = DiscountType.NONE
    discount_value: float = Field(default=0, ge=0)
    preferred_days: List[str] = Field(default_factory=list)
    preferred_times: List[str] = Field(default_factory=list)
    payment_plan: PaymentPlan = PaymentPlan.FULL
    installment_count: int = Field(default=3, ge=2, le=12)
    first_payment_method: PaymentMethod = PaymentMethod.CARD
    mark_first_payment_as_paid: bool = False
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_discount(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        if self.discount_type == DiscountType.AMOUNT and self.discount_value > self.base_price:
            raise ValueError("Discount amount cannot exceed the base price")
        return self


class EnrollmentUpdate(PartialUpdate):
    non_nullable = (
        "session_count", "session_duration", "preferred_days",
        "preferred_times", "status", "payment_status",
    )

    session_count: Optional[int] = Field(None, gt=0)
    session_duration: Optional[int] = Field(None, gt=0)
    preferred_days: Optional[List[str]] = None
    preferred_times: Optional[List[str]] = None
    status: Optional[EnrollmentStatus] = None
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)


class PaymentUpdate(PartialUpdate):
    non_nullable = ("amount", "method", "status")

    amount: Optional[float] = Field(None, gt=0)
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)


# =============================
#   Response Schemas
# =============================
class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    enrollment_id: int
    amount: float
    currency: str
    method: PaymentMethod
    status: PaymentStatus
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    description: Optional[str] = None
    created_date: datetime


class PaymentListItem(PaymentResponse):
    student_name: Optional[str] = None
    course_title: Optional[str] = None


class PaymentSummary(BaseModel):
    total: float
    paid: float
    pending: float
    percentage_paid: int


class CourseRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    format: EnrollmentFormat
    session_count: int
    session_duration: int
    base_price: float
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = None
    discount_amount: float
    subtotal: float
    tax_rate: float
    tax_amount: float
    final_price: float
    currency: str
    timezone: str
    preferred_days: List[str] = Field(default_factory=list)
    preferred_times: List[str] = Field(default_factory=list)
    status: EnrollmentStatus
    payment_status: PaymentStatus
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    enrolled_at: datetime


class EnrollmentListItem(EnrollmentResponse):
    student: Optional[UserSummary] = None
    course: Optional[CourseRef] = None


class EnrollmentDetail(EnrollmentListItem):
    payments: List[PaymentResponse] = Field(default_factory=list)
    payment_summary: PaymentSummary


class EnrollmentCancelResponse(BaseModel):
    id: int
    status: EnrollmentStatus
    warning: Optional[str] = None


class StudentCourseItem(BaseModel):
    """A student's own enrollment as shown in the student portal"""

    enrollment_id: int
    status: EnrollmentStatus
    format: EnrollmentFormat
    payment_status: PaymentStatus
    enrolled_at: datetime
    course: CourseRef
    primary_tutor: Optional[UserSummary] = None


class EnrollmentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    format: EnrollmentFormat
    status: EnrollmentStatus
    enrolled_at: datetime


# =============================
#   Student records
# =============================
class StudentEnrollment(EnrollmentResponse):
    course: Optional[CourseRef] = None
    payments: List[PaymentResponse] = Field(default_factory=list)


class StudentDetail(UserResponse):
    """A student with every enrollment, newest first, and its payments"""

    enrollments: List[StudentEnrollment] = Field(default_factory=list)
    enrollment_count: int = 0
