"""
Enums shared by models and request schemas
"""
from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    TUTOR = "TUTOR"
    STUDENT = "STUDENT"
    PARENT = "PARENT"

    @property
    def is_admin(self) -> bool:
        return self in (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class CourseStatus(str, Enum):
    """Course publication status"""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class EnrollmentFormat(str, Enum):
    ONE_TO_ONE = "ONE_TO_ONE"
    GROUP = "GROUP"


class EnrollmentStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    PARTIAL = "PARTIAL"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    PAYPAL = "PAYPAL"
    STRIPE = "STRIPE"
    CASH = "CASH"
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"
    WALLET = "WALLET"


class PaymentPlan(str, Enum):
    FULL = "FULL"
    INSTALLMENTS = "INSTALLMENTS"


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    AMOUNT = "AMOUNT"
    NONE = "NONE"


class AssignmentType(str, Enum):
    REGULAR = "REGULAR"
    PROJECT = "PROJECT"
    QUIZ = "QUIZ"
    PEER_REVIEW = "PEER_REVIEW"
    GROUP_WORK = "GROUP_WORK"


class TargetType(str, Enum):
    ALL_STUDENTS = "ALL_STUDENTS"
    COURSES = "COURSES"
    SELECTED_INDIVIDUALS = "SELECTED_INDIVIDUALS"


class SubmissionType(str, Enum):
    TEXT = "TEXT"
    GITHUB_URL = "GITHUB_URL"
    LIVE_URL = "LIVE_URL"
    SCREENSHOTS = "SCREENSHOTS"
    SCREENRECORDINGS = "SCREENRECORDINGS"
    FILE_UPLOAD = "FILE_UPLOAD"
    MULTIPLE_TYPES = "MULTIPLE_TYPES"


class SubmissionStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    LATE = "LATE"
    GRADED = "GRADED"
    RETURNED = "RETURNED"
    RESUBMITTED = "RESUBMITTED"


class SessionType(str, Enum):
    ONE_TO_ONE = "ONE_TO_ONE"
    GROUP = "GROUP"


class SessionStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class ActivityStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class AbsenceStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AcademicYearStructure(str, Enum):
    SEMESTER = "SEMESTER"
    TRIMESTER = "TRIMESTER"
    QUARTER = "QUARTER"


class GradingSystem(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    LETTER = "LETTER"
    NUMERIC = "NUMERIC"
