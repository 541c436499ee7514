"""
Model package - Database models and enums
"""
from tutorhub.model.base import Base, BaseMixin, TimestampMixin
from tutorhub.model.enums import (
    CourseStatus,
    EnrollmentStatus,
    PaymentStatus,
    SessionStatus,
    SubmissionStatus,
    UserRole,
    UserStatus,
)
from tutorhub.model.user_models import User, PasswordResetToken
from tutorhub.model.catalog_models import Category, CourseType, CourseFormat, Curriculum
from tutorhub.model.course_models import (
    Course,
    CourseTutor,
    SyllabusPhase,
    SyllabusItem,
    StudentSyllabusProgress,
    StudentSyllabusItemProgress,
)
from tutorhub.model.enrollment_models import Enrollment, Payment
from tutorhub.model.assignment_models import Assignment, AssignmentSubmission
from tutorhub.model.session_models import (
    ClassSession,
    AttendanceRecord,
    StudentActivity,
    StudentAbsence,
)
from tutorhub.model.settings_models import InstitutionSettings

__all__ = [
    # Base classes
    'Base',
    'BaseMixin',
    'TimestampMixin',
    # Enums
    'CourseStatus',
    'EnrollmentStatus',
    'PaymentStatus',
    'SessionStatus',
    'SubmissionStatus',
    'UserRole',
    'UserStatus',
    # Users
    'User',
    'PasswordResetToken',
    # Catalog
    'Category',
    'CourseType',
    'CourseFormat',
    'Curriculum',
    # Courses
    'Course',
    'CourseTutor',
    'SyllabusPhase',
    'SyllabusItem',
    'StudentSyllabusProgress',
    'StudentSyllabusItemProgress',
    # Enrollments
    'Enrollment',
    'Payment',
    # Assignments
    'Assignment',
    'AssignmentSubmission',
    # Sessions
    'ClassSession',
    'AttendanceRecord',
    'StudentActivity',
    'StudentAbsence',
    # Settings
    'InstitutionSettings',
]
