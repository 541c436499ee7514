"""
Repository package - Data access layer
"""

from tutorhub.repositories.base_repo import BaseRepository
from tutorhub.repositories.user_repo import UserRepository, PasswordResetTokenRepository
from tutorhub.repositories.catalog_repo import (
    CategoryRepository,
    CourseTypeRepository,
    CourseFormatRepository,
    CurriculumRepository,
)
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.syllabus_repo import (
    SyllabusPhaseRepository,
    SyllabusItemRepository,
    PhaseProgressRepository,
    ItemProgressRepository,
)
from tutorhub.repositories.enrollment_repo import EnrollmentRepository, PaymentRepository
from tutorhub.repositories.assignment_repo import AssignmentRepository, SubmissionRepository
from tutorhub.repositories.session_repo import (
    ClassSessionRepository,
    AttendanceRecordRepository,
    StudentActivityRepository,
    StudentAbsenceRepository,
)
from tutorhub.repositories.settings_repo import SettingsRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PasswordResetTokenRepository",
    "CategoryRepository",
    "CourseTypeRepository",
    "CourseFormatRepository",
    "CurriculumRepository",
    "CourseRepository",
    "CourseTutorRepository",
    "SyllabusPhaseRepository",
    "SyllabusItemRepository",
    "PhaseProgressRepository",
    "ItemProgressRepository",
    "EnrollmentRepository",
    "PaymentRepository",
    "AssignmentRepository",
    "SubmissionRepository",
    "ClassSessionRepository",
    "AttendanceRecordRepository",
    "StudentActivityRepository",
    "StudentAbsenceRepository",
    "SettingsRepository",
]
