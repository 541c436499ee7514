"""
Repository dependency injection
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.dependencies.db import get_database
from tutorhub.repositories.assignment_repo import AssignmentRepository, SubmissionRepository
from tutorhub.repositories.catalog_repo import (
    CategoryRepository,
    CourseFormatRepository,
    CourseTypeRepository,
    CurriculumRepository,
)
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository, PaymentRepository
from tutorhub.repositories.session_repo import (
    AttendanceRecordRepository,
    ClassSessionRepository,
    StudentAbsenceRepository,
    StudentActivityRepository,
)
from tutorhub.repositories.settings_repo import SettingsRepository
from tutorhub.repositories.syllabus_repo import (
    ItemProgressRepository,
    PhaseProgressRepository,
    SyllabusItemRepository,
    SyllabusPhaseRepository,
)
from tutorhub.repositories.user_repo import PasswordResetTokenRepository, UserRepository


# =============================
#   Users
# =============================
async def get_user_repository(session: AsyncSession = Depends(get_database)) -> UserRepository:
    return UserRepository(session)


async def get_token_repository(session: AsyncSession = Depends(get_database)) -> PasswordResetTokenRepository:
    return PasswordResetTokenRepository(session)


# =============================
#   Catalog
# =============================
async def get_category_repository(session: AsyncSession = Depends(get_database)) -> CategoryRepository:
    return CategoryRepository(session)


async def get_course_type_repository(session: AsyncSession = Depends(get_database)) -> CourseTypeRepository:
    return CourseTypeRepository(session)


async def get_course_format_repository(session: AsyncSession = Depends(get_database)) -> CourseFormatRepository:
    return CourseFormatRepository(session)


async def get_curriculum_repository(session: AsyncSession = Depends(get_database)) -> CurriculumRepository:
    return CurriculumRepository(session)


# =============================
#   Courses & syllabus
# =============================
async def get_course_repository(session: AsyncSession = Depends(get_database)) -> CourseRepository:
    return CourseRepository(session)


async def get_course_tutor_repository(session: AsyncSession = Depends(get_database)) -> CourseTutorRepository:
    return CourseTutorRepository(session)


async def get_phase_repository(session: AsyncSession = Depends(get_database)) -> SyllabusPhaseRepository:
    return SyllabusPhaseRepository(session)


async def get_item_repository(session: AsyncSession = Depends(get_database)) -> SyllabusItemRepository:
    return SyllabusItemRepository(session)


async def get_phase_progress_repository(session: AsyncSession = Depends(get_database)) -> PhaseProgressRepository:
    return PhaseProgressRepository(session)


async def get_item_progress_repository(session: AsyncSession = Depends(get_database)) -> ItemProgressRepository:
    return ItemProgressRepository(session)


# =============================
#   Enrollments & payments
# =============================
async def get_enrollment_repository(session: AsyncSession = Depends(get_database)) -> EnrollmentRepository:
    return EnrollmentRepository(session)


async def get_payment_repository(session: AsyncSession = Depends(get_database)) -> PaymentRepository:
    return PaymentRepository(session)


# =============================
#   Assignments
# =============================
async def get_assignment_repository(session: AsyncSession = Depends(get_database)) -> AssignmentRepository:
    return AssignmentRepository(session)


async def get_submission_repository(session: AsyncSession = Depends(get_database)) -> SubmissionRepository:
    return SubmissionRepository(session)


# =============================
#   Sessions & attendance
# =============================
async def get_session_repository(session: AsyncSession = Depends(get_database)) -> ClassSessionRepository:
    return ClassSessionRepository(session)


async def get_attendance_repository(session: AsyncSession = Depends(get_database)) -> AttendanceRecordRepository:
    return AttendanceRecordRepository(session)


async def get_activity_repository(session: AsyncSession = Depends(get_database)) -> StudentActivityRepository:
    return StudentActivityRepository(session)


async def get_absence_repository(session: AsyncSession = Depends(get_database)) -> StudentAbsenceRepository:
    return StudentAbsenceRepository(session)


async def get_settings_repository(session: AsyncSession = Depends(get_database)) -> SettingsRepository:
    return SettingsRepository(session)
