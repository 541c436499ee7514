import logging

from fastapi import Depends

from tutorhub.clients.redis_client import RedisClient
from tutorhub.config import Settings, get_settings
from tutorhub.dependencies.repositories import (
    get_absence_repository,
    get_activity_repository,
    get_assignment_repository,
    get_attendance_repository,
    get_category_repository,
    get_course_format_repository,
    get_course_repository,
    get_course_tutor_repository,
    get_course_type_repository,
    get_curriculum_repository,
    get_enrollment_repository,
    get_item_progress_repository,
    get_item_repository,
    get_payment_repository,
    get_phase_progress_repository,
    get_phase_repository,
    get_session_repository,
    get_settings_repository,
    get_submission_repository,
    get_token_repository,
    get_user_repository,
)
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
from tutorhub.schemas.catalog import CatalogEntryResponse, CategoryResponse
from tutorhub.services.assignment_service import AssignmentService
from tutorhub.services.attendance_service import AttendanceService
from tutorhub.services.auth_service import AuthService
from tutorhub.services.catalog_service import CatalogService, CurriculumService
from tutorhub.services.course_service import CourseService
from tutorhub.services.dashboard_service import DashboardService
from tutorhub.services.enrollment_service import EnrollmentService
from tutorhub.services.settings_service import SettingsService
from tutorhub.services.syllabus_service import SyllabusService
from tutorhub.services.tutor_service import TutorService
from tutorhub.services.user_service import UserService

logger = logging.getLogger(__name__)

# =============================
#   Redis Client (Singleton)
# =============================
_redis_client_instance = None


async def get_redis_client() -> RedisClient:
    """
    Get singleton RedisClient instance.
    Connection is established on first call and reused.
    """
    global _redis_client_instance

    if _redis_client_instance is None:
        settings = get_settings()
        _redis_client_instance = RedisClient(settings)
        await _redis_client_instance.connect()
        logger.info("RedisClient singleton created")

    return _redis_client_instance


async def close_redis_client():
    global _redis_client_instance

    if _redis_client_instance is not None:
        await _redis_client_instance.disconnect()
        _redis_client_instance = None


# =============================
#   Auth & Users
# =============================
async def get_auth_service(
        settings: Settings = Depends(get_settings),
        user_repository: UserRepository = Depends(get_user_repository),
        token_repository: PasswordResetTokenRepository = Depends(get_token_repository),
) -> AuthService:
    return AuthService(settings, user_repository, token_repository)


async def get_user_service(
        user_repository: UserRepository = Depends(get_user_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        course_tutor_repository: CourseTutorRepository = Depends(get_course_tutor_repository),
) -> UserService:
    return UserService(user_repository, enrollment_repository, course_tutor_repository)


# =============================
#   Catalog
# =============================
async def get_category_service(
        repository: CategoryRepository = Depends(get_category_repository),
) -> CatalogService:
    return CatalogService(repository, "Category", CategoryResponse)


async def get_course_type_service(
        repository: CourseTypeRepository = Depends(get_course_type_repository),
) -> CatalogService:
    return CatalogService(repository, "Course type", CatalogEntryResponse)


async def get_course_format_service(
        repository: CourseFormatRepository = Depends(get_course_format_repository),
) -> CatalogService:
    return CatalogService(repository, "Course format", CatalogEntryResponse)


async def get_curriculum_service(
        repository: CurriculumRepository = Depends(get_curriculum_repository),
) -> CurriculumService:
    return CurriculumService(repository)


# =============================
#   Courses & Syllabus
# =============================
async def get_course_service(
        course_repository: CourseRepository = Depends(get_course_repository),
        course_tutor_repository: CourseTutorRepository = Depends(get_course_tutor_repository),
        category_repository: CategoryRepository = Depends(get_category_repository),
        course_type_repository: CourseTypeRepository = Depends(get_course_type_repository),
        course_format_repository: CourseFormatRepository = Depends(get_course_format_repository),
        curriculum_repository: CurriculumRepository = Depends(get_curriculum_repository),
        user_repository: UserRepository = Depends(get_user_repository),
) -> CourseService:
    return CourseService(
        course_repository=course_repository,
        course_tutor_repository=course_tutor_repository,
        category_repository=category_repository,
        course_type_repository=course_type_repository,
        course_format_repository=course_format_repository,
        curriculum_repository=curriculum_repository,
        user_repository=user_repository,
    )


async def get_syllabus_service(
        phase_repository: SyllabusPhaseRepository = Depends(get_phase_repository),
        item_repository: SyllabusItemRepository = Depends(get_item_repository),
        phase_progress_repository: PhaseProgressRepository = Depends(get_phase_progress_repository),
        item_progress_repository: ItemProgressRepository = Depends(get_item_progress_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
) -> SyllabusService:
    return SyllabusService(
        phase_repository=phase_repository,
        item_repository=item_repository,
        phase_progress_repository=phase_progress_repository,
        item_progress_repository=item_progress_repository,
        enrollment_repository=enrollment_repository,
    )


# =============================
#   Settings, Enrollments & Payments
# =============================
async def get_settings_service(
        settings: Settings = Depends(get_settings),
        settings_repository: SettingsRepository = Depends(get_settings_repository),
) -> SettingsService:
    return SettingsService(settings, settings_repository)


async def get_enrollment_service(
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        payment_repository: PaymentRepository = Depends(get_payment_repository),
        user_repository: UserRepository = Depends(get_user_repository),
        course_repository: CourseRepository = Depends(get_course_repository),
        course_tutor_repository: CourseTutorRepository = Depends(get_course_tutor_repository),
        settings_service: SettingsService = Depends(get_settings_service),
) -> EnrollmentService:
    return EnrollmentService(
        enrollment_repository=enrollment_repository,
        payment_repository=payment_repository,
        user_repository=user_repository,
        course_repository=course_repository,
        course_tutor_repository=course_tutor_repository,
        settings_service=settings_service,
    )


# =============================
#   Assignments
# =============================
async def get_assignment_service(
        assignment_repository: AssignmentRepository = Depends(get_assignment_repository),
        submission_repository: SubmissionRepository = Depends(get_submission_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        user_repository: UserRepository = Depends(get_user_repository),
        course_repository: CourseRepository = Depends(get_course_repository),
        course_tutor_repository: CourseTutorRepository = Depends(get_course_tutor_repository),
) -> AssignmentService:
    return AssignmentService(
        assignment_repository=assignment_repository,
        submission_repository=submission_repository,
        enrollment_repository=enrollment_repository,
        user_repository=user_repository,
        course_repository=course_repository,
        course_tutor_repository=course_tutor_repository,
    )


# =============================
#   Tutor portal & Attendance
# =============================
async def get_attendance_service(
        course_service: CourseService = Depends(get_course_service),
        session_repository: ClassSessionRepository = Depends(get_session_repository),
        attendance_repository: AttendanceRecordRepository = Depends(get_attendance_repository),
        activity_repository: StudentActivityRepository = Depends(get_activity_repository),
        absence_repository: StudentAbsenceRepository = Depends(get_absence_repository),
        redis_client: RedisClient = Depends(get_redis_client),
) -> AttendanceService:
    """
    Dependencies:
        - RedisClient: serializes bulk writes for the same course and day
    """
    return AttendanceService(
        course_service=course_service,
        session_repository=session_repository,
        attendance_repository=attendance_repository,
        activity_repository=activity_repository,
        absence_repository=absence_repository,
        redis_client=redis_client,
    )


async def get_tutor_service(
        course_service: CourseService = Depends(get_course_service),
        syllabus_service: SyllabusService = Depends(get_syllabus_service),
        course_repository: CourseRepository = Depends(get_course_repository),
        course_tutor_repository: CourseTutorRepository = Depends(get_course_tutor_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        session_repository: ClassSessionRepository = Depends(get_session_repository),
        attendance_repository: AttendanceRecordRepository = Depends(get_attendance_repository),
        submission_repository: SubmissionRepository = Depends(get_submission_repository),
        user_repository: UserRepository = Depends(get_user_repository),
) -> TutorService:
    return TutorService(
        course_service=course_service,
        syllabus_service=syllabus_service,
        course_repository=course_repository,
        course_tutor_repository=course_tutor_repository,
        enrollment_repository=enrollment_repository,
        session_repository=session_repository,
        attendance_repository=attendance_repository,
        submission_repository=submission_repository,
        user_repository=user_repository,
    )


# =============================
#   Dashboard
# =============================
async def get_dashboard_service(
        user_repository: UserRepository = Depends(get_user_repository),
        course_repository: CourseRepository = Depends(get_course_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        payment_repository: PaymentRepository = Depends(get_payment_repository),
        redis_client: RedisClient = Depends(get_redis_client),
) -> DashboardService:
    """
    Dependencies:
        - RedisClient: short-lived cache of the computed statistics
    """
    return DashboardService(
        user_repository=user_repository,
        course_repository=course_repository,
        enrollment_repository=enrollment_repository,
        payment_repository=payment_repository,
        redis_client=redis_client,
    )
