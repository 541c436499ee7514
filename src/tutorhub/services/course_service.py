"""
Course Service - course catalogue management and tutor assignment
"""
import logging
from typing import Optional

from tutorhub.model.course_models import Course, CourseTutor
from tutorhub.model.enums import CourseStatus, UserRole
from tutorhub.model.user_models import User
from tutorhub.repositories.catalog_repo import (
    CategoryRepository,
    CourseFormatRepository,
    CourseTypeRepository,
    CurriculumRepository,
)
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.course import (
    CourseBulkRequest,
    CourseBulkResult,
    CourseCreate,
    CourseDetail,
    CourseListItem,
    CourseTutorResponse,
    CourseTutorsUpdate,
    CourseUpdate,
    LookupRef,
)
from tutorhub.schemas.generic import PaginatedData, Pagination
from tutorhub.services.catalog_service import unique_slug
from tutorhub.utils.exceptions import (
    AccessDeniedException,
    BadRequestException,
    ResourceNotFoundException,
)
from tutorhub.utils.money_utils import price_fields_to_money
from tutorhub.utils.text_utils import course_slug

PRICE_FIELDS = ("one_to_one_price", "group_price")

logger = logging.getLogger(__name__)


def tutor_links_to_response(links) -> list[CourseTutorResponse]:
    return [
        CourseTutorResponse(
            tutor_id=link.tutor_id,
            name=link.tutor.name,
            email=link.tutor.email,
            is_primary=link.is_primary,
            specialization=link.specialization,
            can_teach_one_to_one=link.can_teach_one_to_one,
            can_teach_group=link.can_teach_group,
        )
        for link in sorted(links, key=lambda link: (not link.is_primary, link.id))
    ]


def course_to_list_item(course: Course, enrollment_count: int) -> CourseListItem:
    """Course with category and tutors loaded -> list row"""
    item = CourseListItem.model_validate(course, from_attributes=True)
    item.category = LookupRef.model_validate(course.category) if course.category else None
    item.tutors = tutor_links_to_response(course.course_tutors)
    item.enrollment_count = enrollment_count
    return item


class CourseService:
    def __init__(
            self,
            course_repository: CourseRepository,
            course_tutor_repository: CourseTutorRepository,
            category_repository: CategoryRepository,
            course_type_repository: CourseTypeRepository,
            course_format_repository: CourseFormatRepository,
            curriculum_repository: CurriculumRepository,
            user_repository: UserRepository,
    ):
        self._course_repository = course_repository
        self._course_tutor_repository = course_tutor_repository
        self._category_repository = category_repository
        self._course_type_repository = course_type_repository
        self._course_format_repository = course_format_repository
        self._curriculum_repository = curriculum_repository
        self._user_repository = user_repository

    async def list_courses(
            self,
            actor: User,
            search: Optional[str],
            status: Optional[CourseStatus],
            category_slug: Optional[str],
            page: int,
            limit: int,
    ) -> PaginatedData[CourseListItem]:
        tutor_id = actor.id if actor.role == UserRole.TUTOR else None
        courses, total = await self._course_repository.search(
            search=search,
            status=status,
            category_slug=category_slug,
            tutor_id=tutor_id,
            skip=(page - 1) * limit,
            limit=limit,
        )
        counts = await self._course_repository.enrollment_counts([c.id for c in courses])
        return PaginatedData[CourseListItem](
            items=[course_to_list_item(c, counts.get(c.id, 0)) for c in courses],
            pagination=Pagination.build(page, limit, total),
        )

    async def get_course(self, course_id: int) -> CourseDetail:
        course = await self._course_repository.get_details(course_id)
        if not course:
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")

        counts = await self._course_repository.enrollment_counts([course.id])
        detail = CourseDetail(
            **course_to_list_item(course, counts.get(course.id, 0)).model_dump(),
            course_type=LookupRef.model_validate(course.course_type) if course.course_type else None,
            course_format=LookupRef.model_validate(course.course_format) if course.course_format else None,
            curriculum=LookupRef.model_validate(course.curriculum) if course.curriculum else None,
            phase_count=await self._course_repository.phase_count(course.id),
        )
        return detail

    async def require_course(self, course_id: int) -> Course:
        course = await self._course_repository.get_by_id(course_id)
        if not course:
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")
        return course

    async def create_course(self, request: CourseCreate) -> CourseDetail:
        await self._check_references(request.model_dump(exclude_unset=True))

        data = price_fields_to_money(request.model_dump(), *PRICE_FIELDS)
        data["slug"] = await unique_slug(self._course_repository, request.title, slug_fn=course_slug)
        course = await self._course_repository.create(data)
        logger.info(f"Course {course.id} created with slug {course.slug}")
        return await self.get_course(course.id)

    async def update_course(self, course_id: int, request: CourseUpdate) -> CourseDetail:
        course = await self.require_course(course_id)
        data = request.model_dump(exclude_unset=True)
        await self._check_references(data)
        price_fields_to_money(data, *PRICE_FIELDS)

        if data.get("title") and data["title"] != course.title:
            data["slug"] = await unique_slug(
                self._course_repository, data["title"], exclude_id=course.id, slug_fn=course_slug
            )

        await self._course_repository.update(course, data)
        logger.info(f"Course {course.id} updated")
        return await self.get_course(course.id)

    async def archive_course(self, course_id: int) -> CourseDetail:
        course = await self.require_course(course_id)
        await self._course_repository.update(course, {"status": CourseStatus.ARCHIVED})
        logger.info(f"Course {course.id} archived")
        return await self.get_course(course.id)

    # =============================
    #   Tutors
    # =============================
    async def list_tutors(self, course_id: int) -> list[CourseTutorResponse]:
        await self.require_course(course_id)
        return tutor_links_to_response(await self._course_tutor_repository.list_for_course(course_id))

    async def set_tutors(self, course_id: int, request: CourseTutorsUpdate) -> list[CourseTutorResponse]:
        """
        Replace the tutor set of a course.

        Raises:
            BadRequestException: primary tutor not in tutor_ids, or an id that is not a tutor
        """
        await self.require_course(course_id)

        tutor_ids = await self._checked_tutor_ids(request.tutor_ids, request.primary_tutor_id)
        await self._replace_tutor_links([course_id], tutor_ids, request.primary_tutor_id)
        await self._course_tutor_repository.commit()
        logger.info(f"Course {course_id} tutors set to {tutor_ids}")
        return await self.list_tutors(course_id)

    async def ensure_tutor_assigned(self, course_id: int, tutor: User) -> Course:
        """Raises 403 unless the tutor teaches the course."""
        course = await self.require_course(course_id)
        if not await self._course_tutor_repository.is_assigned(course_id, tutor.id):
            raise AccessDeniedException("You are not assigned to this course")
        return course

    # =============================
    #   Bulk actions
    # =============================
    async def bulk_action(self, request: CourseBulkRequest) -> CourseBulkResult:
        """
        Apply one action to several courses in a single transaction.

        delete never removes rows: courses without ACTIVE enrollments are archived.

        Raises:
            ResourceNotFoundException: one of the course ids does not exist
            BadRequestException: delete with ACTIVE enrollments, assign-tutors without tutors
        """
        course_ids = list(dict.fromkeys(request.course_ids))
        missing = sorted(set(course_ids) - await self._course_repository.existing_ids(course_ids))
        if missing:
            raise ResourceNotFoundException(f"Course not found with ID: {missing[0]}")

        if request.action == "assign-tutors":
            if not request.tutor_ids:
                raise BadRequestException("Tutor IDs are required for assign-tutors action")
            tutor_ids = await self._checked_tutor_ids(request.tutor_ids, request.primary_tutor_id)
            count = await self._replace_tutor_links(course_ids, tutor_ids, request.primary_tutor_id)
        elif request.action == "publish":
            count = await self._course_repository.set_status(course_ids, CourseStatus.PUBLISHED)
        else:
            if request.action == "delete" and await self._course_repository.count_active_enrollments(course_ids):
                raise BadRequestException(
                    "Cannot delete courses with active enrollments. Please archive instead."
                )
            count = await self._course_repository.set_status(course_ids, CourseStatus.ARCHIVED)

        await self._course_repository.commit()
        logger.info(f"Bulk {request.action} applied to courses {course_ids}")
        return CourseBulkResult(count=count)

    async def _checked_tutor_ids(self, tutor_ids: list[int], primary_tutor_id: Optional[int]) -> list[int]:
        tutor_ids = list(dict.fromkeys(tutor_ids))
        if primary_tutor_id is not None and primary_tutor_id not in tutor_ids:
            raise BadRequestException("Primary tutor must be one of the selected tutors")

        tutors = await self._user_repository.get_many(tutor_ids, role=UserRole.TUTOR)
        if len(tutors) != len(tutor_ids):
            raise BadRequestException("Every selected user must be a tutor")
        return tutor_ids

    async def _replace_tutor_links(
            self, course_ids: list[int], tutor_ids: list[int], primary_tutor_id: Optional[int]
    ) -> int:
        """Stage the new tutor links of every course; returns the number of links."""
        links = [
            CourseTutor(course_id=course_id, tutor_id=tutor_id, is_primary=tutor_id == primary_tutor_id)
            for course_id in course_ids
            for tutor_id in tutor_ids
        ]
        for course_id in course_ids:
            await self._course_tutor_repository.delete_by_filters({"course_id": course_id})
        await self._course_tutor_repository.add_many(links)
        return len(links)

    async def _check_references(self, data: dict):
        checks = (
            ("category_id", self._category_repository, "Category"),
            ("course_type_id", self._course_type_repository, "Course type"),
            ("course_format_id", self._course_format_repository, "Course format"),
            ("curriculum_id", self._curriculum_repository, "Curriculum"),
        )
        for field, repository, label in checks:
            ref_id = data.get(field)
            if ref_id is not None and not await repository.get_by_id(ref_id):
                raise BadRequestException(f"{label} not found with ID: {ref_id}")
