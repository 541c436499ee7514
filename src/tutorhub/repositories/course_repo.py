"""
Course Repository - Data access layer for courses and their tutors
"""
from typing import Optional, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorhub.model.catalog_models import Category
from tutorhub.model.course_models import Course, CourseTutor, SyllabusPhase
from tutorhub.model.enrollment_models import Enrollment
from tutorhub.model.enums import CourseStatus, EnrollmentStatus
from tutorhub.repositories.base_repo import BaseRepository

LIST_OPTIONS = (
    selectinload(Course.category),
    selectinload(Course.course_tutors).selectinload(CourseTutor.tutor),
)


class CourseRepository(BaseRepository[Course]):
    """
    Repository for Course entity
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Course, session)

    async def search(
        self,
        search: Optional[str] = None,
        status: Optional[CourseStatus] = None,
        category_slug: Optional[str] = None,
        tutor_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[Sequence[Course], int]:
        """
        Filter courses for listings, newest first.

        Args:
            search: Case-insensitive title match
            status: Restrict to one status
            category_slug: Restrict to one category
            tutor_id: Restrict to courses the tutor is assigned to
            skip: Offset
            limit: Page size

        Returns:
            (courses with category and tutors loaded, total matches)
        """
        query = select(Course)
        if search:
            query = query.where(func.lower(Course.title).like(f"%{search.lower()}%"))
        if status:
            query = query.where(Course.status == status)
        if category_slug:
            query = query.join(Category, Course.category_id == Category.id).where(
                Category.slug == category_slug
            )
        if tutor_id is not None:
            assigned = select(CourseTutor.course_id).where(CourseTutor.tutor_id == tutor_id)
            query = query.where(Course.id.in_(assigned))

        query = query.order_by(Course.created_date.desc(), Course.id.desc())
        return await self.paginate(query, skip, limit, options=LIST_OPTIONS)

    async def get_details(self, course_id: int) -> Optional[Course]:
        """
        Get a course with every relationship the detail view renders.

        Args:
            course_id: Course primary key

        Returns:
            Course or None if not found
        """
        query = (
            select(Course)
            .options(
                *LIST_OPTIONS,
                selectinload(Course.course_type),
                selectinload(Course.course_format),
                selectinload(Course.curriculum),
            )
            .where(Course.id == course_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def enrollment_counts(self, course_ids: Sequence[int]) -> dict[int, int]:
        if not course_ids:
            return {}
        query = (
            select(Enrollment.course_id, func.count(Enrollment.id))
            .where(Enrollment.course_id.in_(course_ids))
            .group_by(Enrollment.course_id)
        )
        return {course_id: count for course_id, count in (await self.session.execute(query)).all()}

    async def count_active_enrollments(self, course_ids: Sequence[int]) -> int:
        query = select(func.count(Enrollment.id)).where(
            Enrollment.course_id.in_(course_ids),
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        return (await self.session.execute(query)).scalar() or 0

    async def phase_count(self, course_id: int) -> int:
        query = select(func.count(SyllabusPhase.id)).where(SyllabusPhase.course_id == course_id)
        return (await self.session.execute(query)).scalar() or 0

    async def count_created_between(self, start, end=None) -> int:
        query = select(func.count(Course.id)).where(Course.created_date >= start)
        if end is not None:
            query = query.where(Course.created_date <= end)
        return (await self.session.execute(query)).scalar() or 0

    async def recent_published(self, limit: int) -> Sequence[Course]:
        query = (
            select(Course)
            .options(selectinload(Course.course_tutors).selectinload(CourseTutor.tutor))
            .where(Course.status == CourseStatus.PUBLISHED)
            .order_by(Course.created_date.desc())
            .limit(limit)
        )
        return await self.execute_query(query)

    async def existing_ids(self, course_ids: Sequence[int]) -> set[int]:
        query = select(Course.id).where(Course.id.in_(course_ids))
        return set((await self.session.execute(query)).scalars().all())

    async def set_status(self, course_ids: Sequence[int], status: CourseStatus) -> int:
        """Switch the status of every listed course inside the current transaction."""
        result = await self.session.execute(
            update(Course)
            .where(Course.id.in_(course_ids))
            .values(status=status)
        )
        return result.rowcount


class CourseTutorRepository(BaseRepository[CourseTutor]):
    def __init__(self, session: AsyncSession):
        super().__init__(CourseTutor, session)

    async def list_for_course(self, course_id: int) -> Sequence[CourseTutor]:
        query = (
            select(CourseTutor)
            .options(selectinload(CourseTutor.tutor))
            .where(CourseTutor.course_id == course_id)
            .order_by(CourseTutor.is_primary.desc(), CourseTutor.id)
            .execution_options(populate_existing=True)
        )
        return await self.execute_query(query)

    async def is_assigned(self, course_id: int, tutor_id: int) -> bool:
        return await self.count_by_filters({"course_id": course_id, "tutor_id": tutor_id}) > 0

    async def course_ids_for_tutor(self, tutor_id: int) -> list[int]:
        query = select(CourseTutor.course_id).where(CourseTutor.tutor_id == tutor_id)
        return list((await self.session.execute(query)).scalars().all())

    async def primary_tutors(self, course_ids: Sequence[int]) -> dict[int, CourseTutor]:
        if not course_ids:
            return {}
        query = (
            select(CourseTutor)
            .options(selectinload(CourseTutor.tutor))
            .where(CourseTutor.course_id.in_(course_ids), CourseTutor.is_primary.is_(True))
        )
        return {link.course_id: link for link in await self.execute_query(query)}
