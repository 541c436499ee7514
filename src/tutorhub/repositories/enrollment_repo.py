"""
Enrollment Repository - enrollments and their payments
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorhub.model.course_models import Course
from tutorhub.model.enrollment_models import Enrollment, Payment
from tutorhub.model.enums import EnrollmentFormat, EnrollmentStatus, PaymentStatus
from tutorhub.model.user_models import User
from tutorhub.repositories.base_repo import BaseRepository

OPEN_STATUSES = (EnrollmentStatus.PENDING, EnrollmentStatus.ACTIVE)


class EnrollmentRepository(BaseRepository[Enrollment]):
    """
    Repository for Enrollment entity
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Enrollment, session)

    async def search(
        self,
        search: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
        format: Optional[EnrollmentFormat] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[Sequence[Enrollment], int]:
        """
        Filter enrollments, newest first.

        Args:
            search: Case-insensitive match on student name/email or course title
            status: Restrict to one enrollment status
            format: Restrict to one format

        Returns:
            (enrollments with student and course loaded, total matches)
        """
        query = (
            select(Enrollment)
            .join(User, Enrollment.student_id == User.id)
            .join(Course, Enrollment.course_id == Course.id)
        )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(Course.title).like(pattern),
                )
            )
        if status:
            query = query.where(Enrollment.status == status)
        if format:
            query = query.where(Enrollment.format == format)

        query = query.order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        return await self.paginate(
            query,
            skip,
            limit,
            options=(selectinload(Enrollment.student), selectinload(Enrollment.course)),
        )

    async def get_details(self, enrollment_id: int) -> Optional[Enrollment]:
        query = (
            select(Enrollment)
            .options(
                selectinload(Enrollment.student),
                selectinload(Enrollment.course),
                selectinload(Enrollment.payments),
            )
            .where(Enrollment.id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def find_open_duplicate(
        self, student_id: int, course_id: int, format: EnrollmentFormat
    ) -> Optional[Enrollment]:
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.format == format,
            Enrollment.status.in_(OPEN_STATUSES),
        )
        return (await self.session.execute(query.limit(1))).scalars().first()

    async def get_active(self, student_id: int, course_id: int) -> Optional[Enrollment]:
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        return (await self.session.execute(query.limit(1))).scalars().first()

    async def has_any(self, student_id: int, course_id: int) -> bool:
        return await self.count_by_filters({"student_id": student_id, "course_id": course_id}) > 0

    async def active_student_ids(self, course_ids: Sequence[int]) -> list[int]:
        """Distinct students with an ACTIVE enrollment in any of the courses."""
        if not course_ids:
            return []
        query = (
            select(Enrollment.student_id)
            .where(
                Enrollment.course_id.in_(course_ids),
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .distinct()
        )
        return list((await self.session.execute(query)).scalars().all())

    async def active_counts(self, course_ids: Sequence[int]) -> dict[int, int]:
        """course id -> number of ACTIVE enrollments"""
        if not course_ids:
            return {}
        query = (
            select(Enrollment.course_id, func.count(Enrollment.id))
            .where(
                Enrollment.course_id.in_(course_ids),
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .group_by(Enrollment.course_id)
        )
        return {course_id: count for course_id, count in (await self.session.execute(query)).all()}

    async def active_in_course(self, course_id: int) -> Sequence[Enrollment]:
        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.student))
            .where(Enrollment.course_id == course_id, Enrollment.status == EnrollmentStatus.ACTIVE)
            .order_by(Enrollment.enrolled_at.asc(), Enrollment.id.asc())
        )
        return await self.execute_query(query)

    async def in_courses(
        self,
        course_ids: Sequence[int],
        search: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> Sequence[Enrollment]:
        """Enrollments of the courses with student and course loaded, newest first."""
        if not course_ids:
            return []
        query = (
            select(Enrollment)
            .join(User, Enrollment.student_id == User.id)
            .options(selectinload(Enrollment.student), selectinload(Enrollment.course))
            .where(Enrollment.course_id.in_(course_ids))
        )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern))
            )
        if status:
            query = query.where(Enrollment.status == status)
        return await self.execute_query(
            query.order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        )

    async def with_payments_for_student(self, student_id: int) -> Sequence[Enrollment]:
        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.course), selectinload(Enrollment.payments))
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        )
        return await self.execute_query(query)

    async def students_in_course(self, course_id: int) -> Sequence[Enrollment]:
        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.student))
            .where(Enrollment.course_id == course_id)
            .order_by(Enrollment.enrolled_at.asc())
        )
        return await self.execute_query(query)

    async def for_student(self, student_id: int) -> Sequence[Enrollment]:
        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.course))
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at.desc())
        )
        return await self.execute_query(query)

    async def count_for_student(self, student_id: int) -> int:
        return await self.count_by_filters({"student_id": student_id})

    async def count_enrolled_between(self, start: datetime, end: Optional[datetime] = None) -> int:
        query = select(func.count(Enrollment.id)).where(Enrollment.enrolled_at >= start)
        if end is not None:
            query = query.where(Enrollment.enrolled_at <= end)
        return (await self.session.execute(query)).scalar() or 0

    async def recent(self, limit: int) -> Sequence[Enrollment]:
        query = (
            select(Enrollment)
            .options(selectinload(Enrollment.student), selectinload(Enrollment.course))
            .order_by(Enrollment.enrolled_at.desc())
            .limit(limit)
        )
        return await self.execute_query(query)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)

    async def list_for_enrollment(self, enrollment_id: int) -> Sequence[Payment]:
        query = (
            select(Payment)
            .where(Payment.enrollment_id == enrollment_id)
            .order_by(Payment.due_date.asc(), Payment.id.asc())
        )
        return await self.execute_query(query)

    async def search(self, status=None, method=None, skip: int = 0, limit: int = 10):
        query = select(Payment)
        if status:
            query = query.where(Payment.status == status)
        if method:
            query = query.where(Payment.method == method)
        query = query.order_by(Payment.created_date.desc(), Payment.id.desc())
        return await self.paginate(
            query,
            skip,
            limit,
            options=(
                selectinload(Payment.enrollment).selectinload(Enrollment.student),
                selectinload(Payment.enrollment).selectinload(Enrollment.course),
            ),
        )

    async def paid_total(self, enrollment_id: int) -> Decimal:
        query = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.enrollment_id == enrollment_id,
            Payment.status == PaymentStatus.PAID,
        )
        return Decimal(str((await self.session.execute(query)).scalar() or 0))

    async def count_paid(self, enrollment_id: int) -> int:
        return await self.count_by_filters(
            {"enrollment_id": enrollment_id, "status": PaymentStatus.PAID}
        )

    async def latest_paid(self, limit: int) -> Sequence[Payment]:
        query = (
            select(Payment)
            .options(selectinload(Payment.enrollment).selectinload(Enrollment.student))
            .where(Payment.status == PaymentStatus.PAID, Payment.paid_at.is_not(None))
            .order_by(Payment.paid_at.desc())
            .limit(limit)
        )
        return await self.execute_query(query)
