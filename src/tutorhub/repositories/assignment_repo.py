"""
Assignment Repository - assignments and submissions
"""
from datetime import datetime
from typing import Optional, Sequence, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorhub.model.assignment_models import Assignment, AssignmentSubmission
from tutorhub.model.enums import SubmissionStatus
from tutorhub.repositories.base_repo import BaseRepository

TURNED_IN = (
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.LATE,
    SubmissionStatus.GRADED,
    SubmissionStatus.RETURNED,
    SubmissionStatus.RESUBMITTED,
)


class AssignmentRepository(BaseRepository[Assignment]):
    def __init__(self, session: AsyncSession):
        super().__init__(Assignment, session)

    async def search(
        self,
        is_active: Optional[bool] = True,
        course_id: Optional[int] = None,
        search: Optional[str] = None,
        creator_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[Sequence[Assignment], int]:
        query = select(Assignment)
        if is_active is not None:
            query = query.where(Assignment.is_active.is_(is_active))
        if course_id is not None:
            query = query.where(Assignment.course_id == course_id)
        if search:
            query = query.where(func.lower(Assignment.title).like(f"%{search.lower()}%"))
        if creator_id is not None:
            query = query.where(Assignment.creator_id == creator_id)
        query = query.order_by(Assignment.created_date.desc(), Assignment.id.desc())
        return await self.paginate(query, skip, limit)

    async def submission_counts(self, assignment_ids: Sequence[int]) -> dict[int, Tuple[int, int]]:
        """assignment id -> (fanned-out submissions, turned-in submissions)"""
        if not assignment_ids:
            return {}
        turned_in = func.sum(case((AssignmentSubmission.status.in_(TURNED_IN), 1), else_=0))
        query = (
            select(AssignmentSubmission.assignment_id, func.count(AssignmentSubmission.id), turned_in)
            .where(AssignmentSubmission.assignment_id.in_(assignment_ids))
            .group_by(AssignmentSubmission.assignment_id)
        )
        rows = (await self.session.execute(query)).all()
        return {assignment_id: (total, int(done or 0)) for assignment_id, total, done in rows}


class SubmissionRepository(BaseRepository[AssignmentSubmission]):
    def __init__(self, session: AsyncSession):
        super().__init__(AssignmentSubmission, session)

    async def get_for(self, assignment_id: int, student_id: int) -> Optional[AssignmentSubmission]:
        query = select(AssignmentSubmission).where(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.student_id == student_id,
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def get_with_assignment(self, submission_id: int) -> Optional[AssignmentSubmission]:
        query = (
            select(AssignmentSubmission)
            .options(selectinload(AssignmentSubmission.assignment))
            .where(AssignmentSubmission.id == submission_id)
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def list_for_assignment(self, assignment_id: int) -> Sequence[AssignmentSubmission]:
        query = (
            select(AssignmentSubmission)
            .options(selectinload(AssignmentSubmission.student))
            .where(AssignmentSubmission.assignment_id == assignment_id)
            .order_by(AssignmentSubmission.id.asc())
        )
        return await self.execute_query(query)

    async def list_for_student(
        self, student_id: int, course_id: Optional[int] = None
    ) -> Sequence[AssignmentSubmission]:
        query = (
            select(AssignmentSubmission)
            .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
            .options(selectinload(AssignmentSubmission.assignment))
            .where(AssignmentSubmission.student_id == student_id, Assignment.is_active.is_(True))
        )
        if course_id is not None:
            query = query.where(Assignment.course_id == course_id)
        query = query.order_by(Assignment.due_date.asc(), AssignmentSubmission.id.asc())
        return await self.execute_query(query)

    async def get_details(self, submission_id: int) -> Optional[AssignmentSubmission]:
        query = (
            select(AssignmentSubmission)
            .options(
                selectinload(AssignmentSubmission.student),
                selectinload(AssignmentSubmission.assignment).selectinload(Assignment.course),
                selectinload(AssignmentSubmission.enrollment),
            )
            .where(AssignmentSubmission.id == submission_id)
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def graded_averages(
        self, course_ids: Sequence[int], start: datetime, end: datetime
    ) -> list[Tuple[int, float]]:
        """(course id, average score) per assignment, over submissions graded in [start, end]."""
        if not course_ids:
            return []
        query = (
            select(Assignment.course_id, func.avg(AssignmentSubmission.score))
            .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
            .where(
                Assignment.course_id.in_(course_ids),
                AssignmentSubmission.is_graded.is_(True),
                AssignmentSubmission.graded_at >= start,
                AssignmentSubmission.graded_at <= end,
            )
            .group_by(Assignment.id, Assignment.course_id)
        )
        return [(course_id, float(avg or 0)) for course_id, avg in (await self.session.execute(query)).all()]

    async def totals_for_student(
        self, student_id: int, course_ids: Sequence[int]
    ) -> Tuple[int, int, Optional[datetime]]:
        """(handed out, turned in, latest submission time) across the courses."""
        if not course_ids:
            return 0, 0, None
        turned_in = func.sum(case((AssignmentSubmission.status.in_(TURNED_IN), 1), else_=0))
        query = (
            select(
                func.count(AssignmentSubmission.id),
                turned_in,
                func.max(AssignmentSubmission.submitted_at),
            )
            .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
            .where(AssignmentSubmission.student_id == student_id, Assignment.course_id.in_(course_ids))
        )
        total, done, last_submitted = (await self.session.execute(query)).one()
        return total or 0, int(done or 0), last_submitted
