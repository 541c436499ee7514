"""
Class Session Repository - sessions and their attendance, activity and absence rows
"""
from datetime import datetime
from typing import Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorhub.model.enums import AttendanceStatus, SessionStatus
from tutorhub.model.session_models import (
    AttendanceRecord,
    ClassSession,
    StudentAbsence,
    StudentActivity,
)
from tutorhub.repositories.base_repo import BaseRepository


class ClassSessionRepository(BaseRepository[ClassSession]):
    def __init__(self, session: AsyncSession):
        super().__init__(ClassSession, session)

    async def find_on_day(
        self, course_id: int, day_start: datetime, day_end: datetime
    ) -> Optional[ClassSession]:
        """First session of the course scheduled in [day_start, day_end)."""
        query = (
            select(ClassSession)
            .where(
                ClassSession.course_id == course_id,
                ClassSession.scheduled_at >= day_start,
                ClassSession.scheduled_at < day_end,
            )
            .order_by(ClassSession.scheduled_at.asc(), ClassSession.id.asc())
            .limit(1)
        )
        return (await self.session.execute(query)).scalars().first()

    async def list_for_course(self, course_id: int) -> Sequence[ClassSession]:
        query = (
            select(ClassSession)
            .where(ClassSession.course_id == course_id)
            .order_by(ClassSession.scheduled_at.desc())
        )
        return await self.execute_query(query)

    async def in_range(
        self,
        course_ids: Sequence[int],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[ClassSession]:
        if not course_ids:
            return []
        query = (
            select(ClassSession)
            .options(selectinload(ClassSession.course), selectinload(ClassSession.attendance))
            .where(ClassSession.course_id.in_(course_ids))
        )
        if start is not None:
            query = query.where(ClassSession.scheduled_at >= start)
        if end is not None:
            query = query.where(ClassSession.scheduled_at <= end)
        return await self.execute_query(query.order_by(ClassSession.scheduled_at.asc()))

    async def count_scheduled_between(
        self, course_ids: Sequence[int], start: datetime, end: datetime
    ) -> int:
        if not course_ids:
            return 0
        query = select(func.count(ClassSession.id)).where(
            ClassSession.course_id.in_(course_ids),
            ClassSession.status == SessionStatus.SCHEDULED,
            ClassSession.scheduled_at >= start,
            ClassSession.scheduled_at < end,
        )
        return (await self.session.execute(query)).scalar() or 0

    async def count_completed_between(
        self, course_ids: Sequence[int], start: datetime, end: datetime
    ) -> int:
        if not course_ids:
            return 0
        query = select(func.count(ClassSession.id)).where(
            ClassSession.course_id.in_(course_ids),
            ClassSession.status == SessionStatus.COMPLETED,
            ClassSession.ended_at >= start,
            ClassSession.ended_at < end,
        )
        return (await self.session.execute(query)).scalar() or 0

    async def completed_between(
        self, course_ids: Sequence[int], start: datetime, end: datetime
    ) -> list[Tuple[int, int]]:
        """(session id, course id) of COMPLETED sessions that ended in [start, end]."""
        if not course_ids:
            return []
        query = select(ClassSession.id, ClassSession.course_id).where(
            ClassSession.course_id.in_(course_ids),
            ClassSession.status == SessionStatus.COMPLETED,
            ClassSession.ended_at >= start,
            ClassSession.ended_at <= end,
        )
        return [(row[0], row[1]) for row in (await self.session.execute(query)).all()]

    async def count_completed(self, course_ids: Sequence[int]) -> int:
        if not course_ids:
            return 0
        query = select(func.count(ClassSession.id)).where(
            ClassSession.course_id.in_(course_ids),
            ClassSession.status == SessionStatus.COMPLETED,
        )
        return (await self.session.execute(query)).scalar() or 0

    async def get_in_course(self, session_id: int, course_id: int) -> Optional[ClassSession]:
        query = select(ClassSession).where(
            ClassSession.id == session_id, ClassSession.course_id == course_id
        )
        return (await self.session.execute(query)).scalar_one_or_none()


class AttendanceRecordRepository(BaseRepository[AttendanceRecord]):
    def __init__(self, session: AsyncSession):
        super().__init__(AttendanceRecord, session)

    async def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        query = (
            select(AttendanceRecord)
            .options(selectinload(AttendanceRecord.student))
            .where(AttendanceRecord.session_id == session_id)
            .order_by(AttendanceRecord.id.asc())
        )
        return await self.execute_query(query)

    async def counts_by_session(self, session_ids: Sequence[int]) -> dict[int, int]:
        if not session_ids:
            return {}
        query = (
            select(AttendanceRecord.session_id, func.count(AttendanceRecord.id))
            .where(AttendanceRecord.session_id.in_(session_ids))
            .group_by(AttendanceRecord.session_id)
        )
        return {sid: count for sid, count in (await self.session.execute(query)).all()}

    async def statuses_for_student(self, student_id: int, course_id: int) -> list:
        query = (
            select(AttendanceRecord.status)
            .join(ClassSession, AttendanceRecord.session_id == ClassSession.id)
            .where(AttendanceRecord.student_id == student_id, ClassSession.course_id == course_id)
        )
        return list((await self.session.execute(query)).scalars().all())

    async def present_counts(self, session_ids: Sequence[int]) -> dict[int, int]:
        if not session_ids:
            return {}
        query = (
            select(AttendanceRecord.session_id, func.count(AttendanceRecord.id))
            .where(
                AttendanceRecord.session_id.in_(session_ids),
                AttendanceRecord.status == AttendanceStatus.PRESENT,
            )
            .group_by(AttendanceRecord.session_id)
        )
        return {sid: count for sid, count in (await self.session.execute(query)).all()}

    async def count_present(self, student_id: int, course_ids: Sequence[int]) -> int:
        """PRESENT records of the student in COMPLETED sessions of the courses."""
        if not course_ids:
            return 0
        query = (
            select(func.count(AttendanceRecord.id))
            .join(ClassSession, AttendanceRecord.session_id == ClassSession.id)
            .where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.status == AttendanceStatus.PRESENT,
                ClassSession.course_id.in_(course_ids),
                ClassSession.status == SessionStatus.COMPLETED,
            )
        )
        return (await self.session.execute(query)).scalar() or 0

    async def last_attended(self, student_id: int, course_ids: Sequence[int]) -> Optional[datetime]:
        """Scheduled time of the latest session the student has a record for."""
        if not course_ids:
            return None
        query = (
            select(func.max(ClassSession.scheduled_at))
            .join(AttendanceRecord, AttendanceRecord.session_id == ClassSession.id)
            .where(AttendanceRecord.student_id == student_id, ClassSession.course_id.in_(course_ids))
        )
        return (await self.session.execute(query)).scalar()

    async def get_for(self, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        query = select(AttendanceRecord).where(
            AttendanceRecord.session_id == session_id, AttendanceRecord.student_id == student_id
        )
        return (await self.session.execute(query.limit(1))).scalars().first()


class StudentActivityRepository(BaseRepository[StudentActivity]):
    def __init__(self, session: AsyncSession):
        super().__init__(StudentActivity, session)

    async def by_student(self, session_id: int) -> dict[int, StudentActivity]:
        rows = await self.get_by_filters({"session_id": session_id}, order_by="id")
        return {row.student_id: row for row in rows}


class StudentAbsenceRepository(BaseRepository[StudentAbsence]):
    def __init__(self, session: AsyncSession):
        super().__init__(StudentAbsence, session)

    async def by_student(self, session_id: int) -> dict[int, StudentAbsence]:
        rows = await self.get_by_filters({"session_id": session_id}, order_by="id")
        return {row.student_id: row for row in rows}
