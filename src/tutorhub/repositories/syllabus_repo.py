"""
Syllabus Repository - phases, items and per-student progress rows
"""
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorhub.model.course_models import (
    StudentSyllabusItemProgress,
    StudentSyllabusProgress,
    SyllabusItem,
    SyllabusPhase,
)
from tutorhub.repositories.base_repo import BaseRepository

UNCONFIRMED = {"completed_by_student": False, "completed_by_tutor": False}


class SyllabusPhaseRepository(BaseRepository[SyllabusPhase]):
    def __init__(self, session: AsyncSession):
        super().__init__(SyllabusPhase, session)

    async def list_with_items(self, course_id: int) -> Sequence[SyllabusPhase]:
        query = (
            select(SyllabusPhase)
            .options(selectinload(SyllabusPhase.items))
            .where(SyllabusPhase.course_id == course_id)
            .order_by(SyllabusPhase.order.asc(), SyllabusPhase.id.asc())
            .execution_options(populate_existing=True)
        )
        return await self.execute_query(query)

    async def get_in_course(self, phase_id: int, course_id: int) -> Optional[SyllabusPhase]:
        query = select(SyllabusPhase).where(
            SyllabusPhase.id == phase_id, SyllabusPhase.course_id == course_id
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def next_order(self, course_id: int) -> int:
        query = select(func.max(SyllabusPhase.order)).where(SyllabusPhase.course_id == course_id)
        current = (await self.session.execute(query)).scalar()
        return 0 if current is None else current + 1

    async def delete_with_items(self, phase: SyllabusPhase) -> None:
        await self.session.execute(delete(SyllabusItem).where(SyllabusItem.phase_id == phase.id))
        await self.session.execute(delete(SyllabusPhase).where(SyllabusPhase.id == phase.id))
        await self.session.commit()


class SyllabusItemRepository(BaseRepository[SyllabusItem]):
    def __init__(self, session: AsyncSession):
        super().__init__(SyllabusItem, session)

    async def get_in_course(self, item_id: int, course_id: int) -> Optional[SyllabusItem]:
        query = select(SyllabusItem).where(
            SyllabusItem.id == item_id, SyllabusItem.course_id == course_id
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def list_for_phase(self, phase_id: int) -> Sequence[SyllabusItem]:
        query = (
            select(SyllabusItem)
            .where(SyllabusItem.phase_id == phase_id)
            .order_by(SyllabusItem.order.asc(), SyllabusItem.id.asc())
        )
        return await self.execute_query(query)

    async def next_order(self, phase_id: int) -> int:
        query = select(func.max(SyllabusItem.order)).where(SyllabusItem.phase_id == phase_id)
        current = (await self.session.execute(query)).scalar()
        return 0 if current is None else current + 1


class PhaseProgressRepository(BaseRepository[StudentSyllabusProgress]):
    def __init__(self, session: AsyncSession):
        super().__init__(StudentSyllabusProgress, session)

    async def get_for(self, student_id: int, phase_id: int) -> Optional[StudentSyllabusProgress]:
        query = select(StudentSyllabusProgress).where(
            StudentSyllabusProgress.student_id == student_id,
            StudentSyllabusProgress.phase_id == phase_id,
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def get_or_add(self, student_id: int, phase_id: int) -> StudentSyllabusProgress:
        progress = await self.get_for(student_id, phase_id)
        if progress is None:
            progress = await self.add(
                {"student_id": student_id, "phase_id": phase_id, **UNCONFIRMED}
            )
        return progress

    async def map_for(self, student_id: int, phase_ids: Sequence[int]) -> dict[int, StudentSyllabusProgress]:
        if not phase_ids:
            return {}
        query = select(StudentSyllabusProgress).where(
            StudentSyllabusProgress.student_id == student_id,
            StudentSyllabusProgress.phase_id.in_(phase_ids),
        )
        return {row.phase_id: row for row in await self.execute_query(query)}


class ItemProgressRepository(BaseRepository[StudentSyllabusItemProgress]):
    def __init__(self, session: AsyncSession):
        super().__init__(StudentSyllabusItemProgress, session)

    async def get_or_add(self, student_id: int, item_id: int) -> StudentSyllabusItemProgress:
        query = select(StudentSyllabusItemProgress).where(
            StudentSyllabusItemProgress.student_id == student_id,
            StudentSyllabusItemProgress.item_id == item_id,
        )
        progress = (await self.session.execute(query)).scalar_one_or_none()
        if progress is None:
            progress = await self.add(
                {"student_id": student_id, "item_id": item_id, **UNCONFIRMED}
            )
        return progress

    async def map_for(self, student_id: int, item_ids: Sequence[int]) -> dict[int, StudentSyllabusItemProgress]:
        if not item_ids:
            return {}
        query = select(StudentSyllabusItemProgress).where(
            StudentSyllabusItemProgress.student_id == student_id,
            StudentSyllabusItemProgress.item_id.in_(item_ids),
        )
        return {row.item_id: row for row in await self.execute_query(query)}
