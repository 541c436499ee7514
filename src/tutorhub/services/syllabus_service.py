"""
Syllabus Service - course phases/items and two-sided completion tracking
"""
import logging
from datetime import datetime
from typing import Mapping, Optional, Sequence

from tutorhub.model.course_models import SyllabusPhase
from tutorhub.model.user_models import User
from tutorhub.repositories.enrollment_repo import EnrollmentRepository
from tutorhub.repositories.syllabus_repo import (
    ItemProgressRepository,
    PhaseProgressRepository,
    SyllabusItemRepository,
    SyllabusPhaseRepository,
)
from tutorhub.schemas.syllabus import (
    ConfirmResponse,
    ItemCreate,
    ItemProgress,
    ItemResponse,
    PhaseCreate,
    PhaseProgress,
    PhaseResponse,
    SyllabusResponse,
)
from tutorhub.utils.date_utils import to_naive_utc, utcnow
from tutorhub.utils.exceptions import (
    AccessDeniedException,
    BadRequestException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)

STUDENT_SIDE = "student"
TUTOR_SIDE = "tutor"


def rollup(item_ids: Sequence[int], progress: Mapping[int, object]) -> tuple[bool, bool]:
    """
    Phase completion derived from its items.

    A side counts as complete only when the phase has items and every one
    of them carries that side's flag.

    Returns:
        (all_student, all_tutor)
    """
    if not item_ids:
        return False, False
    rows = [progress.get(item_id) for item_id in item_ids]
    all_student = all(row is not None and row.completed_by_student for row in rows)
    all_tutor = all(row is not None and row.completed_by_tutor for row in rows)
    return all_student, all_tutor


class SyllabusService:
    def __init__(
            self,
            phase_repository: SyllabusPhaseRepository,
            item_repository: SyllabusItemRepository,
            phase_progress_repository: PhaseProgressRepository,
            item_progress_repository: ItemProgressRepository,
            enrollment_repository: EnrollmentRepository,
    ):
        self._phase_repository = phase_repository
        self._item_repository = item_repository
        self._phase_progress_repository = phase_progress_repository
        self._item_progress_repository = item_progress_repository
        self._enrollment_repository = enrollment_repository

    # =============================
    #   Structure
    # =============================
    async def get_syllabus(self, course_id: int) -> SyllabusResponse:
        phases = await self._phase_repository.list_with_items(course_id)
        phase_responses = [PhaseResponse.model_validate(p) for p in phases]
        return SyllabusResponse(
            phases=phase_responses,
            items=[item for phase in phase_responses for item in phase.items],
        )

    async def create_phase(self, course_id: int, request: PhaseCreate) -> PhaseResponse:
        order = request.order
        if order is None:
            order = await self._phase_repository.next_order(course_id)

        phase = await self._phase_repository.create(
            {"course_id": course_id, "name": request.name, "order": order}
        )
        logger.info(f"Phase {phase.id} added to course {course_id} at position {order}")
        return PhaseResponse(id=phase.id, course_id=course_id, name=phase.name, order=phase.order)

    async def delete_phase(self, course_id: int, phase_id: int) -> None:
        phase = await self._phase_repository.get_in_course(phase_id, course_id)
        if not phase:
            raise ResourceNotFoundException(f"Phase not found with ID: {phase_id}")
        await self._phase_repository.delete_with_items(phase)
        logger.info(f"Phase {phase_id} removed from course {course_id}")

    async def create_item(self, course_id: int, request: ItemCreate) -> ItemResponse:
        phase = await self._phase_repository.get_in_course(request.phase_id, course_id)
        if not phase:
            raise BadRequestException("Phase does not belong to this course")

        order = request.order
        if order is None:
            order = await self._item_repository.next_order(phase.id)

        item = await self._item_repository.create(
            {
                "course_id": course_id,
                "phase_id": phase.id,
                "title": request.title,
                "description": request.description,
                "order": order,
            }
        )
        return ItemResponse.model_validate(item)

    # =============================
    #   Confirmation
    # =============================
    async def confirm_as_student(
            self, course_id: int, target_id: int, student: User, completed_at: Optional[datetime] = None
    ) -> ConfirmResponse:
        if not await self._enrollment_repository.has_any(student.id, course_id):
            raise AccessDeniedException("You are not enrolled in this course")
        return await self._confirm(course_id, target_id, student.id, STUDENT_SIDE, completed_at)

    async def confirm_as_tutor(
            self, course_id: int, student_id: int, target_id: int, completed_at: Optional[datetime] = None
    ) -> ConfirmResponse:
        """Course assignment of the tutor is checked by the caller."""
        if not await self._enrollment_repository.has_any(student_id, course_id):
            raise AccessDeniedException("Student is not enrolled in this course")
        return await self._confirm(course_id, target_id, student_id, TUTOR_SIDE, completed_at)

    async def _confirm(
            self,
            course_id: int,
            target_id: int,
            student_id: int,
            side: str,
            completed_at: Optional[datetime] = None,
    ) -> ConfirmResponse:
        """Items take the client-supplied completion time when given; phases are stamped now."""
        phase, item_id = await self._resolve_target(course_id, target_id)
        flag = f"completed_by_{side}"
        now = utcnow()

        phase_progress = await self._phase_progress_repository.get_or_add(student_id, phase.id)

        if item_id is None:
            if not (phase_progress.completed_by_student and phase_progress.completed_by_tutor):
                setattr(phase_progress, flag, True)
        else:
            item_progress = await self._item_progress_repository.get_or_add(student_id, item_id)
            setattr(item_progress, flag, True)
            item_progress.completed_at = to_naive_utc(completed_at) if completed_at else now
            await self._item_progress_repository.flush()

            item_ids = [i.id for i in await self._item_repository.list_for_phase(phase.id)]
            progress = await self._item_progress_repository.map_for(student_id, item_ids)
            all_student, all_tutor = rollup(item_ids, progress)

            kept_tutor = side == TUTOR_SIDE and phase_progress.completed_by_tutor
            phase_progress.completed_by_student = all_student
            phase_progress.completed_by_tutor = all_tutor or kept_tutor
            if all_student and all_tutor:
                phase_progress.completed_at = now
            elif not kept_tutor:
                phase_progress.completed_at = None

        await self._phase_progress_repository.commit()
        logger.info(
            f"Syllabus {'item ' + str(item_id) if item_id else 'phase ' + str(phase.id)} "
            f"confirmed by {side} for student {student_id}"
        )
        return ConfirmResponse(
            target="phase" if item_id is None else "item",
            phase_id=phase.id,
            item_id=item_id,
            completed_by_student=phase_progress.completed_by_student,
            completed_by_tutor=phase_progress.completed_by_tutor,
            completed_at=phase_progress.completed_at,
        )

    async def _resolve_target(self, course_id: int, target_id: int) -> tuple[SyllabusPhase, Optional[int]]:
        """A target id names a phase of the course, or failing that one of its items."""
        phase = await self._phase_repository.get_in_course(target_id, course_id)
        if phase:
            return phase, None

        item = await self._item_repository.get_in_course(target_id, course_id)
        if item:
            phase = await self._phase_repository.get_in_course(item.phase_id, course_id)
            if phase:
                return phase, item.id
        raise ResourceNotFoundException("Phase not found")

    # =============================
    #   Progress
    # =============================
    async def get_progress(self, course_id: int, student_id: int) -> list[PhaseProgress]:
        """
        Per-phase progress of one student.

        Phase flags are derived from the items when the phase has any,
        otherwise they come from the stored phase-level confirmation.
        """
        phases = await self._phase_repository.list_with_items(course_id)
        phase_rows = await self._phase_progress_repository.map_for(student_id, [p.id for p in phases])
        item_rows = await self._item_progress_repository.map_for(
            student_id, [item.id for p in phases for item in p.items]
        )

        result = []
        for phase in phases:
            items = []
            for item in phase.items:
                row = item_rows.get(item.id)
                items.append(
                    ItemProgress(
                        id=item.id,
                        title=item.title,
                        description=item.description,
                        order=item.order,
                        completed_by_student=bool(row and row.completed_by_student),
                        completed_by_tutor=bool(row and row.completed_by_tutor),
                        completed_at=row.completed_at if row else None,
                    )
                )

            stored = phase_rows.get(phase.id)
            if phase.items:
                by_student, by_tutor = rollup([i.id for i in phase.items], item_rows)
            else:
                by_student = bool(stored and stored.completed_by_student)
                by_tutor = bool(stored and stored.completed_by_tutor)

            result.append(
                PhaseProgress(
                    id=phase.id,
                    name=phase.name,
                    order=phase.order,
                    completed_by_student=by_student,
                    completed_by_tutor=by_tutor,
                    completed_at=stored.completed_at if stored else None,
                    items=items,
                )
            )
        return result
