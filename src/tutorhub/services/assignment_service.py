"""
Assignment Service - assignments, fan-out to students, submission and grading
"""
import logging
from typing import Optional

from tutorhub.model.assignment_models import Assignment
from tutorhub.model.enums import SubmissionStatus, TargetType, UserRole, UserStatus
from tutorhub.model.user_models import User
from tutorhub.repositories.assignment_repo import AssignmentRepository, SubmissionRepository
from tutorhub.repositories.course_repo import CourseRepository, CourseTutorRepository
from tutorhub.repositories.enrollment_repo import EnrollmentRepository
from tutorhub.repositories.user_repo import UserRepository
from tutorhub.schemas.assignment import (
    AssignmentCreate,
    AssignmentCreated,
    AssignmentListItem,
    AssignmentResponse,
    AssignmentUpdate,
    GradeRequest,
    StudentAssignmentItem,
    SubmissionCreate,
    SubmissionDetail,
    SubmissionResponse,
    SubmissionWithStudent,
)
from tutorhub.schemas.enrollment import CourseRef, EnrollmentRef
from tutorhub.schemas.generic import PaginatedData, Pagination
from tutorhub.utils.date_utils import to_naive_utc, utcnow
from tutorhub.utils.exceptions import (
    AccessDeniedException,
    BadRequestException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)

OPEN_FOR_SUBMISSION = (SubmissionStatus.PENDING, SubmissionStatus.DRAFT)


class AssignmentService:
    def __init__(
            self,
            assignment_repository: AssignmentRepository,
            submission_repository: SubmissionRepository,
            enrollment_repository: EnrollmentRepository,
            user_repository: UserRepository,
            course_repository: CourseRepository,
            course_tutor_repository: CourseTutorRepository,
    ):
        self._assignment_repository = assignment_repository
        self._submission_repository = submission_repository
        self._enrollment_repository = enrollment_repository
        self._user_repository = user_repository
        self._course_repository = course_repository
        self._course_tutor_repository = course_tutor_repository

    async def list_assignments(
            self,
            actor: User,
            is_active: Optional[bool],
            course_id: Optional[int],
            search: Optional[str],
            page: int,
            limit: int,
    ) -> PaginatedData[AssignmentListItem]:
        assignments, total = await self._assignment_repository.search(
            is_active=is_active,
            course_id=course_id,
            search=search,
            creator_id=actor.id if actor.role == UserRole.TUTOR else None,
            skip=(page - 1) * limit,
            limit=limit,
        )
        counts = await self._assignment_repository.submission_counts([a.id for a in assignments])

        items = []
        for assignment in assignments:
            item = AssignmentListItem.model_validate(assignment)
            item.submission_count, item.submitted_count = counts.get(assignment.id, (0, 0))
            items.append(item)
        return PaginatedData[AssignmentListItem](items=items, pagination=Pagination.build(page, limit, total))

    async def create_assignment(self, request: AssignmentCreate, creator: User) -> AssignmentCreated:
        """
        Create an assignment and a PENDING submission for every targeted student.

        Targets are resolved at creation time: every active student, the
        students with an ACTIVE enrollment in the target courses, or the
        selected individuals.
        """
        if request.course_id is not None and not await self._course_repository.get_by_id(request.course_id):
            raise BadRequestException(f"Course not found with ID: {request.course_id}")

        data = request.model_dump()
        if data["due_date"] is not None:
            data["due_date"] = to_naive_utc(data["due_date"])
        data["creator_id"] = creator.id
        data["is_active"] = True

        assignment = await self._assignment_repository.add(data)
        student_ids = await self._target_student_ids(request)
        await self._submission_repository.add_many(
            [
                {
                    "assignment_id": assignment.id,
                    "student_id": student_id,
                    "status": SubmissionStatus.PENDING,
                    "is_graded": False,
                }
                for student_id in student_ids
            ]
        )
        await self._assignment_repository.commit()
        logger.info(f"Assignment {assignment.id} created by {creator.id} for {len(student_ids)} student(s)")

        return AssignmentCreated(
            **AssignmentResponse.model_validate(assignment).model_dump(),
            assigned_count=len(student_ids),
        )

    async def get_assignment(self, assignment_id: int) -> Assignment:
        assignment = await self._assignment_repository.get_by_id(assignment_id)
        if not assignment:
            raise ResourceNotFoundException(f"Assignment not found with ID: {assignment_id}")
        return assignment

    async def update_assignment(self, assignment_id: int, request: AssignmentUpdate, actor: User) -> Assignment:
        assignment = await self._get_owned(assignment_id, actor)
        data = request.model_dump(exclude_unset=True)
        if data.get("due_date") is not None:
            data["due_date"] = to_naive_utc(data["due_date"])
        assignment = await self._assignment_repository.update(assignment, data)
        logger.info(f"Assignment {assignment_id} updated by {actor.id}")
        return assignment

    async def deactivate_assignment(self, assignment_id: int, actor: User) -> Assignment:
        assignment = await self._get_owned(assignment_id, actor)
        assignment = await self._assignment_repository.update(assignment, {"is_active": False})
        logger.info(f"Assignment {assignment_id} deactivated by {actor.id}")
        return assignment

    # =============================
    #   Submissions
    # =============================
    async def submit(self, assignment_id: int, request: SubmissionCreate, student: User) -> SubmissionResponse:
        """
        Turn in a student's work.

        Raises:
            AccessDeniedException: no ACTIVE enrollment in the assignment's course
            BadRequestException: already turned in, inactive, or late when late work is not allowed
        """
        assignment = await self.get_assignment(assignment_id)
        if not assignment.is_active:
            raise BadRequestException("Assignment is no longer active")

        enrollment = None
        if assignment.course_id is not None:
            enrollment = await self._enrollment_repository.get_active(student.id, assignment.course_id)
            if not enrollment:
                raise AccessDeniedException("You are not enrolled in this course")

        submission = await self._submission_repository.get_for(assignment.id, student.id)
        if submission and submission.status not in OPEN_FOR_SUBMISSION:
            raise BadRequestException("Assignment already submitted")

        now = utcnow()
        is_late = assignment.due_date is not None and now > assignment.due_date
        if is_late and not assignment.allow_late:
            raise BadRequestException("The due date has passed and late submissions are not allowed")

        values = {
            "enrollment_id": enrollment.id if enrollment else None,
            "content": request.content,
            "submission_type": request.submission_type,
            "attachments": request.attachments(),
            "status": SubmissionStatus.LATE if is_late else SubmissionStatus.SUBMITTED,
            "submitted_at": now,
        }
        if submission:
            submission = await self._submission_repository.update(submission, values)
        else:
            submission = await self._submission_repository.create(
                {"assignment_id": assignment.id, "student_id": student.id, "is_graded": False, **values}
            )
        logger.info(
            f"Student {student.id} submitted assignment {assignment.id}"
            f"{' (late)' if is_late else ''}"
        )
        return SubmissionResponse.model_validate(submission)

    async def list_submissions(self, assignment_id: int, actor: User) -> list[SubmissionWithStudent]:
        assignment = await self.get_assignment(assignment_id)
        if not await self._can_review(assignment, actor):
            raise AccessDeniedException("You cannot view submissions for this assignment")

        submissions = await self._submission_repository.list_for_assignment(assignment.id)
        return [SubmissionWithStudent.model_validate(s) for s in submissions]

    async def get_submission(self, submission_id: int, actor: User) -> SubmissionDetail:
        """
        One submission with its student, assignment, course and enrollment.

        Students only see their own; staff need review rights on the assignment.
        """
        submission = await self._submission_repository.get_details(submission_id)
        if not submission:
            raise ResourceNotFoundException(f"Submission not found with ID: {submission_id}")

        if actor.role == UserRole.STUDENT:
            allowed = submission.student_id == actor.id
        else:
            allowed = await self._can_review(submission.assignment, actor)
        if not allowed:
            raise AccessDeniedException("You cannot view this submission")

        course = submission.assignment.course
        return SubmissionDetail(
            **SubmissionWithStudent.model_validate(submission).model_dump(),
            assignment=AssignmentResponse.model_validate(submission.assignment),
            course=CourseRef.model_validate(course) if course else None,
            enrollment=EnrollmentRef.model_validate(submission.enrollment) if submission.enrollment else None,
        )

    async def grade(self, submission_id: int, request: GradeRequest, actor: User) -> SubmissionResponse:
        submission = await self._submission_repository.get_with_assignment(submission_id)
        if not submission:
            raise ResourceNotFoundException(f"Submission not found with ID: {submission_id}")
        if not await self._can_review(submission.assignment, actor):
            raise AccessDeniedException("You are not assigned to this course")

        submission = await self._submission_repository.update(
            submission,
            {
                "score": request.score,
                "feedback": request.feedback,
                "status": SubmissionStatus(request.status),
                "is_graded": True,
                "graded_at": utcnow(),
            },
        )
        logger.info(f"Submission {submission_id} graded {request.score} by {actor.id}")
        return SubmissionResponse.model_validate(submission)

    async def student_assignments(self, student: User, course_id: Optional[int] = None) -> list[StudentAssignmentItem]:
        submissions = await self._submission_repository.list_for_student(student.id, course_id)
        return [
            StudentAssignmentItem(
                submission=SubmissionResponse.model_validate(s),
                assignment=AssignmentResponse.model_validate(s.assignment),
            )
            for s in submissions
        ]

    async def _target_student_ids(self, request: AssignmentCreate) -> list[int]:
        if request.target_type == TargetType.COURSES:
            return await self._enrollment_repository.active_student_ids(request.target_course_ids)
        if request.target_type == TargetType.SELECTED_INDIVIDUALS:
            students = await self._user_repository.get_many(request.target_student_ids, role=UserRole.STUDENT)
            return [s.id for s in students]
        students = await self._user_repository.list_students()
        return [s.id for s in students if s.status == UserStatus.ACTIVE]

    async def _get_owned(self, assignment_id: int, actor: User) -> Assignment:
        assignment = await self.get_assignment(assignment_id)
        if not actor.role.is_admin and assignment.creator_id != actor.id:
            raise AccessDeniedException("Only the creator or an admin can change this assignment")
        return assignment

    async def _can_review(self, assignment: Assignment, actor: User) -> bool:
        """Admins, the creator, and tutors assigned to the assignment's course."""
        if actor.role.is_admin or assignment.creator_id == actor.id:
            return True
        if actor.role == UserRole.TUTOR and assignment.course_id is not None:
            return await self._course_tutor_repository.is_assigned(assignment.course_id, actor.id)
        return False
