"""
Assignments and the per-student submissions fanned out from them
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tutorhub.model.base import Base, BaseMixin
from tutorhub.model.enums import (
    AssignmentType,
    SubmissionStatus,
    SubmissionType,
    TargetType,
)


class Assignment(Base, BaseMixin):
    __tablename__ = "assignments"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    due_date = Column(DateTime, nullable=True)
    max_points = Column(Integer, default=100, nullable=False)
    assignment_type = Column(
        SQLEnum(AssignmentType, name="assignment_type"),
        default=AssignmentType.REGULAR,
        nullable=False,
    )
    target_type = Column(
        SQLEnum(TargetType, name="target_type"),
        default=TargetType.ALL_STUDENTS,
        nullable=False,
    )
    target_course_ids = Column(JSON, nullable=False, default=list)
    target_student_ids = Column(JSON, nullable=False, default=list)
    allow_late = Column(Boolean, default=False, nullable=False)
    late_penalty = Column(Float, nullable=True)
    expected_submission_types = Column(JSON, nullable=False, default=list)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=True, index=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    course = relationship("Course")
    creator = relationship("User")
    submissions = relationship(
        "AssignmentSubmission", back_populates="assignment", cascade="all, delete-orphan"
    )


class AssignmentSubmission(Base, BaseMixin):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment_id = Column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=True)
    content = Column(Text, nullable=True)
    submission_type = Column(SQLEnum(SubmissionType, name="submission_type"), nullable=True)
    attachments = Column(JSON, nullable=True)
    status = Column(
        SQLEnum(SubmissionStatus, name="submission_status"),
        default=SubmissionStatus.PENDING,
        nullable=False,
    )
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    is_graded = Column(Boolean, default=False, nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    graded_at = Column(DateTime, nullable=True)

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User")
    enrollment = relationship("Enrollment")
