"""
Courses, their tutors and syllabus structure with per-student progress
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tutorhub.model.base import Base, BaseMixin
from tutorhub.model.enums import CourseStatus


class Course(Base, BaseMixin):
    __tablename__ = "courses"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    short_description = Column(Text, nullable=False)
    long_description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(CourseStatus, name="course_status"),
        default=CourseStatus.DRAFT,
        nullable=False,
        index=True,
    )
    one_to_one_price = Column(Numeric(precision=10, scale=2), nullable=True)
    group_price = Column(Numeric(precision=10, scale=2), nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    course_type_id = Column(Integer, ForeignKey("course_types.id"), nullable=True)
    course_format_id = Column(Integer, ForeignKey("course_formats.id"), nullable=True)
    curriculum_id = Column(Integer, ForeignKey("curricula.id"), nullable=True)

    # Relationships
    category = relationship("Category")
    course_type = relationship("CourseType")
    course_format = relationship("CourseFormat")
    curriculum = relationship("Curriculum")
    course_tutors = relationship(
        "CourseTutor", back_populates="course", cascade="all, delete-orphan"
    )
    phases = relationship(
        "SyllabusPhase",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="SyllabusPhase.order",
    )

    def __repr__(self):
        return f"<Course(id={self.id}, title={self.title})>"


class CourseTutor(Base, BaseMixin):
    __tablename__ = "course_tutors"
    __table_args__ = (UniqueConstraint("course_id", "tutor_id", name="uq_course_tutor"),)

    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tutor_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_primary = Column(Boolean, default=False, nullable=False)
    specialization = Column(String(255), nullable=True)
    can_teach_one_to_one = Column(Boolean, default=True, nullable=False)
    can_teach_group = Column(Boolean, default=True, nullable=False)

    course = relationship("Course", back_populates="course_tutors")
    tutor = relationship("User")


class SyllabusPhase(Base, BaseMixin):
    __tablename__ = "syllabus_phases"

    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    order = Column(Integer, default=0, nullable=False)

    course = relationship("Course", back_populates="phases")
    items = relationship(
        "SyllabusItem",
        back_populates="phase",
        cascade="all, delete-orphan",
        order_by="SyllabusItem.order",
    )


class SyllabusItem(Base, BaseMixin):
    __tablename__ = "syllabus_items"

    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    phase_id = Column(
        Integer, ForeignKey("syllabus_phases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, default=0, nullable=False)

    phase = relationship("SyllabusPhase", back_populates="items")


class StudentSyllabusProgress(Base, BaseMixin):
    """Phase-level completion for one student."""

    __tablename__ = "student_syllabus_progress"
    __table_args__ = (
        UniqueConstraint("student_id", "phase_id", name="uq_student_phase_progress"),
    )

    student_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    phase_id = Column(
        Integer, ForeignKey("syllabus_phases.id", ondelete="CASCADE"), nullable=False
    )
    completed_by_student = Column(Boolean, default=False, nullable=False)
    completed_by_tutor = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)


class StudentSyllabusItemProgress(Base, BaseMixin):
    """Item-level completion for one student."""

    __tablename__ = "student_syllabus_item_progress"
    __table_args__ = (
        UniqueConstraint("student_id", "item_id", name="uq_student_item_progress"),
    )

    student_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(
        Integer, ForeignKey("syllabus_items.id", ondelete="CASCADE"), nullable=False
    )
    completed_by_student = Column(Boolean, default=False, nullable=False)
    completed_by_tutor = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)


