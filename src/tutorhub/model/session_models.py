"""
Class sessions and the attendance, activity and absence rows anchored on them
"""
from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from tutorhub.model.base import Base, BaseMixin
from tutorhub.model.enums import (
    AbsenceStatus,
    ActivityStatus,
    AttendanceStatus,
    SessionStatus,
    SessionType,
)


class ClassSession(Base, BaseMixin):
    __tablename__ = "class_sessions"

    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    tutor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_at = Column(DateTime, nullable=False, index=True)
    duration = Column(Integer, default=60, nullable=False)
    ended_at = Column(DateTime, nullable=True)
    type = Column(
        SQLEnum(SessionType, name="session_type"),
        default=SessionType.GROUP,
        nullable=False,
    )
    status = Column(
        SQLEnum(SessionStatus, name="session_status"),
        default=SessionStatus.SCHEDULED,
        nullable=False,
    )
    notes = Column(Text, nullable=True)

    course = relationship("Course")
    attendance = relationship(
        "AttendanceRecord", back_populates="session", cascade="all, delete-orphan"
    )


class AttendanceRecord(Base, BaseMixin):
    __tablename__ = "attendance_records"

    session_id = Column(
        Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(SQLEnum(AttendanceStatus, name="attendance_status"), nullable=False)
    notes = Column(Text, nullable=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    marked_at = Column(DateTime, nullable=True)
    marked_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    session = relationship("ClassSession", back_populates="attendance")
    student = relationship("User", foreign_keys=[student_id])


class StudentActivity(Base, BaseMixin):
    __tablename__ = "student_activities"

    session_id = Column(
        Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity = Column(Text, nullable=False)
    status = Column(
        SQLEnum(ActivityStatus, name="activity_status"),
        default=ActivityStatus.COMPLETED,
        nullable=False,
    )
    remarks = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)


class StudentAbsence(Base, BaseMixin):
    __tablename__ = "student_absences"

    session_id = Column(
        Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    status = Column(
        SQLEnum(AbsenceStatus, name="absence_status"),
        default=AbsenceStatus.APPROVED,
        nullable=False,
    )
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
