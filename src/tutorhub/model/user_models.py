"""
User accounts and password reset tokens
"""
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from tutorhub.model.base import Base, BaseMixin
from tutorhub.model.enums import UserRole, UserStatus


class User(Base, BaseMixin):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    name = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(
        SQLEnum(UserRole, name="user_role"),
        default=UserRole.STUDENT,
        nullable=False,
        index=True,
    )
    status = Column(
        SQLEnum(UserStatus, name="user_status"),
        default=UserStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    avatar = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    date_of_birth = Column(DateTime, nullable=True)
    last_login = Column(DateTime, nullable=True)

    # Tutor profile
    qualifications = Column(JSON, nullable=True)
    experience_years = Column(Integer, nullable=True)
    specializations = Column(JSON, nullable=True)
    hourly_rate = Column(Numeric(precision=10, scale=2), nullable=True)

    # Student profile
    age_group = Column(String(50), nullable=True)
    parent_name = Column(String(255), nullable=True)
    parent_email = Column(String(255), nullable=True)
    parent_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    guardian_relation = Column(String(100), nullable=True)

    reset_tokens = relationship(
        "PasswordResetToken", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class PasswordResetToken(Base, BaseMixin):
    __tablename__ = "password_reset_tokens"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(128), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="reset_tokens")
