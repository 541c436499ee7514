"""
Enrollments with their pricing snapshot, and the payments that settle them
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
from tutorhub.model.enums import (
    DiscountType,
    EnrollmentFormat,
    EnrollmentStatus,
    PaymentMethod,
    PaymentStatus,
)
from tutorhub.utils.date_utils import utcnow

Money = Numeric(precision=10, scale=2)


class Enrollment(Base, BaseMixin):
    __tablename__ = "enrollments"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    format = Column(SQLEnum(EnrollmentFormat, name="enrollment_format"), nullable=False)
    session_count = Column(Integer, nullable=False)
    session_duration = Column(Integer, nullable=False)

    # Pricing snapshot taken at enrollment time
    base_price = Column(Money, nullable=False)
    discount_type = Column(SQLEnum(DiscountType, name="discount_type"), nullable=True)
    discount_value = Column(Money, nullable=True)
    discount_amount = Column(Money, nullable=False, default=0)
    subtotal = Column(Money, nullable=False)
    tax_rate = Column(Numeric(precision=5, scale=4), nullable=False)
    tax_amount = Column(Money, nullable=False)
    final_price = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    timezone = Column(String(64), nullable=False)

    preferred_days = Column(JSON, nullable=False, default=list)
    preferred_times = Column(JSON, nullable=False, default=list)
    status = Column(
        SQLEnum(EnrollmentStatus, name="enrollment_status"),
        default=EnrollmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_status = Column(
        SQLEnum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    payment_method = Column(SQLEnum(PaymentMethod, name="payment_method"), nullable=True)
    notes = Column(Text, nullable=True)
    enrolled_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    student = relationship("User")
    course = relationship("Course")
    payments = relationship(
        "Payment",
        back_populates="enrollment",
        cascade="all, delete-orphan",
        order_by="Payment.due_date",
    )

    def __repr__(self):
        return f"<Enrollment(id={self.id}, student_id={self.student_id}, course_id={self.course_id})>"


class Payment(Base, BaseMixin):
    __tablename__ = "payments"

    enrollment_id = Column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Money, nullable=False)
    currency = Column(String(3), nullable=False)
    method = Column(SQLEnum(PaymentMethod, name="payment_method"), nullable=False)
    status = Column(
        SQLEnum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    due_date = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    transaction_id = Column(String(255), nullable=True)
    description = Column(String(500), nullable=True)

    enrollment = relationship("Enrollment", back_populates="payments")
