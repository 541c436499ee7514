"""
Institution-wide settings (one active row)
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Enum as SQLEnum,
    Integer,
    Numeric,
    String,
)

from tutorhub.model.base import Base, BaseMixin
from tutorhub.model.enums import AcademicYearStructure, GradingSystem


class InstitutionSettings(Base, BaseMixin):
    __tablename__ = "institution_settings"

    institution_name = Column(String(255), nullable=False, default="TutorHub")
    contact_email = Column(String(255), nullable=True)
    primary_currency = Column(String(3), nullable=False, default="GBP")
    country = Column(String(100), nullable=False, default="United Kingdom")
    default_timezone = Column(String(64), nullable=False, default="Europe/London")
    date_format = Column(String(32), nullable=False, default="DD/MM/YYYY")
    number_format = Column(String(32), nullable=False, default="1,234.56")
    language = Column(String(16), nullable=False, default="en")

    academic_year_structure = Column(
        SQLEnum(AcademicYearStructure, name="academic_year_structure"),
        default=AcademicYearStructure.SEMESTER,
        nullable=False,
    )
    grading_system = Column(
        SQLEnum(GradingSystem, name="grading_system"),
        default=GradingSystem.PERCENTAGE,
        nullable=False,
    )
    age_groups = Column(JSON, nullable=False, default=list)
    qualification_levels = Column(JSON, nullable=False, default=list)
    payment_methods = Column(JSON, nullable=False, default=list)

    tax_rate = Column(Numeric(precision=5, scale=4), nullable=False, default=0.18)
    tax_inclusive = Column(Boolean, nullable=False, default=False)
    refund_policy_days = Column(Integer, nullable=False, default=14)
    min_course_price = Column(Numeric(precision=10, scale=2), nullable=True)
    max_course_price = Column(Numeric(precision=10, scale=2), nullable=True)

    default_session_duration = Column(Integer, nullable=False, default=60)
    max_group_size = Column(Integer, nullable=False, default=10)
    min_group_size = Column(Integer, nullable=False, default=2)
    booking_lead_time_hours = Column(Integer, nullable=False, default=24)
    cancellation_notice_hours = Column(Integer, nullable=False, default=24)

    email_from_name = Column(String(255), nullable=True)
    email_from_address = Column(String(255), nullable=True)
    brand_primary_color = Column(String(7), nullable=True)
    brand_secondary_color = Column(String(7), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
