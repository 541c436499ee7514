from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from tutorhub.model.enums import AcademicYearStructure, GradingSystem
from tutorhub.schemas.catalog import HEX_COLOR


class SettingsUpdate(BaseModel):
    """Full institution settings document"""

    institution_name: str = Field(..., min_length=1, max_length=255)
    contact_email: Optional[EmailStr] = None
    primary_currency: str = Field(..., min_length=3, max_length=3)
    country: str = Field(..., min_length=1)
    default_timezone: str = Field(..., min_length=1)
    date_format: str = "DD/MM/YYYY"
    number_format: str = "1,234.56"
    language: str = "en"

    academic_year_structure: AcademicYearStructure = AcademicYearStructure.SEMESTER
    grading_system: GradingSystem = GradingSystem.PERCENTAGE
    age_groups: List[str] = Field(default_factory=list)
    qualification_levels: List[str] = Field(default_factory=list)
    payment_methods: List[str] = Field(default_factory=list)

    tax_rate: float = Field(..., ge=0, le=1)
    tax_inclusive: bool = False
    refund_policy_days: int = Field(default=14, ge=0)
    min_course_price: Optional[float] = Field(None, ge=0)
    max_course_price: Optional[float] = Field(None, ge=0)

    default_session_duration: int = Field(default=60, gt=0)
    max_group_size: int = Field(default=10, gt=0)
    min_group_size: int = Field(default=2, gt=0)
    booking_lead_time_hours: int = Field(default=24, ge=0)
    cancellation_notice_hours: int = Field(default=24, ge=0)

    email_from_name: Optional[str] = None
    email_from_address: Optional[EmailStr] = None
    brand_primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    brand_secondary_color: Optional[str] = Field(None, pattern=HEX_COLOR)

    @model_validator(mode="after")
    def check_ranges(self):
        if self.min_group_size > self.max_group_size:
            raise ValueError("min_group_size cannot exceed max_group_size")
        if (
            self.min_course_price is not None
            and self.max_course_price is not None
            and self.min_course_price > self.max_course_price
        ):
            raise ValueError("min_course_price cannot exceed max_course_price")
        return self


class SettingsResponse(SettingsUpdate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_email: Optional[str] = None
    email_from_address: Optional[str] = None
    is_active: bool
    updated_date: datetime
