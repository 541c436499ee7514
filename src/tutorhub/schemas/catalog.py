from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tutorhub.schemas.generic import PartialUpdate

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


# =============================
#   Categories / Types / Formats
# =============================
class CatalogEntryCreate(BaseModel):
    """Payload for course types and course formats"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class CatalogEntryUpdate(PartialUpdate):
    non_nullable = ("name", "sort_order", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CategoryCreate(CatalogEntryCreate):
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class CategoryUpdate(CatalogEntryUpdate):
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class CatalogEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    created_date: datetime
    course_count: int = 0


class CategoryResponse(CatalogEntryResponse):
    icon: Optional[str] = None
    color: Optional[str] = None


# =============================
#   Curriculum
# =============================
class CurriculumCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)
    level: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class CurriculumUpdate(PartialUpdate):
    non_nullable = ("name", "type", "level", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CurriculumResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    level: str
    description: Optional[str] = None
    is_active: bool
    created_date: datetime
