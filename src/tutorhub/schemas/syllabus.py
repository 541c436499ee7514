from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PhaseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    order: Optional[int] = Field(None, ge=0, description="Defaults to the next position")


class ItemCreate(BaseModel):
    phase_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(None, ge=0, description="Defaults to the next position in the phase")


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    phase_id: int
    title: str
    description: Optional[str] = None
    order: int


class PhaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    name: str
    order: int
    items: List[ItemResponse] = Field(default_factory=list)


class SyllabusResponse(BaseModel):
    phases: List[PhaseResponse]
    items: List[ItemResponse]


# =============================
#   Progress
# =============================
class ItemProgress(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    order: int
    completed_by_student: bool = False
    completed_by_tutor: bool = False
    completed_at: Optional[datetime] = None


class PhaseProgress(BaseModel):
    id: int
    name: str
    order: int
    completed_by_student: bool = False
    completed_by_tutor: bool = False
    completed_at: Optional[datetime] = None
    items: List[ItemProgress] = Field(default_factory=list)


class ConfirmRequest(BaseModel):
    completed_at: Optional[datetime] = Field(None, description="When the item was completed; defaults to now")


class ConfirmResponse(BaseModel):
    target: Literal["phase", "item"]
    phase_id: int
    item_id: Optional[int] = None
    completed_by_student: bool
    completed_by_tutor: bool
    completed_at: Optional[datetime] = None
