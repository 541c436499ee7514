import math
from datetime import datetime, timezone
from typing import ClassVar, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field, ValidationInfo, field_validator

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope: { success, data | error }"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[int] = None
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None):
        return cls(
            success=True,
            message=message,
            data=data,
            timestamp=datetime.now(timezone.utc)
        )

    @classmethod
    def fail(cls, code: int, message: str, data: Optional[T] = None):
        return cls(
            success=False,
            message=message,
            error=message,
            code=code,
            data=data,
            timestamp=datetime.now(timezone.utc)
        )


class Pagination(BaseModel):
    """Page metadata returned alongside list results"""
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
        )


class PaginatedData(BaseModel, Generic[T]):
    items: List[T]
    pagination: Pagination


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    version: str
    environment: str
    database: str
    redis: str


class PartialUpdate(BaseModel):
    """
    Base for partial update payloads. Omitted fields are left untouched;
    fields listed in ``non_nullable`` map to NOT NULL columns and reject an explicit null.
    """
    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        if value is None and info.field_name in cls.non_nullable:
            raise ValueError("cannot be null")
        return value
