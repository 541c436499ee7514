from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tutorhub.model.enums import UserRole, UserStatus
from tutorhub.schemas.generic import Pagination, PartialUpdate


# =============================
#   Response Schemas
# =============================
class UserSummary(BaseModel):
    """Compact user reference embedded in other resources"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    avatar: Optional[str] = None
    bio: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_date: datetime

    qualifications: Optional[List[str]] = None
    experience_years: Optional[int] = None
    specializations: Optional[List[str]] = None
    hourly_rate: Optional[float] = None

    age_group: Optional[str] = None
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    guardian_relation: Optional[str] = None


class UserListResponse(BaseModel):
    items: List[UserResponse]
    pagination: Pagination
    stats: Dict[str, int] = Field(..., description="Number of users per role")


class StudentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    age_group: Optional[str] = None
    status: UserStatus


class EmailExistsResponse(BaseModel):
    email: str
    exists: bool


# =============================
#   Request Schemas
# =============================
class UserProfileFields(BaseModel):
    """Optional tutor/student profile fields accepted on create and update"""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = None
    avatar: Optional[str] = None
    date_of_birth: Optional[datetime] = None

    qualifications: Optional[List[str]] = None
    experience_years: Optional[int] = Field(None, ge=0)
    specializations: Optional[List[str]] = None
    hourly_rate: Optional[float] = Field(None, ge=0)

    age_group: Optional[str] = None
    parent_name: Optional[str] = None
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    guardian_relation: Optional[str] = None


class UserCreateRequest(UserProfileFields):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.STUDENT
    status: UserStatus = UserStatus.ACTIVE


class UserUpdateRequest(UserProfileFields, PartialUpdate):
    non_nullable = ("email", "name", "role", "status")

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    password: Optional[str] = Field(None, min_length=8)


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = None
    avatar: Optional[str] = Field(None, description="Empty string removes the avatar")


class StudentUpdateRequest(PartialUpdate):
    """Fields an admin may change on a student record"""

    non_nullable = ("name", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=50)
    age_group: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    parent_name: Optional[str] = None
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    guardian_relation: Optional[str] = None
    status: Optional[UserStatus] = None
