"""User schemas"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserBase(BaseModel):
    """Base user schema"""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)


class UserCreate(UserBase):
    """Schema for creating a new user"""

    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    """Schema for user response (no password)"""

    id: UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Short user reference embedded in groups and expenses"""

    id: UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
