"""Group schemas"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary


class GroupCreate(BaseModel):
    """Schema for creating a group"""

    name: str = Field(..., min_length=1, max_length=255)
    member_ids: List[UUID] = Field(default_factory=list)


class MemberAdd(BaseModel):
    """Schema for adding a member to a group"""

    user_id: UUID


class MemberPermissions(BaseModel):
    """Per-member permissions inside a group"""

    can_create_expenses: bool = True
    can_invite: bool = False
    can_kick: bool = False


class MemberPermissionsUpdate(BaseModel):
    """Partial permission update; omitted fields keep their value"""

    can_create_expenses: Optional[bool] = None
    can_invite: Optional[bool] = None
    can_kick: Optional[bool] = None


class GroupMemberResponse(MemberPermissions):
    """Member of a group with their permissions"""

    user: UserSummary
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupResponse(BaseModel):
    """Group with its roster"""

    id: UUID
    name: str
    created_by_user_id: UUID
    created_at: datetime
    members: List[GroupMemberResponse]

    model_config = ConfigDict(from_attributes=True)


class GroupListResponse(BaseModel):
    """Response schema for list of groups"""

    items: List[GroupResponse]


class MemberRemovedResponse(BaseModel):
    """Outcome of removing a member"""

    group_deleted: bool


class ActivityResponse(BaseModel):
    """Activity log entry"""

    group_id: UUID
    group_name: Optional[str] = None
    text: str
    created_at: datetime


class ActivityListResponse(BaseModel):
    """Response schema for activity entries"""

    items: List[ActivityResponse]
