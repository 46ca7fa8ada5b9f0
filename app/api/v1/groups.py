"""Group endpoints"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, http_error
from app.core.exceptions import (AuthorizationError, ConflictError,
                                 NotFoundError, ValidationError)
from app.database import get_db
from app.models.group import GroupActivity
from app.models.user import User
from app.schemas.group import (ActivityListResponse, ActivityResponse,
                               GroupCreate, GroupListResponse,
                               GroupMemberResponse, GroupResponse, MemberAdd,
                               MemberPermissionsUpdate, MemberRemovedResponse)
from app.services.group_service import GroupService
from app.config import get_settings

settings = get_settings()

router = APIRouter(prefix="/groups", tags=["Groups"])


def _activity_list(entries: List[GroupActivity], with_group: bool = False) -> ActivityListResponse:
    return ActivityListResponse(
        items=[
            ActivityResponse(
                group_id=entry.group_id,
                group_name=entry.group.name if with_group else None,
                text=entry.text,
                created_at=entry.created_at,
            )
            for entry in entries
        ]
    )


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a group; the current user becomes its creator.

    Raises:
        400: If any member ID doesn't exist
    """
    try:
        group = await GroupService.create_group(group_data, current_user.id, db)
        return GroupResponse.model_validate(group)
    except ValidationError as e:
        raise http_error(e)


@router.get("", response_model=GroupListResponse)
async def list_groups(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the groups the current user belongs to"""
    groups = await GroupService.get_user_groups(current_user.id, db)
    return GroupListResponse(items=[GroupResponse.model_validate(g) for g in groups])


@router.get("/activity", response_model=ActivityListResponse)
async def recent_activity(
    limit: int = Query(settings.recent_activity_limit, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Recent activity across all of the current user's groups"""
    entries = await GroupService.get_recent_activity(current_user.id, db, limit=limit)
    return _activity_list(entries, with_group=True)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a group with its members and their permissions.

    Raises:
        403: If the current user is not a member
        404: If group not found
    """
    try:
        group = await GroupService.get_group(group_id, current_user.id, db)
        return GroupResponse.model_validate(group)
    except (NotFoundError, AuthorizationError) as e:
        raise http_error(e)


@router.post("/{group_id}/members", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    group_id: UUID,
    member: MemberAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a user to the group (requires invite permission).

    Raises:
        403: If the current user may not invite
        404: If group or user not found
        409: If the user is already a member
    """
    try:
        group = await GroupService.add_member(group_id, member.user_id, current_user.id, db)
        return GroupResponse.model_validate(group)
    except (NotFoundError, AuthorizationError, ConflictError) as e:
        raise http_error(e)


@router.delete("/{group_id}/members/{user_id}", response_model=MemberRemovedResponse)
async def remove_member(
    group_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Remove a member, or leave the group when user_id is the current user.

    Raises:
        403: If the current user may not remove other members
        404: If group not found or user not a member
    """
    try:
        deleted = await GroupService.remove_member(group_id, user_id, current_user.id, db)
        return MemberRemovedResponse(group_deleted=deleted)
    except (NotFoundError, AuthorizationError) as e:
        raise http_error(e)


@router.patch("/{group_id}/members/{user_id}/permissions", response_model=GroupMemberResponse)
async def update_member_permissions(
    group_id: UUID,
    user_id: UUID,
    updates: MemberPermissionsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a member's permissions (group creator only).

    Raises:
        403: If the current user is not the group creator
        404: If group not found or user not a member
    """
    try:
        await GroupService.update_permissions(group_id, user_id, updates, current_user.id, db)
        group = await GroupService.get_group(group_id, current_user.id, db)
    except (NotFoundError, AuthorizationError) as e:
        raise http_error(e)

    member = next(m for m in group.members if m.user_id == user_id)
    return GroupMemberResponse.model_validate(member)


@router.get("/{group_id}/activity", response_model=ActivityListResponse)
async def group_activity(
    group_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the group's activity log, newest first.

    Raises:
        403: If the current user is not a member
        404: If group not found
    """
    try:
        entries = await GroupService.get_activity(group_id, current_user.id, db, limit=limit)
    except (NotFoundError, AuthorizationError) as e:
        raise http_error(e)
    return _activity_list(entries)
