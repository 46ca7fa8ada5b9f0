"""Group business logic"""
import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (AuthorizationError, ConflictError,
                                 NotFoundError, ValidationError)
from app.models.group import Group, GroupActivity, GroupMember
from app.repositories.group_repository import GroupRepository
from app.repositories.user_repository import UserRepository
from app.schemas.group import GroupCreate, MemberPermissions, MemberPermissionsUpdate
from app.services.balance_service import BalanceService

logger = logging.getLogger(__name__)

CREATOR_PERMISSIONS = MemberPermissions(can_create_expenses=True, can_invite=True, can_kick=True)
MEMBER_PERMISSIONS = MemberPermissions(can_create_expenses=True, can_invite=False, can_kick=False)


class GroupService:
    """Service for group and membership operations"""

    @staticmethod
    async def require_membership(
        group_id: UUID, user_id: UUID, db: AsyncSession
    ) -> GroupMember:
        """
        Ensure the group exists and the user belongs to it.

        Args:
            group_id: Group ID
            user_id: User ID
            db: Database session

        Returns:
            The user's membership

        Raises:
            NotFoundError: If group not found
            AuthorizationError: If user is not a member
        """
        group = await GroupRepository.get_by_id(db, group_id)
        if not group:
            raise NotFoundError("Group not found")

        membership = await GroupRepository.get_membership(db, group_id, user_id)
        if not membership:
            raise AuthorizationError("You are not a member of this group")

        return membership

    @staticmethod
    async def create_group(group_data: GroupCreate, user_id: UUID, db: AsyncSession) -> Group:
        """
        Create a group with the creator and the listed members.

        The creator can create expenses, invite and kick; everyone else can
        only create expenses.

        Args:
            group_data: Group creation data
            user_id: ID of user creating the group
            db: Database session

        Returns:
            Created group with members loaded

        Raises:
            ValidationError: If any member ID doesn't exist
        """
        # Creator first, duplicates dropped
        member_ids = list(dict.fromkeys([user_id, *group_data.member_ids]))

        # Validate all member IDs exist
        users = await UserRepository.get_by_ids(db, member_ids)
        found_ids = {user.id for user in users}
        missing = [str(member_id) for member_id in member_ids if member_id not in found_ids]
        if missing:
            raise ValidationError(f"Users not found: {', '.join(missing)}")

        # Begin transaction
        async with db.begin_nested():
            group = await GroupRepository.create(
                db, Group(name=group_data.name, created_by_user_id=user_id)
            )

            # Add members with their permissions
            for member_id in member_ids:
                permissions = CREATOR_PERMISSIONS if member_id == user_id else MEMBER_PERMISSIONS
                await GroupRepository.add_member(
                    db,
                    GroupMember(group_id=group.id, user_id=member_id, **permissions.model_dump()),
                )

            await GroupRepository.add_activity(db, group.id, f'Group "{group_data.name}" created')

        await db.commit()
        logger.info("Group %s created by %s with %d members", group.id, user_id, len(member_ids))

        return await GroupRepository.get_with_members(db, group.id)

    @staticmethod
    async def get_user_groups(user_id: UUID, db: AsyncSession) -> List[Group]:
        """
        Get every group the user belongs to.

        Args:
            user_id: User ID
            db: Database session

        Returns:
            List of groups
        """
        return await GroupRepository.get_user_groups(db, user_id)

    @staticmethod
    async def get_group(group_id: UUID, user_id: UUID, db: AsyncSession) -> Group:
        """
        Get a group the user belongs to.

        Raises:
            NotFoundError: If group not found
            AuthorizationError: If user is not a member
        """
        await GroupService.require_membership(group_id, user_id, db)
        return await GroupRepository.get_with_members(db, group_id)

    @staticmethod
    async def add_member(
        group_id: UUID, new_user_id: UUID, requester_id: UUID, db: AsyncSession
    ) -> Group:
        """
        Add a user to a group.

        Args:
            group_id: Group ID
            new_user_id: User to add
            requester_id: User performing the invite
            db: Database session

        Returns:
            Group with updated members

        Raises:
            AuthorizationError: If requester may not invite
            NotFoundError: If group or user not found
            ConflictError: If user is already a member
        """
        membership = await GroupService.require_membership(group_id, requester_id, db)
        if not membership.can_invite:
            raise AuthorizationError("You are not allowed to invite members to this group")

        new_user = await UserRepository.get_by_id(db, new_user_id)
        if not new_user:
            raise NotFoundError(f"User with ID {new_user_id} not found")

        # Check if user is already a member
        if await GroupRepository.get_membership(db, group_id, new_user_id):
            raise ConflictError(f"{new_user.display_name} is already a member of this group")

        await GroupRepository.add_member(
            db,
            GroupMember(group_id=group_id, user_id=new_user_id, **MEMBER_PERMISSIONS.model_dump()),
        )
        await GroupRepository.add_activity(db, group_id, f"{new_user.display_name} joined the group")
        await db.commit()

        return await GroupRepository.get_with_members(db, group_id)

    @staticmethod
    async def remove_member(
        group_id: UUID, user_id: UUID, requester_id: UUID, db: AsyncSession
    ) -> bool:
        """
        Remove a member from a group, or leave it.

        When the last member leaves, the group and all its expenses are
        deleted.

        Args:
            group_id: Group ID
            user_id: Member to remove
            requester_id: User performing the removal
            db: Database session

        Returns:
            True if the group was deleted, False otherwise

        Raises:
            AuthorizationError: If requester may not remove other members
            NotFoundError: If group not found or user not a member
        """
        requester_membership = await GroupService.require_membership(group_id, requester_id, db)
        # Removing someone else needs can_kick
        if user_id != requester_id and not requester_membership.can_kick:
            raise AuthorizationError("You are not allowed to remove members from this group")

        target = await GroupRepository.get_membership(db, group_id, user_id)
        if not target:
            raise NotFoundError("User is not a member of this group")

        removed_user = await UserRepository.get_by_id(db, user_id)
        removed_name = removed_user.display_name if removed_user else "User"

        await GroupRepository.remove_member(db, group_id, user_id)
        remaining = await GroupRepository.get_members(db, group_id)

        # Last member left, delete the group
        if not remaining:
            group = await GroupRepository.get_by_id(db, group_id)
            await GroupRepository.delete(db, group)
            await db.commit()
            logger.info("Group %s deleted after its last member left", group_id)
            await BalanceService.invalidate_group_balances(group_id, [user_id])
            return True

        if user_id != requester_id:
            requester = await UserRepository.get_by_id(db, requester_id)
            requester_name = requester.display_name if requester else "User"
            text = f"{removed_name} was removed by {requester_name}"
        else:
            text = f"{removed_name} left the group"

        await GroupRepository.add_activity(db, group_id, text)
        await db.commit()
        logger.info("User %s removed from group %s by %s", user_id, group_id, requester_id)

        await BalanceService.invalidate_group_balances(
            group_id, [user_id, *(m.user_id for m in remaining)]
        )
        return False

    @staticmethod
    async def update_permissions(
        group_id: UUID,
        user_id: UUID,
        updates: MemberPermissionsUpdate,
        requester_id: UUID,
        db: AsyncSession,
    ) -> GroupMember:
        """
        Change a member's permissions (group creator only).

        Raises:
            NotFoundError: If group not found or user not a member
            AuthorizationError: If requester is not the group creator
        """
        await GroupService.require_membership(group_id, requester_id, db)
        # Check if requester is the creator
        group = await GroupRepository.get_by_id(db, group_id)
        if group.created_by_user_id != requester_id:
            raise AuthorizationError("Only the group creator can change permissions")

        target = await GroupRepository.get_membership(db, group_id, user_id)
        if not target:
            raise NotFoundError("User is not a member of this group")

        for field, value in updates.model_dump(exclude_none=True).items():
            setattr(target, field, value)

        await db.commit()
        return target

    @staticmethod
    async def get_activity(
        group_id: UUID, user_id: UUID, db: AsyncSession, limit: int = 50
    ) -> List[GroupActivity]:
        """
        Get a group's activity log, newest first.

        Raises:
            NotFoundError: If group not found
            AuthorizationError: If user is not a member
        """
        await GroupService.require_membership(group_id, user_id, db)
        return await GroupRepository.get_activity(db, group_id, limit=limit)

    @staticmethod
    async def get_recent_activity(
        user_id: UUID, db: AsyncSession, limit: int = 10
    ) -> List[GroupActivity]:
        """
        Get recent activity across all of the user's groups.

        Args:
            user_id: User ID
            db: Database session
            limit: Maximum number of entries

        Returns:
            List of activity entries, newest first
        """
        return await GroupRepository.get_user_activity(db, user_id, limit=limit)
