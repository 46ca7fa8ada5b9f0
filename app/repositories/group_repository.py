"""Group data access"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete as sql_delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.group import Group, GroupActivity, GroupMember


class GroupRepository:
    """Repository for Group, GroupMember and GroupActivity operations"""

    @staticmethod
    async def create(db: AsyncSession, group: Group) -> Group:
        """
        Create a new group.

        Args:
            db: Database session
            group: Group object to create

        Returns:
            Created group
        """
        db.add(group)
        await db.flush()
        await db.refresh(group)
        return group

    @staticmethod
    async def get_by_id(db: AsyncSession, group_id: UUID) -> Optional[Group]:
        """
        Get group by ID.

        Args:
            db: Database session
            group_id: Group UUID

        Returns:
            Group if found, None otherwise
        """
        result = await db.execute(select(Group).where(Group.id == group_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_members(db: AsyncSession, group_id: UUID) -> Optional[Group]:
        """
        Get group with members (and their users) eagerly loaded.

        Args:
            db: Database session
            group_id: Group UUID

        Returns:
            Group if found, None otherwise
        """
        result = await db.execute(
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.members).selectinload(GroupMember.user))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_groups(db: AsyncSession, user_id: UUID) -> List[Group]:
        """
        Get every group the user belongs to, newest first.

        Args:
            db: Database session
            user_id: User UUID

        Returns:
            List of groups with members loaded
        """
        member_subquery = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        result = await db.execute(
            select(Group)
            .where(Group.id.in_(member_subquery))
            .order_by(Group.created_at.desc())
            .options(selectinload(Group.members).selectinload(GroupMember.user))
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, group: Group) -> None:
        """
        Delete a group; members, activity and expenses cascade.

        Args:
            db: Database session
            group: Group to delete
        """
        await db.delete(group)
        await db.flush()

    @staticmethod
    async def get_members(db: AsyncSession, group_id: UUID) -> List[GroupMember]:
        """
        Get the group roster in join order.

        Args:
            db: Database session
            group_id: Group UUID

        Returns:
            List of memberships with users loaded
        """
        result = await db.execute(
            select(GroupMember)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.joined_at)
            .options(selectinload(GroupMember.user))
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_membership(
        db: AsyncSession, group_id: UUID, user_id: UUID
    ) -> Optional[GroupMember]:
        """
        Get a user's membership in a group.

        Args:
            db: Database session
            group_id: Group UUID
            user_id: User UUID

        Returns:
            GroupMember if the user is a member, None otherwise
        """
        result = await db.execute(
            select(GroupMember).where(
                and_(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def add_member(db: AsyncSession, member: GroupMember) -> GroupMember:
        """
        Add a membership row.

        Args:
            db: Database session
            member: GroupMember to add

        Returns:
            Created membership
        """
        db.add(member)
        await db.flush()
        await db.refresh(member)
        return member

    @staticmethod
    async def remove_member(db: AsyncSession, group_id: UUID, user_id: UUID) -> int:
        """
        Remove a user from a group.

        Args:
            db: Database session
            group_id: Group UUID
            user_id: User UUID

        Returns:
            Number of membership rows deleted
        """
        result = await db.execute(
            sql_delete(GroupMember).where(
                and_(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
            )
        )
        await db.flush()
        return result.rowcount

    @staticmethod
    async def add_activity(db: AsyncSession, group_id: UUID, text: str) -> GroupActivity:
        """
        Append an entry to the group's activity log.

        Args:
            db: Database session
            group_id: Group UUID
            text: Human readable description

        Returns:
            Created activity entry
        """
        entry = GroupActivity(group_id=group_id, text=text)
        db.add(entry)
        await db.flush()
        return entry

    @staticmethod
    async def get_activity(
        db: AsyncSession, group_id: UUID, limit: int = 50
    ) -> List[GroupActivity]:
        """
        Get a group's activity, newest first.

        Args:
            db: Database session
            group_id: Group UUID
            limit: Maximum number of entries

        Returns:
            List of activity entries
        """
        result = await db.execute(
            select(GroupActivity)
            .where(GroupActivity.group_id == group_id)
            .order_by(GroupActivity.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_user_activity(
        db: AsyncSession, user_id: UUID, limit: int = 10
    ) -> List[GroupActivity]:
        """
        Get recent activity across every group the user belongs to.

        Args:
            db: Database session
            user_id: User UUID
            limit: Maximum number of entries

        Returns:
            List of activity entries with their group loaded, newest first
        """
        member_subquery = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        result = await db.execute(
            select(GroupActivity)
            .where(GroupActivity.group_id.in_(member_subquery))
            .order_by(GroupActivity.created_at.desc())
            .limit(limit)
            .options(selectinload(GroupActivity.group))
        )
        return list(result.scalars().all())
