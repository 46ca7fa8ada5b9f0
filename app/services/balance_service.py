"""Balance calculation logic"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import AuthorizationError, NotFoundError
from app.repositories.expense_repository import ExpenseRepository
from app.repositories.group_repository import GroupRepository
from app.schemas.balance import (Counterparty, ExpenseSnapshot,
                                 GroupMemberRef, MemberBalance)
from app.services.cache_service import CacheService
from app.services.split_calculator import compute_shares
from app.utils.decimal_utils import round_decimal, sum_decimals, to_money

logger = logging.getLogger(__name__)
settings = get_settings()


class BalanceService:
    """Service for balance calculation operations"""

    @staticmethod
    def _counterparties(
        amounts: Dict[str, Decimal], names: Dict[str, Optional[str]]
    ) -> List[Counterparty]:
        """Turn an id -> amount map into named counterparties, first-seen order."""
        return [
            Counterparty(user_id=user_id, name=names.get(user_id), amount=round_decimal(amount))
            for user_id, amount in amounts.items()
        ]

    @staticmethod
    def calculate_member_balance(
        members: Sequence[GroupMemberRef],
        expenses: Sequence[ExpenseSnapshot],
        member_id: str,
    ) -> MemberBalance:
        """
        Calculate what a member paid, owes and is owed across a group.

        Every expense is replayed through the split calculator. Shares that
        are already marked paid are settled and do not count in either
        direction.

        Args:
            members: Group roster, used to name counterparties
            expenses: Snapshot of all of the group's expenses
            member_id: Member to calculate the balance for

        Returns:
            MemberBalance (positive net_balance = others owe the member)
        """
        member_id = str(member_id)
        names = {member.id: member.name for member in members}

        total_paid = Decimal("0")
        total_owed = Decimal("0")
        owed_to: Dict[str, Decimal] = {}
        owed_by: Dict[str, Decimal] = {}

        for expense in expenses:
            participant_ids = [p.id for p in expense.participants]
            payer_id = expense.paid_by
            shares = compute_shares(expense.amount, participant_ids, expense.split)

            if member_id not in participant_ids:
                continue

            # Member paid: unsettled shares of others are owed to them
            if member_id == payer_id:
                total_paid += to_money(expense.amount)
                for participant in expense.participants:
                    if participant.id == member_id or participant.is_paid:
                        continue
                    share = shares.get(participant.id, Decimal("0"))
                    owed_by[participant.id] = owed_by.get(participant.id, Decimal("0")) + share
                continue

            # Member owes their own unsettled share to the payer
            own_state = next(p for p in expense.participants if p.id == member_id)
            if own_state.is_paid:
                continue

            share = shares.get(member_id, Decimal("0"))
            total_owed += share
            owed_to[payer_id] = owed_to.get(payer_id, Decimal("0")) + share

        total_is_owed = sum_decimals(owed_by.values())

        return MemberBalance(
            member_id=member_id,
            total_paid=round_decimal(total_paid),
            total_owed=round_decimal(total_owed),
            total_is_owed=round_decimal(total_is_owed),
            owed_to=BalanceService._counterparties(owed_to, names),
            owed_by=BalanceService._counterparties(owed_by, names),
            net_balance=round_decimal(total_is_owed - total_owed),
        )

    @staticmethod
    def calculate_group_balances(
        members: Sequence[GroupMemberRef], expenses: Sequence[ExpenseSnapshot]
    ) -> List[MemberBalance]:
        """
        Calculate balances for every member on the roster.

        Args:
            members: Group roster
            expenses: Snapshot of all of the group's expenses

        Returns:
            One MemberBalance per member, roster order
        """
        return [
            BalanceService.calculate_member_balance(members, expenses, member.id)
            for member in members
        ]

    @staticmethod
    def _cache_key(group_id, member_id) -> str:
        return f"balance:{group_id}:{member_id}"

    @staticmethod
    async def _load_group_snapshot(
        group_id: UUID, db: AsyncSession
    ) -> Tuple[List[GroupMemberRef], List[ExpenseSnapshot]]:
        """
        Load the roster and every expense of a group in one pass.

        Args:
            group_id: Group ID
            db: Database session

        Returns:
            Tuple of (roster, expense snapshots)
        """
        memberships = await GroupRepository.get_members(db, group_id)
        members = [
            GroupMemberRef(id=m.user_id, name=m.user.name, email=m.user.email)
            for m in memberships
        ]

        expenses = await ExpenseRepository.get_group_expenses(db, group_id)
        snapshots = [ExpenseRepository.to_snapshot(expense) for expense in expenses]

        return members, snapshots

    @staticmethod
    async def _ensure_member(group_id: UUID, user_id: UUID, db: AsyncSession) -> None:
        """
        Raises:
            NotFoundError: If the group does not exist
            AuthorizationError: If the user is not a member
        """
        group = await GroupRepository.get_by_id(db, group_id)
        if not group:
            raise NotFoundError("Group not found")

        membership = await GroupRepository.get_membership(db, group_id, user_id)
        if not membership:
            raise AuthorizationError("You are not a member of this group")

    @staticmethod
    async def get_member_balance(
        group_id: UUID,
        member_id: UUID,
        requester_id: UUID,
        db: AsyncSession,
        use_cache: bool = True,
    ) -> MemberBalance:
        """
        Get one member's balance within a group.

        Args:
            group_id: Group ID
            member_id: Member whose balance is requested
            requester_id: User asking for it (must be a group member)
            db: Database session
            use_cache: Whether to use cache (default: True)

        Returns:
            MemberBalance

        Raises:
            NotFoundError: If group not found or member not in group
            AuthorizationError: If requester is not a group member
        """
        await BalanceService._ensure_member(group_id, requester_id, db)

        if member_id != requester_id:
            membership = await GroupRepository.get_membership(db, group_id, member_id)
            if not membership:
                raise NotFoundError(f"User with ID {member_id} is not a member of this group")

        # Try to get from cache
        cache_key = BalanceService._cache_key(group_id, member_id)
        if use_cache:
            cached_data = await CacheService.get(cache_key)
            if cached_data:
                return MemberBalance.model_validate_json(cached_data)

        # Calculate from a fresh snapshot
        members, expenses = await BalanceService._load_group_snapshot(group_id, db)
        balance = BalanceService.calculate_member_balance(members, expenses, str(member_id))

        # Cache the result
        if use_cache:
            await CacheService.set(
                cache_key, balance.model_dump_json(), ttl=settings.balance_cache_ttl
            )

        return balance

    @staticmethod
    async def get_group_balances(
        group_id: UUID, requester_id: UUID, db: AsyncSession
    ) -> List[MemberBalance]:
        """
        Get balances of every member of a group.

        Always computed fresh from a single snapshot so all balances agree.

        Args:
            group_id: Group ID
            requester_id: User asking (must be a group member)
            db: Database session

        Returns:
            List of MemberBalance, roster order
        """
        await BalanceService._ensure_member(group_id, requester_id, db)

        members, expenses = await BalanceService._load_group_snapshot(group_id, db)
        return BalanceService.calculate_group_balances(members, expenses)

    @staticmethod
    async def invalidate_group_balances(group_id: UUID, member_ids: List[UUID]) -> bool:
        """
        Invalidate cached balances for the members of a group.

        Args:
            group_id: Group ID
            member_ids: Member IDs whose cached balances are stale

        Returns:
            True if successful
        """
        if not member_ids:
            return True

        cache_keys = [BalanceService._cache_key(group_id, member_id) for member_id in member_ids]
        return await CacheService.delete_multiple(cache_keys)
