"""Expense business logic"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.expense import Expense
from app.models.expense_participant import ExpenseParticipant, ParticipantStatus
from app.repositories.expense_repository import ExpenseRepository
from app.repositories.group_repository import GroupRepository
from app.repositories.participant_repository import ParticipantRepository
from app.repositories.user_repository import UserRepository
from app.schemas.expense import (ExpenseCreate, ExpenseListItem, ExpenseResponse,
                                 ParticipantResponse)
from app.schemas.user import UserSummary
from app.services.balance_service import BalanceService
from app.services.group_service import GroupService
from app.services.split_calculator import compute_shares, validate_split
from app.utils.decimal_utils import round_decimal

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for expense operations"""

    @staticmethod
    async def _get_group_expense(
        group_id: UUID, expense_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Load an expense with participants, making sure it belongs to the group.

        Raises:
            NotFoundError: If expense not found in this group
        """
        expense = await ExpenseRepository.get_with_participants(db, expense_id)
        if not expense or expense.group_id != group_id:
            raise NotFoundError("Expense not found")
        return expense

    @staticmethod
    def _involved_member_ids(expense: Expense) -> List[UUID]:
        """Payer and participants of an expense"""
        member_ids = {expense.paid_by_user_id}
        member_ids.update(UUID(state.id) for state in ExpenseRepository.participant_states(expense))
        return list(member_ids)

    @staticmethod
    async def _invalidate(group_id: UUID, expense: Expense) -> None:
        """Drop cached balances of everyone involved in an expense"""
        await BalanceService.invalidate_group_balances(
            group_id, ExpenseService._involved_member_ids(expense)
        )

    @staticmethod
    async def create_expense(
        group_id: UUID,
        expense_data: ExpenseCreate,
        user_id: UUID,
        db: AsyncSession
    ) -> Expense:
        """
        Create a new expense in a group.

        Args:
            group_id: Group ID
            expense_data: Expense creation data
            user_id: ID of user creating the expense
            db: Database session

        Returns:
            Created expense with participants

        Raises:
            NotFoundError: If group not found
            AuthorizationError: If user may not create expenses here
            ValidationError: If payer, participants or split are invalid
        """
        membership = await GroupService.require_membership(group_id, user_id, db)
        if not membership.can_create_expenses:
            raise AuthorizationError("You are not allowed to create expenses in this group")

        # Payer defaults to the current user
        payer_id = expense_data.paid_by or user_id
        member_ids = {m.user_id for m in await GroupRepository.get_members(db, group_id)}

        if payer_id not in member_ids:
            raise ValidationError("The payer must be a member of the group")

        # Validate all participants are group members
        outsiders = [str(uid) for uid in expense_data.shared_with if uid not in member_ids]
        if outsiders:
            raise ValidationError(f"Users are not members of this group: {', '.join(outsiders)}")

        # Validate split configuration
        shared_with = [str(uid) for uid in expense_data.shared_with]
        validation = validate_split(expense_data.amount, shared_with, expense_data.split)
        if not validation.ok:
            raise ValidationError(validation.message)

        # Begin transaction
        now = datetime.utcnow()
        async with db.begin_nested():
            # Create expense
            expense = Expense(
                group_id=group_id,
                title=expense_data.title,
                notes=expense_data.notes,
                amount=expense_data.amount,
                paid_by_user_id=payer_id,
                shared_with=shared_with,
                split=expense_data.split.model_dump(mode="json") if expense_data.split else None,
                expense_date=now,
            )
            created_expense = await ExpenseRepository.create(db, expense)

            # Create participants, payer already settled
            states = ExpenseRepository.build_participant_states(shared_with, payer_id, now)
            participants = [
                ExpenseParticipant(
                    expense_id=created_expense.id,
                    user_id=UUID(state.id),
                    position=position,
                    status=state.status,
                    paid_at=state.paid_at,
                )
                for position, state in enumerate(states)
            ]
            await ParticipantRepository.create_batch(db, participants)

            await GroupRepository.add_activity(
                db,
                group_id,
                f"New expense added: {expense_data.title} ({round_decimal(expense_data.amount)})",
            )

        await db.commit()
        logger.info(
            "Expense %s created in group %s by %s", created_expense.id, group_id, user_id
        )

        # Return expense with participants loaded
        expense = await ExpenseRepository.get_with_participants(db, created_expense.id)
        await ExpenseService._invalidate(group_id, expense)
        return expense

    @staticmethod
    async def get_group_expenses(
        group_id: UUID, user_id: UUID, db: AsyncSession
    ) -> List[Expense]:
        """
        Get a group's expenses, most recent first.

        Raises:
            NotFoundError: If group not found
            AuthorizationError: If user is not a member
        """
        await GroupService.require_membership(group_id, user_id, db)
        return await ExpenseRepository.get_group_expenses(db, group_id)

    @staticmethod
    async def get_expense_details(
        group_id: UUID, expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Get expense details with authorization check.

        Args:
            group_id: Group ID
            expense_id: Expense ID
            user_id: User ID requesting the expense
            db: Database session

        Returns:
            Expense with all details

        Raises:
            NotFoundError: If group or expense not found
            AuthorizationError: If user is not a group member
        """
        await GroupService.require_membership(group_id, user_id, db)
        return await ExpenseService._get_group_expense(group_id, expense_id, db)

    @staticmethod
    async def delete_expense(
        group_id: UUID, expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> bool:
        """
        Delete an expense (payer only).

        Returns:
            True if deleted

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is not the payer
        """
        await GroupService.require_membership(group_id, user_id, db)
        expense = await ExpenseService._get_group_expense(group_id, expense_id, db)

        # Check if user is the payer
        if expense.paid_by_user_id != user_id:
            raise AuthorizationError("Only the payer can delete this expense")

        title = expense.title
        member_ids = ExpenseService._involved_member_ids(expense)

        await ExpenseRepository.delete(db, expense)
        await GroupRepository.add_activity(db, group_id, f"Expense deleted: {title}")
        await db.commit()

        # Cached balances are dropped only once the delete is committed
        await BalanceService.invalidate_group_balances(group_id, member_ids)

        logger.info("Expense %s deleted by %s", expense_id, user_id)
        return True

    @staticmethod
    async def mark_share_paid(
        group_id: UUID, expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Mark the current user's share of an expense as paid.

        Expenses stored before participant rows existed get their rows
        created first. Paying an already paid share changes nothing.

        Raises:
            NotFoundError: If expense not found
            ValidationError: If user is not a participant
        """
        await GroupService.require_membership(group_id, user_id, db)
        expense = await ExpenseService._get_group_expense(group_id, expense_id, db)

        # Older expenses have no participant rows yet
        if not expense.participants:
            states = ExpenseRepository.participant_states(expense)
            await ParticipantRepository.create_batch(
                db,
                [
                    ExpenseParticipant(
                        expense_id=expense.id,
                        user_id=UUID(state.id),
                        position=position,
                        status=state.status,
                        paid_at=state.paid_at,
                    )
                    for position, state in enumerate(states)
                ],
            )

        # Check if user is a participant
        participant = await ParticipantRepository.get_by_expense_and_user(db, expense_id, user_id)
        if not participant:
            raise ValidationError("You are not a participant of this expense")

        if participant.status == ParticipantStatus.PAID:
            await db.commit()
            return await ExpenseRepository.get_with_participants(db, expense_id)

        await ParticipantRepository.mark_paid(db, participant)

        user = await UserRepository.get_by_id(db, user_id)
        name = user.display_name if user else "Someone"
        await GroupRepository.add_activity(db, group_id, f"{name} paid their share of {expense.title}")
        await db.commit()

        logger.info("User %s paid their share of expense %s", user_id, expense_id)

        expense = await ExpenseRepository.get_with_participants(db, expense_id)
        await ExpenseService._invalidate(group_id, expense)
        return expense

    @staticmethod
    async def mark_complete(
        group_id: UUID, expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Mark an expense as complete (payer only).

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is not the payer
        """
        await GroupService.require_membership(group_id, user_id, db)
        expense = await ExpenseService._get_group_expense(group_id, expense_id, db)

        # Check if user is the payer
        if expense.paid_by_user_id != user_id:
            raise AuthorizationError("Only the payer can mark this expense as complete")

        expense.completed = True
        expense.completed_at = datetime.utcnow()
        expense.completed_by_user_id = user_id

        await GroupRepository.add_activity(db, group_id, f"Expense completed: {expense.title}")
        await db.commit()

        logger.info("Expense %s marked complete by %s", expense_id, user_id)
        return await ExpenseRepository.get_with_participants(db, expense_id)

    @staticmethod
    def _participant_names(expense: Expense) -> Dict[str, Optional[str]]:
        names = {}
        if expense.payer is not None:
            names[str(expense.paid_by_user_id)] = expense.payer.display_name
        for participant in expense.participants:
            if participant.user is not None:
                names[str(participant.user_id)] = participant.user.display_name
        return names

    @staticmethod
    def build_expense_response(expense: Expense) -> ExpenseResponse:
        """
        Build the detailed response for an expense, including each share.

        Args:
            expense: Expense with participants and payer loaded

        Returns:
            ExpenseResponse
        """
        snapshot = ExpenseRepository.to_snapshot(expense)
        shares = compute_shares(
            snapshot.amount, [p.id for p in snapshot.participants], snapshot.split
        )
        names = ExpenseService._participant_names(expense)

        participants = [
            ParticipantResponse(
                user_id=state.id,
                name=names.get(state.id),
                status=state.status,
                paid_at=state.paid_at,
                share=shares.get(state.id, Decimal("0")),
            )
            for state in snapshot.participants
        ]

        return ExpenseResponse(
            id=expense.id,
            group_id=expense.group_id,
            title=expense.title,
            notes=expense.notes,
            amount=expense.amount,
            paid_by=UserSummary.model_validate(expense.payer),
            split=snapshot.split,
            participants=participants,
            completed=bool(expense.completed),
            completed_at=expense.completed_at,
            all_paid=all(state.is_paid for state in snapshot.participants),
            expense_date=expense.expense_date,
            created_at=expense.created_at,
        )

    @staticmethod
    def build_list_item(expense: Expense, viewer_id: UUID) -> ExpenseListItem:
        """
        Build the list view of an expense from the viewer's perspective.

        Args:
            expense: Expense with participants and payer loaded
            viewer_id: User looking at the list

        Returns:
            ExpenseListItem
        """
        snapshot = ExpenseRepository.to_snapshot(expense)
        participant_ids = [p.id for p in snapshot.participants]
        viewer = str(viewer_id)

        your_share = None
        your_status = None
        if viewer in participant_ids:
            shares = compute_shares(snapshot.amount, participant_ids, snapshot.split)
            your_share = shares.get(viewer, Decimal("0"))
            your_status = next(p.status for p in snapshot.participants if p.id == viewer)

        return ExpenseListItem(
            id=expense.id,
            title=expense.title,
            amount=expense.amount,
            paid_by=UserSummary.model_validate(expense.payer),
            expense_date=expense.expense_date,
            completed=bool(expense.completed),
            participant_count=len(participant_ids),
            your_share=your_share,
            your_status=your_status,
        )
