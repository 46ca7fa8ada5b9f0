"""Expense data access"""

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.expense import Expense
from app.models.expense_participant import ExpenseParticipant, ParticipantStatus
from app.schemas.balance import ExpenseSnapshot, ParticipantState
from app.schemas.split import SplitSpec
from app.utils.participant_utils import clean_participant_ids


class ExpenseRepository:
    """Repository for Expense database operations"""

    @staticmethod
    async def create(db: AsyncSession, expense: Expense) -> Expense:
        """
        Create a new expense.

        Args:
            db: Database session
            expense: Expense object to create

        Returns:
            Created expense
        """
        db.add(expense)
        await db.flush()
        await db.refresh(expense)
        return expense

    @staticmethod
    async def get_with_participants(
        db: AsyncSession, expense_id: UUID
    ) -> Optional[Expense]:
        """
        Get expense with participants and payer eagerly loaded.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense with participants if found, None otherwise
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .options(
                selectinload(Expense.participants).selectinload(
                    ExpenseParticipant.user
                ),
                selectinload(Expense.payer),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_group_expenses(db: AsyncSession, group_id: UUID) -> List[Expense]:
        """
        Get every expense of a group, most recent first.

        The result is a consistent snapshot used for a whole balance pass.

        Args:
            db: Database session
            group_id: Group UUID

        Returns:
            List of expenses with participants and payer loaded
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.group_id == group_id)
            .order_by(Expense.expense_date.desc(), Expense.created_at.desc())
            .options(
                selectinload(Expense.participants).selectinload(ExpenseParticipant.user),
                selectinload(Expense.payer),
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, expense: Expense) -> None:
        """
        Delete an expense (participants cascade).

        Args:
            db: Database session
            expense: Expense to delete
        """
        await db.delete(expense)
        await db.flush()

    @staticmethod
    def build_participant_states(
        shared_with: Iterable, paid_by, paid_at: Optional[datetime] = None
    ) -> List[ParticipantState]:
        """
        Derive participant states from a shared-with list and the payer.

        The payer's own entry starts out paid, everyone else unpaid. Used for
        new expenses and for stored expenses that have no participant rows.

        Args:
            shared_with: Ids sharing the expense, in order
            paid_by: Id of the payer
            paid_at: Timestamp recorded on the payer's entry

        Returns:
            List of ParticipantState
        """
        payer_id = str(paid_by) if paid_by else None
        states = []
        for participant_id in clean_participant_ids(shared_with):
            is_payer = participant_id == payer_id
            states.append(
                ParticipantState(
                    id=participant_id,
                    status=ParticipantStatus.PAID if is_payer else ParticipantStatus.UNPAID,
                    paid_at=paid_at if is_payer else None,
                )
            )
        return states

    @staticmethod
    def participant_states(expense: Expense) -> List[ParticipantState]:
        """
        Participant states of a stored expense in canonical form.

        Args:
            expense: Expense with participants loaded

        Returns:
            List of ParticipantState
        """
        if expense.participants:
            return [
                ParticipantState(
                    id=participant.user_id,
                    status=participant.status or ParticipantStatus.UNPAID,
                    paid_at=participant.paid_at,
                )
                for participant in expense.participants
            ]

        return ExpenseRepository.build_participant_states(
            expense.shared_with or [], expense.paid_by_user_id, expense.expense_date
        )

    @staticmethod
    def to_snapshot(expense: Expense) -> ExpenseSnapshot:
        """
        Convert a stored expense to the shape the balance aggregator reads.

        Args:
            expense: Expense with participants loaded

        Returns:
            ExpenseSnapshot
        """
        return ExpenseSnapshot(
            id=expense.id,
            amount=expense.amount,
            paid_by=expense.paid_by_user_id,
            participants=ExpenseRepository.participant_states(expense),
            split=SplitSpec.model_validate(expense.split) if expense.split else None,
        )
