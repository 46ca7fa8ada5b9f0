"""Participant data access"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.expense_participant import ExpenseParticipant, ParticipantStatus


class ParticipantRepository:
    """Repository for ExpenseParticipant database operations"""

    @staticmethod
    async def create_batch(db: AsyncSession, participants: List[ExpenseParticipant]) -> List[ExpenseParticipant]:
        """
        Create multiple participants in a batch.

        Args:
            db: Database session
            participants: List of ExpenseParticipant objects

        Returns:
            List of created participants
        """
        db.add_all(participants)
        await db.flush()
        return participants

    @staticmethod
    async def get_by_expense_and_user(
        db: AsyncSession, expense_id: UUID, user_id: UUID
    ) -> Optional[ExpenseParticipant]:
        """
        Get one participant row.

        Args:
            db: Database session
            expense_id: Expense UUID
            user_id: User UUID

        Returns:
            ExpenseParticipant if found, None otherwise
        """
        result = await db.execute(
            select(ExpenseParticipant).where(
                and_(
                    ExpenseParticipant.expense_id == expense_id,
                    ExpenseParticipant.user_id == user_id,
                )
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_paid(
        db: AsyncSession, participant: ExpenseParticipant, paid_at: Optional[datetime] = None
    ) -> ExpenseParticipant:
        """
        Flip a participant's share to paid.

        Args:
            db: Database session
            participant: Participant row to update
            paid_at: When the share was paid (defaults to now)

        Returns:
            Updated participant
        """
        participant.status = ParticipantStatus.PAID
        participant.paid_at = paid_at or datetime.utcnow()
        await db.flush()
        return participant
