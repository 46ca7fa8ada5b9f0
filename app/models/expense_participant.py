"""Expense participant model"""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class ParticipantStatus(str, enum.Enum):
    """Settlement status of one participant's share"""
    PAID = "paid"
    UNPAID = "unpaid"


class ExpenseParticipant(Base):
    """One member's settlement state for an expense"""

    __tablename__ = "expense_participants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    expense_id = Column(UUID(as_uuid=True), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    # Keeps the shared_with order stable across reads
    position = Column(Integer, default=0, nullable=False)
    status = Column(
        Enum(ParticipantStatus, values_callable=lambda e: [m.value for m in e]),
        default=ParticipantStatus.UNPAID,
        nullable=False,
    )
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('expense_id', 'user_id', name='uq_expense_user'),
    )

    # Relationships
    expense = relationship("Expense", back_populates="participants")
    user = relationship("User", back_populates="expense_participations")

    def __repr__(self) -> str:
        return f"<ExpenseParticipant(expense_id={self.expense_id}, user_id={self.user_id}, status={self.status})>"
