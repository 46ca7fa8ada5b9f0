"""Expense schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.expense_participant import ParticipantStatus
from app.schemas.split import SplitSpec
from app.schemas.user import UserSummary


class ExpenseCreate(BaseModel):
    """Schema for creating an expense"""

    title: str = Field(..., max_length=255, min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=2000)
    paid_by: Optional[UUID] = Field(
        default=None, description="Payer; defaults to the current user"
    )
    shared_with: List[UUID] = Field(..., min_length=1)
    split: Optional[SplitSpec] = None

    @field_validator("shared_with")
    @classmethod
    def dedupe_shared_with(cls, v):
        """Drop repeated ids, keeping the first occurrence"""
        return list(dict.fromkeys(v))


class ParticipantResponse(BaseModel):
    """Participant of an expense with their computed share"""

    user_id: UUID
    name: Optional[str] = None
    status: ParticipantStatus
    paid_at: Optional[datetime] = None
    share: Decimal


class ExpenseResponse(BaseModel):
    """Complete expense response schema"""

    id: UUID
    group_id: UUID
    title: str
    notes: Optional[str] = None
    amount: Decimal
    paid_by: UserSummary
    split: Optional[SplitSpec] = None
    participants: List[ParticipantResponse]
    completed: bool
    completed_at: Optional[datetime] = None
    all_paid: bool
    expense_date: datetime
    created_at: datetime


class ExpenseListItem(BaseModel):
    """Schema for expense in list view"""

    id: UUID
    title: str
    amount: Decimal
    paid_by: UserSummary
    expense_date: datetime
    completed: bool
    participant_count: int
    your_share: Optional[Decimal] = None  # None when the viewer is not a participant
    your_status: Optional[ParticipantStatus] = None


class ExpenseListResponse(BaseModel):
    """Response schema for expense list"""

    items: List[ExpenseListItem]
