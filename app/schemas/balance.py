"""Balance schemas"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.expense_participant import ParticipantStatus
from app.schemas.split import SplitSpec


class GroupMemberRef(BaseModel):
    """Roster entry: a member id with optional display details"""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return str(v)


class ParticipantState(BaseModel):
    """A participant of one expense and whether their share is settled"""
    id: str
    status: ParticipantStatus = ParticipantStatus.UNPAID
    paid_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def convert_id(cls, v):
        return str(v)

    @property
    def is_paid(self) -> bool:
        return self.status == ParticipantStatus.PAID


class ExpenseSnapshot(BaseModel):
    """Read-only view of an expense as consumed by the balance aggregator"""
    id: Optional[str] = None
    amount: Decimal = Decimal("0")
    paid_by: str
    participants: List[ParticipantState] = Field(default_factory=list)
    split: Optional[SplitSpec] = None

    @field_validator("id", "paid_by", mode="before")
    @classmethod
    def convert_ids(cls, v):
        if v is None:
            return v
        return str(v)


class Counterparty(BaseModel):
    """Accumulated amount owed between the member and one other person"""
    user_id: str
    name: Optional[str] = None
    amount: Decimal


class MemberBalance(BaseModel):
    """Balance of one member across every expense in a group"""
    member_id: str
    total_paid: Decimal
    total_owed: Decimal
    total_is_owed: Decimal
    owed_to: List[Counterparty]  # people the member owes
    owed_by: List[Counterparty]  # people who owe the member
    net_balance: Decimal  # positive = net creditor

    model_config = ConfigDict(from_attributes=True)


class GroupBalancesResponse(BaseModel):
    """Balances of every member of a group"""
    group_id: UUID
    balances: List[MemberBalance]
