"""Split configuration schemas"""

import enum
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.decimal_utils import to_decimal


class SplitType(str, enum.Enum):
    """Enum for split types"""
    EQUAL = "equal"
    PERCENT = "percent"
    AMOUNT = "amount"


class SplitAllocation(BaseModel):
    """One participant's weight in a split (percentage points or an amount)"""

    user: Optional[str] = None
    value: Decimal = Decimal("0")

    @field_validator("user", mode="before")
    @classmethod
    def convert_user(cls, v):
        """Accept UUIDs and other id-like values as plain strings"""
        if v is None:
            return None
        return str(v)

    @field_validator("value", mode="before")
    @classmethod
    def convert_value(cls, v):
        """Missing or non-numeric values count as 0"""
        return to_decimal(v)


class SplitSpec(BaseModel):
    """How an expense total is divided among its participants"""

    # Kept as a plain string so stored splits with unknown types still load
    type: str = SplitType.EQUAL.value
    allocations: List[SplitAllocation] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        """Store the enum value rather than the enum member"""
        if isinstance(v, SplitType):
            return v.value
        return v if v is not None else SplitType.EQUAL.value


class SplitValidation(BaseModel):
    """Advisory result of validating a split configuration"""

    ok: bool
    message: Optional[str] = None


class SplitPreviewRequest(BaseModel):
    """Draft split configuration sent by the split editor"""

    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    participant_ids: List[str] = Field(default_factory=list)
    split: Optional[SplitSpec] = None


class SplitPreviewResponse(BaseModel):
    """Computed shares for a draft split"""

    shares: Dict[str, Decimal]
    percentages: Dict[str, Decimal]
    # Amount each entered percentage stands for, percent splits only
    percent_amounts: Dict[str, Decimal] = Field(default_factory=dict)
    total_assigned: Decimal
    validation: SplitValidation


class SplitDefaultRequest(BaseModel):
    """Split type the editor switched to, with the current draft"""

    type: SplitType
    amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    participant_ids: List[str] = Field(default_factory=list)
