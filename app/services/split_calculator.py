"""Split computation entry points used by expenses and balances"""

from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from app.schemas.split import SplitAllocation, SplitSpec, SplitType, SplitValidation
from app.services.split_strategies import get_split_strategy
from app.utils.decimal_utils import round_decimal, sum_decimals, to_decimal, to_money
from app.utils.participant_utils import clean_participant_ids

Shares = Dict[str, Decimal]


def compute_shares(
    total_amount: Any,
    participant_ids: Optional[Iterable[Any]],
    split: Optional[SplitSpec] = None,
) -> Shares:
    """
    Compute each participant's share of an expense.

    Never raises: a negative or unreadable total is treated as 0, an empty
    participant list gives an empty mapping and an unknown split type
    behaves like an equal split.

    Args:
        total_amount: Expense total
        participant_ids: Ids of the participants sharing the expense
        split: Optional split configuration; equal split when absent

    Returns:
        Mapping of participant id to share, rounded to 2 decimals
    """
    total = to_money(total_amount)
    ids = clean_participant_ids(participant_ids)
    if not ids:
        return {}

    split_type = split.type if split else None
    allocations = split.allocations if split else []

    strategy = get_split_strategy(split_type)
    return strategy.calculate_shares(total, ids, allocations)


def validate_split(
    total_amount: Any,
    participant_ids: Optional[Iterable[Any]],
    split: Optional[SplitSpec] = None,
) -> SplitValidation:
    """
    Check a split configuration before persisting it.

    Advisory only; compute_shares accepts configurations that fail here.

    Args:
        total_amount: Expense total
        participant_ids: Ids of the participants sharing the expense
        split: Optional split configuration

    Returns:
        SplitValidation with ok flag and message on failure
    """
    if split is None:
        return SplitValidation(ok=True)

    return get_split_strategy(split.type).validate(split.allocations)


def to_percentages(shares: Shares) -> Dict[str, Decimal]:
    """
    Express each share as a percentage of all shares.

    Args:
        shares: Mapping of participant id to share

    Returns:
        Mapping of participant id to percentage, rounded to 2 decimals
    """
    total = sum_decimals(shares.values()) or Decimal("1")
    return {
        participant_id: round_decimal(share / total * 100)
        for participant_id, share in shares.items()
    }


def to_amounts_from_percent(total_amount: Any, percentages: Dict[str, Any]) -> Shares:
    """
    Apply percentages to a total.

    Args:
        total_amount: Expense total
        percentages: Mapping of participant id to percentage points

    Returns:
        Mapping of participant id to amount, rounded to 2 decimals
    """
    total = to_decimal(total_amount)
    return {
        participant_id: round_decimal(to_decimal(percent) / 100 * total)
        for participant_id, percent in percentages.items()
    }


def default_split(
    split_type: SplitType, participant_ids: Iterable[Any], total_amount: Any = 0
) -> SplitSpec:
    """Starting configuration when a user switches the split type."""
    ids = clean_participant_ids(participant_ids)
    value = Decimal("0")
    if ids and split_type == SplitType.PERCENT:
        value = round_decimal(Decimal("100") / len(ids))
    elif ids and split_type == SplitType.AMOUNT:
        value = round_decimal(to_decimal(total_amount) / len(ids))

    return SplitSpec(
        type=split_type,
        allocations=[SplitAllocation(user=pid, value=value) for pid in ids],
    )
