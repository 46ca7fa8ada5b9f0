"""Percentage split strategy"""

from decimal import Decimal
from typing import Dict, List

from app.schemas.split import SplitAllocation, SplitValidation
from app.services.split_strategies.base import BaseSplitStrategy
from app.utils.decimal_utils import round_decimal, sum_decimals, to_decimal

HUNDRED = Decimal("100")


class PercentageSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense by percentage"""

    def calculate_shares(
        self,
        total_amount: Decimal,
        participant_ids: List[str],
        allocations: List[SplitAllocation],
    ) -> Dict[str, Decimal]:
        """
        Calculate percentage-based split for participants.

        Percentages are normalized against their own sum, so 75/75 behaves
        like 50/50. A zero sum yields zero shares for everybody rather than
        falling back to an equal split.

        Args:
            total_amount: Total expense amount
            participant_ids: Participant ids
            allocations: Percentage points per participant

        Returns:
            Mapping of participant id to share
        """
        percentages, percent_sum = self._allocation_map(allocations)

        factor = Decimal("0") if percent_sum == 0 else HUNDRED / percent_sum

        shares = {}
        for participant_id in participant_ids:
            effective = percentages.get(participant_id, Decimal("0")) * factor
            shares[participant_id] = round_decimal(effective / HUNDRED * total_amount)

        return shares

    def validate(self, allocations: List[SplitAllocation]) -> SplitValidation:
        """
        Percentages must add up to something positive.

        Args:
            allocations: Percentage points per participant

        Returns:
            SplitValidation
        """
        total_percentage = sum_decimals(to_decimal(a.value) for a in allocations)

        if total_percentage <= 0:
            return SplitValidation(ok=False, message="Percentages must sum to > 0")

        return SplitValidation(ok=True)
