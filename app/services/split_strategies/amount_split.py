"""Fixed amount split strategy"""

from decimal import Decimal
from typing import Dict, List

from app.schemas.split import SplitAllocation, SplitValidation
from app.services.split_strategies.base import BaseSplitStrategy
from app.utils.decimal_utils import (AMOUNT_TOLERANCE, ZERO, round_decimal,
                                     sum_decimals, to_money)



class AmountSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting with fixed amounts per participant"""

    def calculate_shares(
        self,
        total_amount: Decimal,
        participant_ids: List[str],
        allocations: List[SplitAllocation],
    ) -> Dict[str, Decimal]:
        """
        Use fixed amounts, absorbing any difference from the total.

        Participants without an allocation share whatever is left of the
        total. When everybody has an allocation and the amounts still miss
        the total, all amounts are scaled proportionally to hit it.

        Args:
            total_amount: Total expense amount
            participant_ids: Participant ids
            allocations: Fixed amounts per participant (negatives count as 0)

        Returns:
            Mapping of participant id to share
        """
        amounts, allocated = self._allocation_map(allocations, minimum=ZERO)

        remainder = total_amount - allocated
        leftovers = [pid for pid in participant_ids if pid not in amounts]

        if abs(remainder) > AMOUNT_TOLERANCE and leftovers:
            each = remainder / len(leftovers)
            for participant_id in leftovers:
                amounts[participant_id] = amounts.get(participant_id, ZERO) + each
            allocated = total_amount

        if abs(allocated - total_amount) > AMOUNT_TOLERANCE:
            factor = ZERO if allocated == 0 else total_amount / allocated
            return {
                pid: round_decimal(amounts.get(pid, ZERO) * factor)
                for pid in participant_ids
            }

        return {pid: round_decimal(amounts.get(pid, ZERO)) for pid in participant_ids}

    def validate(self, allocations: List[SplitAllocation]) -> SplitValidation:
        """
        Fixed amounts must not add up to a negative total.

        Args:
            allocations: Fixed amounts per participant

        Returns:
            SplitValidation
        """
        total_assigned = sum_decimals(to_money(a.value) for a in allocations)

        if total_assigned < 0:
            return SplitValidation(ok=False, message="Invalid amounts")

        return SplitValidation(ok=True)
