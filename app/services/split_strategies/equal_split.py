"""Equal split strategy"""

from decimal import Decimal
from typing import Dict, List

from app.schemas.split import SplitAllocation
from app.services.split_strategies.base import BaseSplitStrategy
from app.utils.decimal_utils import round_decimal


class EqualSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense equally among participants"""

    def calculate_shares(
        self,
        total_amount: Decimal,
        participant_ids: List[str],
        allocations: List[SplitAllocation],
    ) -> Dict[str, Decimal]:
        """
        Calculate equal split for all participants.

        Allocations carry no weight here. Each share is rounded on its own
        and the rounding drift is left in place, so three people splitting
        100.00 each owe 33.33.

        Args:
            total_amount: Total expense amount
            participant_ids: Participant ids
            allocations: Ignored

        Returns:
            Mapping of participant id to equal share
        """
        if not participant_ids:
            return {}

        rounded_base = round_decimal(total_amount / len(participant_ids))

        return {participant_id: rounded_base for participant_id in participant_ids}
