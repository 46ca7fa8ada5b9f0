"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from app.schemas.split import SplitAllocation, SplitValidation
from app.utils.decimal_utils import to_decimal


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    @abstractmethod
    def calculate_shares(
        self,
        total_amount: Decimal,
        participant_ids: List[str],
        allocations: List[SplitAllocation],
    ) -> Dict[str, Decimal]:
        """
        Calculate each participant's share of the total.

        Args:
            total_amount: Non-negative expense total
            participant_ids: Cleaned, de-duplicated participant ids
            allocations: Allocations of the split configuration

        Returns:
            Mapping of participant id to share, rounded to 2 decimals
        """
        pass

    def validate(self, allocations: List[SplitAllocation]) -> SplitValidation:
        """
        Check a split configuration before it is persisted.

        Args:
            allocations: Allocations of the split configuration

        Returns:
            SplitValidation, ok unless the strategy says otherwise
        """
        return SplitValidation(ok=True)

    @staticmethod
    def _allocation_map(
        allocations: List[SplitAllocation], minimum: Optional[Decimal] = None
    ) -> Tuple[Dict[str, Decimal], Decimal]:
        """
        Collect allocation values by participant id.

        Allocations without an id are ignored. When an id repeats the last
        value is kept, but every value still counts toward the total.

        Returns:
            Tuple of (values by id, sum of values)
        """
        values: Dict[str, Decimal] = {}
        total = Decimal("0")
        for allocation in allocations:
            if not allocation.user:
                continue
            value = to_decimal(allocation.value)
            if minimum is not None and value < minimum:
                value = minimum
            values[allocation.user] = value
            total += value
        return values, total
