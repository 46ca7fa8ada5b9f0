"""Split calculation strategies"""

import logging
from typing import Optional, Union

from app.schemas.split import SplitType
from app.services.split_strategies.amount_split import AmountSplitStrategy
from app.services.split_strategies.base import BaseSplitStrategy
from app.services.split_strategies.equal_split import EqualSplitStrategy
from app.services.split_strategies.percentage_split import \
    PercentageSplitStrategy

logger = logging.getLogger(__name__)

_STRATEGIES = {
    SplitType.EQUAL.value: EqualSplitStrategy(),
    SplitType.PERCENT.value: PercentageSplitStrategy(),
    SplitType.AMOUNT.value: AmountSplitStrategy(),
}


def get_split_strategy(split_type: Optional[Union[SplitType, str]]) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split type.

    Strategies are stateless, so the same instances are shared by every call.

    Args:
        split_type: Type of split (equal, percent or amount)

    Returns:
        Instance of appropriate strategy; the equal strategy for a missing
        or unrecognized type
    """
    if isinstance(split_type, SplitType):
        split_type = split_type.value

    strategy = _STRATEGIES.get(split_type)
    if strategy is None:
        if split_type:
            logger.debug("Unknown split type %r, using equal split", split_type)
        return _STRATEGIES[SplitType.EQUAL.value]

    return strategy


__all__ = [
    "BaseSplitStrategy",
    "EqualSplitStrategy",
    "PercentageSplitStrategy",
    "AmountSplitStrategy",
    "get_split_strategy",
]
