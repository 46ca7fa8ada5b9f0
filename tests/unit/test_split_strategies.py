"""Test split calculations"""

from decimal import Decimal

import pytest

from app.schemas.split import SplitAllocation, SplitType
from app.services.split_strategies import (
    AmountSplitStrategy,
    EqualSplitStrategy,
    PercentageSplitStrategy,
    get_split_strategy,
)


def allocations(**values):
    return [SplitAllocation(user=user, value=value) for user, value in values.items()]


class TestGetSplitStrategy:
    """Test get_split_strategy factory function"""

    def test_get_equal_strategy(self):
        assert isinstance(get_split_strategy(SplitType.EQUAL), EqualSplitStrategy)

    def test_get_percentage_strategy(self):
        assert isinstance(get_split_strategy(SplitType.PERCENT), PercentageSplitStrategy)

    def test_get_amount_strategy_from_string(self):
        assert isinstance(get_split_strategy("amount"), AmountSplitStrategy)

    def test_missing_type_is_equal(self):
        assert isinstance(get_split_strategy(None), EqualSplitStrategy)

    def test_unknown_type_is_equal(self):
        assert isinstance(get_split_strategy("shares"), EqualSplitStrategy)


class TestEqualSplitStrategy:
    """Test equal split strategy"""

    @pytest.fixture
    def strategy(self):
        return EqualSplitStrategy()

    def test_equal_split_two_participants(self, strategy):
        shares = strategy.calculate_shares(Decimal("100.00"), ["a", "b"], [])
        assert shares == {"a": Decimal("50.00"), "b": Decimal("50.00")}

    def test_equal_split_keeps_rounding_drift(self, strategy):
        """Three ways of 100 each owe 33.33; the missing cent is not reassigned"""
        shares = strategy.calculate_shares(Decimal("100.00"), ["a", "b", "c"], [])
        assert set(shares.values()) == {Decimal("33.33")}
        assert sum(shares.values()) == Decimal("99.99")

    def test_equal_split_rounds_half_up(self, strategy):
        shares = strategy.calculate_shares(Decimal("0.05"), ["a", "b"], [])
        assert shares == {"a": Decimal("0.03"), "b": Decimal("0.03")}

    def test_equal_split_ignores_allocations(self, strategy):
        shares = strategy.calculate_shares(Decimal("90"), ["a", "b", "c"], allocations(a=80))
        assert shares == {"a": Decimal("30.00"), "b": Decimal("30.00"), "c": Decimal("30.00")}

    def test_equal_split_no_participants(self, strategy):
        assert strategy.calculate_shares(Decimal("100"), [], []) == {}

    @pytest.mark.parametrize("total,n", [("100", 3), ("10.01", 7), ("0.01", 4), ("999.99", 6)])
    def test_equal_split_drift_is_bounded(self, strategy, total, n):
        ids = [f"p{i}" for i in range(n)]
        shares = strategy.calculate_shares(Decimal(total), ids, [])
        assert abs(sum(shares.values()) - Decimal(total)) <= Decimal("0.01") * n


class TestPercentageSplitStrategy:
    """Test percentage split strategy"""

    @pytest.fixture
    def strategy(self):
        return PercentageSplitStrategy()

    def test_percentage_split_basic(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("200"), ["a", "b"], allocations(a=60, b=40)
        )
        assert shares == {"a": Decimal("120.00"), "b": Decimal("80.00")}

    def test_percentages_are_normalized(self, strategy):
        """75% and 75% behave like 50/50"""
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=75, b=75)
        )
        assert shares == {"a": Decimal("50.00"), "b": Decimal("50.00")}

    def test_zero_percent_sum_gives_zero_shares(self, strategy):
        shares = strategy.calculate_shares(Decimal("100"), ["a", "b"], [])
        assert shares == {"a": Decimal("0.00"), "b": Decimal("0.00")}

    def test_participant_without_allocation_gets_zero(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=100)
        )
        assert shares == {"a": Decimal("100.00"), "b": Decimal("0.00")}

    def test_allocation_for_non_participant_still_counts(self, strategy):
        """An outsider's percentage dilutes the participants' shares"""
        shares = strategy.calculate_shares(
            Decimal("100"), ["a"], allocations(a=50, x=50)
        )
        assert shares == {"a": Decimal("50.00")}

    def test_duplicate_allocation_last_value_wins(self, strategy):
        allocs = [
            SplitAllocation(user="a", value=10),
            SplitAllocation(user="a", value=30),
            SplitAllocation(user="b", value=60),
        ]
        shares = strategy.calculate_shares(Decimal("100"), ["a", "b"], allocs)
        # sum is 100 (10 + 30 + 60); a keeps 30
        assert shares == {"a": Decimal("30.00"), "b": Decimal("60.00")}

    def test_allocation_without_user_is_ignored(self, strategy):
        allocs = [SplitAllocation(user=None, value=50), SplitAllocation(user="a", value=50)]
        shares = strategy.calculate_shares(Decimal("10"), ["a"], allocs)
        assert shares == {"a": Decimal("10.00")}

    def test_validate_positive_sum(self, strategy):
        assert strategy.validate(allocations(a=1)).ok is True

    @pytest.mark.parametrize("values", [{}, {"a": 0}, {"a": -5, "b": 5}, {"a": -10}])
    def test_validate_rejects_non_positive_sum(self, strategy, values):
        result = strategy.validate(allocations(**values))
        assert result.ok is False
        assert result.message == "Percentages must sum to > 0"


class TestAmountSplitStrategy:
    """Test fixed amount split strategy"""

    @pytest.fixture
    def strategy(self):
        return AmountSplitStrategy()

    def test_exact_amounts(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=70, b=30)
        )
        assert shares == {"a": Decimal("70.00"), "b": Decimal("30.00")}

    def test_remainder_goes_to_unallocated_participants(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b", "c"], allocations(a=40)
        )
        assert shares == {"a": Decimal("40.00"), "b": Decimal("30.00"), "c": Decimal("30.00")}

    def test_amounts_are_scaled_when_everyone_is_allocated(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=30, b=20)
        )
        assert shares == {"a": Decimal("60.00"), "b": Decimal("40.00")}

    def test_over_allocation_is_scaled_down(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=150, b=50)
        )
        assert shares == {"a": Decimal("75.00"), "b": Decimal("25.00")}

    def test_negative_remainder_is_taken_from_leftovers(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=120)
        )
        assert shares == {"a": Decimal("120.00"), "b": Decimal("-20.00")}

    def test_negative_amounts_count_as_zero(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=-50)
        )
        assert shares == {"a": Decimal("0.00"), "b": Decimal("100.00")}

    def test_all_zero_amounts_give_zero_shares(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100"), ["a", "b"], allocations(a=0, b=0)
        )
        assert shares == {"a": Decimal("0.00"), "b": Decimal("0.00")}

    def test_tiny_difference_is_not_redistributed(self, strategy):
        shares = strategy.calculate_shares(
            Decimal("100.00"), ["a", "b", "c"], allocations(a="33.33", b="33.33", c="33.335")
        )
        assert shares == {"a": Decimal("33.33"), "b": Decimal("33.33"), "c": Decimal("33.34")}

    @pytest.mark.parametrize(
        "total,values",
        [
            ("100", {"a": 10}),
            ("57.31", {"a": "12.5", "b": "7.25"}),
            ("80", {"a": 20, "b": 20, "c": 20}),
            ("42", {"a": 50, "b": 50, "c": 50, "d": 50}),
        ],
    )
    def test_shares_sum_to_total(self, strategy, total, values):
        ids = ["a", "b", "c", "d"]
        shares = strategy.calculate_shares(Decimal(total), ids, allocations(**values))
        assert abs(sum(shares.values()) - Decimal(total)) <= Decimal("0.01") * len(ids)

    def test_validate_accepts_non_negative_amounts(self, strategy):
        assert strategy.validate(allocations(a=0, b=10)).ok is True
