"""Unit tests for balance calculations"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from app.core.exceptions import AuthorizationError, NotFoundError
from app.models.expense import Expense
from app.models.expense_participant import ExpenseParticipant, ParticipantStatus
from app.models.group import Group, GroupMember
from app.models.user import User
from app.schemas.balance import (ExpenseSnapshot, GroupMemberRef,
                                 MemberBalance, ParticipantState)
from app.schemas.split import SplitAllocation, SplitSpec
from app.services.balance_service import BalanceService

PAID = ParticipantStatus.PAID
UNPAID = ParticipantStatus.UNPAID


@pytest.fixture
def members():
    return [
        GroupMemberRef(id="alice", name="Alice"),
        GroupMemberRef(id="bob", name="Bob"),
        GroupMemberRef(id="carol", name="Carol"),
    ]


def expense(amount, paid_by, participants, split=None):
    return ExpenseSnapshot(
        amount=amount,
        paid_by=paid_by,
        participants=[ParticipantState(id=pid, status=status) for pid, status in participants],
        split=split,
    )


def amounts(counterparties):
    return {c.user_id: c.amount for c in counterparties}


class TestCalculateMemberBalance:
    """Test the pure balance aggregation"""

    def test_debtor_side(self, members):
        expenses = [expense(100, "alice", [("alice", PAID), ("bob", UNPAID)])]

        balance = BalanceService.calculate_member_balance(members, expenses, "bob")

        assert balance.total_owed == Decimal("50.00")
        assert balance.total_paid == Decimal("0.00")
        assert amounts(balance.owed_to) == {"alice": Decimal("50.00")}
        assert balance.owed_to[0].name == "Alice"
        assert balance.owed_by == []
        assert balance.net_balance == Decimal("-50.00")

    def test_creditor_side(self, members):
        expenses = [expense(100, "alice", [("alice", PAID), ("bob", UNPAID)])]

        balance = BalanceService.calculate_member_balance(members, expenses, "alice")

        assert balance.total_paid == Decimal("100.00")
        assert balance.total_owed == Decimal("0.00")
        assert amounts(balance.owed_by) == {"bob": Decimal("50.00")}
        assert balance.total_is_owed == Decimal("50.00")
        assert balance.net_balance == Decimal("50.00")

    def test_very_large_expense(self, members):
        expenses = [expense(Decimal("1e27"), "alice", [("alice", PAID), ("bob", UNPAID)])]

        bob = BalanceService.calculate_member_balance(members, expenses, "bob")
        alice = BalanceService.calculate_member_balance(members, expenses, "alice")

        assert bob.net_balance == Decimal("-5e26")
        assert alice.total_paid == Decimal("1e27")
        assert alice.net_balance == Decimal("5e26")

    def test_settled_share_is_excluded(self, members):
        expenses = [expense(100, "alice", [("alice", PAID), ("bob", PAID)])]

        bob = BalanceService.calculate_member_balance(members, expenses, "bob")
        alice = BalanceService.calculate_member_balance(members, expenses, "alice")

        assert bob.total_owed == Decimal("0.00")
        assert bob.owed_to == []
        assert alice.owed_by == []
        assert alice.total_paid == Decimal("100.00")
        assert alice.net_balance == Decimal("0.00")

    def test_member_not_participating_is_unaffected(self, members):
        expenses = [expense(100, "alice", [("alice", PAID), ("bob", UNPAID)])]

        balance = BalanceService.calculate_member_balance(members, expenses, "carol")

        assert balance == MemberBalance(
            member_id="carol",
            total_paid=Decimal("0"),
            total_owed=Decimal("0"),
            total_is_owed=Decimal("0"),
            owed_to=[],
            owed_by=[],
            net_balance=Decimal("0"),
        )

    def test_payer_outside_shared_with_gets_no_credit(self, members):
        """Only participants are counted, so a payer who isn't one is skipped"""
        expenses = [expense(90, "alice", [("bob", UNPAID), ("carol", UNPAID)])]

        alice = BalanceService.calculate_member_balance(members, expenses, "alice")
        bob = BalanceService.calculate_member_balance(members, expenses, "bob")

        assert alice.total_paid == Decimal("0.00")
        assert alice.owed_by == []
        assert bob.total_owed == Decimal("45.00")
        assert amounts(bob.owed_to) == {"alice": Decimal("45.00")}

    def test_amounts_accumulate_across_expenses(self, members):
        expenses = [
            expense(90, "alice", [("alice", PAID), ("bob", UNPAID), ("carol", UNPAID)]),
            expense(40, "bob", [("alice", UNPAID), ("bob", PAID)]),
            expense(30, "alice", [("alice", PAID), ("bob", UNPAID)]),
        ]

        alice = BalanceService.calculate_member_balance(members, expenses, "alice")

        assert alice.total_paid == Decimal("120.00")
        assert amounts(alice.owed_by) == {"bob": Decimal("45.00"), "carol": Decimal("30.00")}
        assert amounts(alice.owed_to) == {"bob": Decimal("20.00")}
        assert alice.total_is_owed == Decimal("75.00")
        assert alice.total_owed == Decimal("20.00")
        assert alice.net_balance == Decimal("55.00")

    def test_counterparties_keep_first_seen_order(self, members):
        expenses = [
            expense(20, "alice", [("alice", PAID), ("carol", UNPAID)]),
            expense(20, "alice", [("alice", PAID), ("bob", UNPAID)]),
        ]

        alice = BalanceService.calculate_member_balance(members, expenses, "alice")

        assert [c.user_id for c in alice.owed_by] == ["carol", "bob"]

    def test_percent_split_is_replayed(self, members):
        split = SplitSpec(
            type="percent",
            allocations=[SplitAllocation(user="alice", value=25), SplitAllocation(user="bob", value=75)],
        )
        expenses = [expense(200, "alice", [("alice", PAID), ("bob", UNPAID)], split)]

        bob = BalanceService.calculate_member_balance(members, expenses, "bob")

        assert bob.total_owed == Decimal("150.00")

    def test_amount_split_is_replayed(self, members):
        split = SplitSpec(type="amount", allocations=[SplitAllocation(user="bob", value=10)])
        expenses = [
            expense(100, "carol", [("alice", UNPAID), ("bob", UNPAID), ("carol", PAID)], split)
        ]

        carol = BalanceService.calculate_member_balance(members, expenses, "carol")

        assert amounts(carol.owed_by) == {"alice": Decimal("45.00"), "bob": Decimal("10.00")}
        assert carol.net_balance == Decimal("55.00")

    def test_unknown_counterparty_has_no_name(self, members):
        expenses = [expense(10, "dave", [("dave", PAID), ("bob", UNPAID)])]

        bob = BalanceService.calculate_member_balance(members, expenses, "bob")

        assert bob.owed_to[0].user_id == "dave"
        assert bob.owed_to[0].name is None

    def test_group_balances_net_to_zero(self, members):
        expenses = [
            expense(90, "alice", [("alice", PAID), ("bob", UNPAID), ("carol", UNPAID)]),
            expense(60, "bob", [("bob", PAID), ("carol", UNPAID)]),
        ]

        balances = BalanceService.calculate_group_balances(members, expenses)

        assert [b.member_id for b in balances] == ["alice", "bob", "carol"]
        assert sum(b.net_balance for b in balances) == Decimal("0.00")


def _user(user_id, name):
    return User(id=user_id, email=f"{name.lower()}@example.com", name=name, hashed_password="x")


class TestGetMemberBalance:
    """Test cached balance lookup"""

    @pytest.fixture
    def group_id(self):
        return uuid4()

    @pytest.fixture
    def stored(self, group_id, test_user_id, other_user_id):
        alice = _user(test_user_id, "Alice")
        bob = _user(other_user_id, "Bob")
        memberships = [
            GroupMember(group_id=group_id, user_id=test_user_id, user=alice),
            GroupMember(group_id=group_id, user_id=other_user_id, user=bob),
        ]
        expense_row = Expense(
            id=uuid4(),
            group_id=group_id,
            title="Dinner",
            amount=Decimal("80.00"),
            paid_by_user_id=test_user_id,
            shared_with=[str(test_user_id), str(other_user_id)],
            split=None,
            expense_date=datetime(2024, 1, 1),
            participants=[
                ExpenseParticipant(user_id=test_user_id, position=0, status=ParticipantStatus.PAID),
                ExpenseParticipant(user_id=other_user_id, position=1, status=ParticipantStatus.UNPAID),
            ],
        )
        return memberships, [expense_row]

    @pytest.mark.asyncio
    @patch("app.services.balance_service.ExpenseRepository.get_group_expenses", new_callable=AsyncMock)
    @patch("app.services.balance_service.GroupRepository")
    async def test_computes_and_caches(
        self, mock_group_repo, mock_get_expenses, mock_cache, mock_db, stored, group_id,
        test_user_id, other_user_id
    ):
        memberships, expenses = stored
        mock_group_repo.get_by_id = AsyncMock(return_value=Group(id=group_id, name="Trip"))
        mock_group_repo.get_membership = AsyncMock(return_value=memberships[0])
        mock_group_repo.get_members = AsyncMock(return_value=memberships)
        mock_get_expenses.return_value = expenses

        balance = await BalanceService.get_member_balance(group_id, other_user_id, test_user_id, mock_db)

        assert balance.total_owed == Decimal("40.00")
        assert balance.owed_to[0].user_id == str(test_user_id)
        assert balance.owed_to[0].name == "Alice"
        mock_cache.set.assert_awaited_once()
        key = mock_cache.set.call_args.args[0]
        assert key == f"balance:{group_id}:{other_user_id}"

    @pytest.mark.asyncio
    @patch("app.services.balance_service.GroupRepository")
    async def test_returns_cached_balance(
        self, mock_group_repo, mock_cache, mock_db, group_id, test_user_id
    ):
        cached = MemberBalance(
            member_id=str(test_user_id),
            total_paid=Decimal("10.00"),
            total_owed=Decimal("0.00"),
            total_is_owed=Decimal("5.00"),
            owed_to=[],
            owed_by=[],
            net_balance=Decimal("5.00"),
        )
        mock_group_repo.get_by_id = AsyncMock(return_value=Group(id=group_id, name="Trip"))
        mock_group_repo.get_membership = AsyncMock(return_value=GroupMember())
        mock_cache.get = AsyncMock(return_value=cached.model_dump_json())

        balance = await BalanceService.get_member_balance(group_id, test_user_id, test_user_id, mock_db)

        assert balance == cached
        mock_group_repo.get_members.assert_not_called()

    @pytest.mark.asyncio
    @patch("app.services.balance_service.GroupRepository")
    async def test_missing_group(self, mock_group_repo, mock_cache, mock_db, test_user_id):
        mock_group_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await BalanceService.get_member_balance(uuid4(), test_user_id, test_user_id, mock_db)

    @pytest.mark.asyncio
    @patch("app.services.balance_service.GroupRepository")
    async def test_requester_must_be_member(
        self, mock_group_repo, mock_cache, mock_db, group_id, test_user_id, other_user_id
    ):
        mock_group_repo.get_by_id = AsyncMock(return_value=Group(id=group_id, name="Trip"))
        mock_group_repo.get_membership = AsyncMock(return_value=None)

        with pytest.raises(AuthorizationError):
            await BalanceService.get_member_balance(group_id, other_user_id, test_user_id, mock_db)

    @pytest.mark.asyncio
    @patch("app.services.balance_service.GroupRepository")
    async def test_target_must_be_member(
        self, mock_group_repo, mock_cache, mock_db, group_id, test_user_id, other_user_id
    ):
        async def membership(db, gid, user_id):
            return GroupMember() if user_id == test_user_id else None

        mock_group_repo.get_by_id = AsyncMock(return_value=Group(id=group_id, name="Trip"))
        mock_group_repo.get_membership = AsyncMock(side_effect=membership)

        with pytest.raises(NotFoundError):
            await BalanceService.get_member_balance(group_id, other_user_id, test_user_id, mock_db)


class TestInvalidateGroupBalances:
    """Test cache invalidation"""

    @pytest.mark.asyncio
    async def test_deletes_member_keys(self, mock_cache, test_user_id, other_user_id):
        group_id = uuid4()

        await BalanceService.invalidate_group_balances(group_id, [test_user_id, other_user_id])

        mock_cache.delete_multiple.assert_awaited_once_with([
            f"balance:{group_id}:{test_user_id}",
            f"balance:{group_id}:{other_user_id}",
        ])

    @pytest.mark.asyncio
    async def test_nothing_to_delete(self, mock_cache):
        assert await BalanceService.invalidate_group_balances(uuid4(), []) is True
        mock_cache.delete_multiple.assert_not_called()
