"""
Tests for the change calculator.

Pure functions; no storage or IO.
"""

import pytest

from app.domain.vending.change_calculator import breakdown, redeemable_change
from app.domain.vending.entities import DENOMINATIONS, ChangeBreakdown
from app.domain.vending.errors import InvalidAmountError


def _fewest_coins(amount: int) -> int:
    """Minimum coin count by exhaustive dynamic programming."""
    best = [0] + [amount + 1] * amount
    for value in range(1, amount + 1):
        for coin in DENOMINATIONS:
            if coin <= value and best[value - coin] + 1 < best[value]:
                best[value] = best[value - coin] + 1
    return best[amount]


class TestBreakdown:
    """Tests for breakdown()."""

    def test_known_amount(self) -> None:
        """135 pays out as one 100, one 20, one 10 and one 5."""
        assert breakdown(135) == {100: 1, 50: 0, 20: 1, 10: 1, 5: 1}

    def test_zero_amount_has_all_denominations(self) -> None:
        assert breakdown(0) == {100: 0, 50: 0, 20: 0, 10: 0, 5: 0}

    def test_keys_are_descending(self) -> None:
        assert list(breakdown(185)) == [100, 50, 20, 10, 5]

    def test_large_amount(self) -> None:
        assert breakdown(1_000_000)[100] == 10_000

    @pytest.mark.parametrize("amount", range(0, 505, 5))
    def test_sum_matches_amount(self, amount: int) -> None:
        """The coins always add back up to the requested amount."""
        assert ChangeBreakdown(coins=breakdown(amount)).total == amount

    @pytest.mark.parametrize("amount", range(0, 505, 5))
    def test_uses_fewest_coins(self, amount: int) -> None:
        """Greedy selection matches the exhaustive minimum."""
        assert sum(breakdown(amount).values()) == _fewest_coins(amount)

    @pytest.mark.parametrize("amount", [-5, -100])
    def test_negative_amount_rejected(self, amount: int) -> None:
        with pytest.raises(InvalidAmountError, match="must not be negative"):
            breakdown(amount)

    @pytest.mark.parametrize("amount", [1, 7, 99, 134])
    def test_amount_not_multiple_of_five_rejected(self, amount: int) -> None:
        with pytest.raises(InvalidAmountError, match="multiple of 5"):
            breakdown(amount)

    @pytest.mark.parametrize("amount", [True, 10.0, "10", None])
    def test_non_integer_rejected(self, amount) -> None:
        with pytest.raises(InvalidAmountError, match="integer"):
            breakdown(amount)


class TestRedeemableChange:
    """Tests for redeemable_change()."""

    @pytest.mark.parametrize(
        ("balance", "expected"),
        [(0, 0), (3, 0), (5, 5), (18, 15), (100, 100), (104, 100)],
    )
    def test_floors_to_smallest_coin(self, balance: int, expected: int) -> None:
        assert redeemable_change(balance) == expected
