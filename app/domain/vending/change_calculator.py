"""
Domain service: exact-change decomposition in the fixed coin system.

Pure functions. No IO, no state.
"""

from app.domain.vending.entities import DENOMINATIONS
from app.domain.vending.errors import InvalidAmountError


def breakdown(
    amount: int, denominations: tuple[int, ...] = DENOMINATIONS
) -> dict[int, int]:
    """Decompose ``amount`` into coin counts by greedy descending selection.

    The coin set is canonical, so the greedy result uses the fewest coins.
    Every denomination is present in the result, zero counts included.

    Args:
        amount: Non-negative multiple of the smallest denomination.
        denominations: Coin values in descending order.

    Returns:
        Mapping denomination -> count, largest denomination first.

    Raises:
        InvalidAmountError: If the amount is negative or not expressible.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, "must be an integer")
    if amount < 0:
        raise InvalidAmountError(amount, "must not be negative")
    smallest = min(denominations)
    if amount % smallest:
        raise InvalidAmountError(amount, f"must be a multiple of {smallest}")

    coins: dict[int, int] = {}
    remaining = amount
    for denom in sorted(denominations, reverse=True):
        coins[denom], remaining = divmod(remaining, denom)
    return coins


def redeemable_change(
    balance: int, denominations: tuple[int, ...] = DENOMINATIONS
) -> int:
    """Return the part of ``balance`` that can be paid out in coins."""
    smallest = min(denominations)
    return (balance // smallest) * smallest
