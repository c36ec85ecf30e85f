"""
Domain entities for the vending bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
All monetary values are integers in the smallest currency unit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Coin values accepted by deposit and returned by reset, largest first.
DENOMINATIONS: tuple[int, ...] = (100, 50, 20, 10, 5)


class Role(Enum):
    """Capability of an account holder.

    Stored for the request layer's role gate. The core never reads it.
    """

    BUYER = "buyer"
    SELLER = "seller"


class PurchaseState(Enum):
    """Lifecycle of a single buy invocation."""

    PENDING = "pending"
    STOCK_RESERVED = "stock_reserved"
    DEBITED = "debited"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Account:
    """A funds holder with a non-negative balance."""

    username: str
    role: Role
    balance: int = 0
    id: Optional[int] = None


@dataclass
class Product:
    """A seller-owned, stocked item with a unit cost."""

    name: str
    unit_cost: int
    stock: int
    seller_id: int
    id: Optional[int] = None


@dataclass(frozen=True)
class ProductFields:
    """Replacement values for a product update."""

    name: str
    unit_cost: int
    stock: int


@dataclass(frozen=True)
class StockReservation:
    """Snapshot of a product taken at the moment its stock was decremented."""

    product_id: int
    name: str
    unit_cost: int
    remaining_stock: int


@dataclass(frozen=True)
class Receipt:
    """Result record of a successful purchase.

    ``change_amount`` is the part of the remaining balance that can be paid
    out in coins right now. It is not deducted from the balance.
    """

    product_name: str
    quantity: int
    total_price: int
    change_amount: int


@dataclass(frozen=True)
class ChangeBreakdown:
    """Coins paid out by a reset, keyed by denomination in descending order."""

    coins: dict[int, int] = field(default_factory=dict)
    new_balance: int = 0

    @property
    def total(self) -> int:
        """Return the value of all coins in the breakdown."""
        return sum(denom * count for denom, count in self.coins.items())
