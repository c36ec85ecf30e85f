"""
Data Transfer Objects for the vending application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior. Monetary values are
integers in the smallest currency unit.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DepositCommand:
    """Input DTO for depositing one coin.

    Attributes:
        account_id: Caller identity, supplied by the request layer.
        amount: Coin value (5, 10, 20, 50 or 100).
    """

    account_id: int
    amount: int


@dataclass(frozen=True)
class BuyCommand:
    """Input DTO for purchasing a product.

    Attributes:
        account_id: Buyer identity, supplied by the request layer.
        product_id: Product to purchase.
        quantity: Number of units (at least 1).
    """

    account_id: int
    product_id: int
    quantity: int


@dataclass(frozen=True)
class ResetCommand:
    """Input DTO for paying out the whole balance."""

    account_id: int


@dataclass(frozen=True)
class CreateProductCommand:
    """Input DTO for listing a new product.

    Attributes:
        caller_id: Seller identity; becomes the product's owner.
        name: Product name.
        unit_cost: Price of one unit.
        quantity: Initial stock.
    """

    caller_id: int
    name: str
    unit_cost: int
    quantity: int


@dataclass(frozen=True)
class UpdateProductCommand:
    """Input DTO for replacing a product's fields."""

    product_id: int
    caller_id: int
    name: str
    unit_cost: int
    stock: int


@dataclass(frozen=True)
class DeleteProductCommand:
    """Input DTO for removing a product."""

    product_id: int
    caller_id: int


@dataclass(frozen=True)
class GetProductQuery:
    """Input DTO for reading one product."""

    product_id: int


@dataclass(frozen=True)
class RegisterAccountCommand:
    """Input DTO for opening an account.

    Attributes:
        username: Login name; stored lower-cased.
        role: "buyer" or "seller".
    """

    username: str
    role: str


@dataclass(frozen=True)
class AccountQuery:
    """Input DTO addressing one account by ID."""

    account_id: int


@dataclass(frozen=True)
class RenameAccountCommand:
    """Input DTO for renaming the caller's own account.

    Attributes:
        account_id: The caller; only their own account can be renamed.
        username: New login name; stored lower-cased.
    """

    account_id: int
    username: str


@dataclass(frozen=True)
class BalanceResult:
    """Output DTO for a balance after a deposit."""

    account_id: int
    balance: int


@dataclass(frozen=True)
class ReceiptResult:
    """Output DTO for a completed purchase.

    Attributes:
        product_name: Name at the time of purchase.
        quantity: Units bought.
        total_price: Amount debited.
        change_amount: Part of the remaining balance payable in coins.
            Informational; not deducted from the balance.
    """

    product_name: str
    quantity: int
    total_price: int
    change_amount: int


@dataclass(frozen=True)
class ChangeResult:
    """Output DTO for a reset: coins per denomination, largest first."""

    coins: dict[int, int] = field(default_factory=dict)
    new_balance: int = 0


@dataclass(frozen=True)
class ProductResult:
    """Output DTO for a product listing."""

    id: int
    name: str
    unit_cost: int
    stock: int
    seller_id: int


@dataclass(frozen=True)
class AccountResult:
    """Output DTO for an account."""

    id: int
    username: str
    role: str
    balance: int
