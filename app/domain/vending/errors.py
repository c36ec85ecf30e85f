"""
Domain-specific errors for the vending bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class VendingDomainError(Exception):
    """Base error for all vending domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class NotFoundError(VendingDomainError):
    """Base error for an entity that does not exist."""


class AccountNotFoundError(NotFoundError):
    """Raised when an account cannot be found."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id


class ProductNotFoundError(NotFoundError):
    """Raised when a product cannot be found."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class InsufficientStockError(VendingDomainError):
    """Raised when the requested quantity exceeds the product's stock."""

    def __init__(self, product_id: int, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InsufficientFundsError(VendingDomainError):
    """Raised when an account lacks funds for a purchase."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


class InvalidDenominationError(VendingDomainError):
    """Raised when a deposit amount is not an accepted coin."""

    def __init__(self, amount: int) -> None:
        super().__init__(f"Invalid denomination: {amount}")
        self.amount = amount


class InvalidQuantityError(VendingDomainError):
    """Raised when a purchase or reservation quantity is below 1."""

    def __init__(self, quantity: int) -> None:
        super().__init__(f"Invalid quantity: {quantity}. Must be at least 1.")
        self.quantity = quantity


class InvalidAmountError(VendingDomainError):
    """Raised when an amount cannot be handled by the ledger or coin system."""

    def __init__(self, amount: int, reason: str) -> None:
        super().__init__(f"Invalid amount {amount}: {reason}")
        self.amount = amount
        self.reason = reason


class InvalidProductError(VendingDomainError):
    """Raised when product fields break a listing invariant."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid product: {reason}")
        self.reason = reason


class UnauthorizedError(VendingDomainError):
    """Raised when the caller does not own the resource it tries to mutate."""

    def __init__(self, caller_id: int) -> None:
        super().__init__(f"Caller {caller_id} does not own this resource")
        self.caller_id = caller_id


class ConflictError(VendingDomainError):
    """Raised when a row lock cannot be acquired within the retry budget."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"Concurrent modification conflict on {resource}")
        self.resource = resource


class InvalidUsernameError(VendingDomainError):
    """Raised when a username is empty after normalization."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Invalid username: {username!r}. Must not be blank.")
        self.username = username


class UsernameTakenError(VendingDomainError):
    """Raised when registering a username that already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Username already exists: {username}")
        self.username = username


class LedgerInvariantError(VendingDomainError):
    """Raised when stored balances break the coin granularity invariant."""

    def __init__(self, account_id: int, residue: int) -> None:
        super().__init__(
            f"Balance of account {account_id} leaves a residue of {residue} "
            "that cannot be paid out in coins"
        )
        self.account_id = account_id
        self.residue = residue
