"""
Port interfaces (ABCs) for the vending bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.

Repositories are only usable through a UnitOfWork. Every mutating
primitive is a single atomic conditional update on one row, and the row
stays locked until the unit of work commits or rolls back.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.vending.entities import Account, Product, StockReservation


class AccountRepository(ABC):
    """Port for persisting accounts and mutating balances."""

    @abstractmethod
    def get_by_id(self, account_id: int) -> Optional[Account]:
        """Return an account by its ID, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[Account]:
        """Return an account by its username, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def add(self, account: Account) -> Account:
        """Persist a new account and return it with its assigned ID."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Account]:
        """Return every account ordered by ID."""
        raise NotImplementedError

    @abstractmethod
    def rename(self, account_id: int, username: str) -> Optional[Account]:
        """Set a new username.

        Returns:
            The updated account, or None if it does not exist.

        Raises:
            UsernameTakenError: If another account already holds the name.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, account_id: int) -> bool:
        """Delete an account. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def credit(self, account_id: int, amount: int) -> Optional[int]:
        """Atomically add to the balance.

        Returns:
            The new balance, or None if the account does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def debit_if_sufficient(self, account_id: int, amount: int) -> Optional[int]:
        """Atomically subtract ``amount`` if ``balance >= amount``.

        Returns:
            The new balance, or None if the account does not exist or
            the condition did not hold. Nothing is changed in that case.
        """
        raise NotImplementedError

    @abstractmethod
    def drain(self, account_id: int) -> Optional[int]:
        """Atomically read the balance and set it to zero.

        Returns:
            The balance before the drain, or None if the account does not exist.
        """
        raise NotImplementedError


class ProductRepository(ABC):
    """Port for persisting products and mutating stock."""

    @abstractmethod
    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Return a product by its ID, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return all products ordered by ID."""
        raise NotImplementedError

    @abstractmethod
    def add(self, product: Product) -> Product:
        """Persist a new product and return it with its assigned ID."""
        raise NotImplementedError

    @abstractmethod
    def replace(self, product: Product) -> Optional[Product]:
        """Overwrite every field of an existing product.

        Returns:
            The stored product, or None if it does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, product_id: int) -> bool:
        """Delete a product. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def delete_by_seller(self, seller_id: int) -> int:
        """Delete every product owned by a seller. Returns the count removed."""
        raise NotImplementedError

    @abstractmethod
    def reserve_if_available(
        self, product_id: int, quantity: int
    ) -> Optional[StockReservation]:
        """Atomically decrement stock by ``quantity`` if ``stock >= quantity``.

        Returns:
            A snapshot of cost and name taken in the same atomic step, or None
            if the product does not exist or the condition did not hold.
        """
        raise NotImplementedError


class UnitOfWork(ABC):
    """Port for an atomic, all-or-nothing scope over accounts and products.

    Used as a context manager. Leaving the block without calling commit()
    rolls back every change made through ``accounts`` and ``products``.
    Adapters raise ConflictError when a row lock cannot be acquired.
    """

    accounts: AccountRepository
    products: ProductRepository

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change of this unit of work durable and release locks."""
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Undo every uncommitted change and release locks. Idempotent."""
        raise NotImplementedError
