"""
Domain service: atomic vending transactions.

TransactionCoordinator runs every operation inside a single UnitOfWork so
that stock and balance change together or not at all. Lock contention
(ConflictError) is retried within a bounded budget; every other error
rolls back and propagates unchanged.

Buy lifecycle:
    PENDING -> STOCK_RESERVED -> DEBITED -> COMMITTED
    any failure -> ROLLED_BACK (prior steps undone by the unit of work)
"""

import logging
import time
from typing import Callable, TypeVar

from app.domain.vending.change_calculator import breakdown, redeemable_change
from app.domain.vending.entities import (
    DENOMINATIONS,
    Account,
    ChangeBreakdown,
    Product,
    ProductFields,
    PurchaseState,
    Receipt,
    Role,
)
from app.domain.vending.errors import (
    AccountNotFoundError,
    ConflictError,
    InvalidQuantityError,
    InvalidUsernameError,
    LedgerInvariantError,
    UsernameTakenError,
    VendingDomainError,
)
from app.domain.vending.inventory import Inventory
from app.domain.vending.ledger import AccountLedger
from app.domain.vending.ports import UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3


class TransactionCoordinator:
    """Orchestrates deposit, buy, reset and listing changes atomically.

    Args:
        uow_factory: Returns a fresh UnitOfWork for each attempt.
        max_attempts: Attempts per operation when a lock conflict occurs.
        backoff_seconds: Base delay between attempts, multiplied by the
            attempt number.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = 0.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    # ------------------------------------------------------------------
    # Ledger operations
    # ------------------------------------------------------------------

    def deposit(self, account_id: int, amount: int) -> int:
        """Credit one coin to an account. Returns the new balance."""
        return self._run(
            "deposit",
            lambda uow: AccountLedger(uow.accounts).credit(account_id, amount),
        )

    def buy(self, account_id: int, product_id: int, quantity: int) -> Receipt:
        """Purchase ``quantity`` units of a product with the account's balance.

        Stock is reserved before the balance is debited. If the debit fails,
        the reservation is rolled back with the rest of the unit of work.

        Raises:
            InvalidQuantityError: If quantity is below 1.
            ProductNotFoundError: If the product does not exist.
            InsufficientStockError: If quantity exceeds the stock.
            AccountNotFoundError: If the account does not exist.
            InsufficientFundsError: If the balance does not cover the total.
            ConflictError: If row locks stay contended past the retry budget.
        """
        if isinstance(quantity, bool) or quantity < 1:
            raise InvalidQuantityError(quantity)

        def work(uow: UnitOfWork) -> Receipt:
            state = PurchaseState.PENDING
            try:
                reservation = Inventory(uow.products).reserve(product_id, quantity)
                state = self._advance(state, PurchaseState.STOCK_RESERVED, account_id, product_id)

                total = reservation.unit_cost * quantity
                remainder = AccountLedger(uow.accounts).debit(account_id, total)
                state = self._advance(state, PurchaseState.DEBITED, account_id, product_id)
            except VendingDomainError as exc:
                logger.info(
                    "Purchase rolled back at %s: account=%d product=%d reason=%s",
                    state.value,
                    account_id,
                    product_id,
                    type(exc).__name__,
                )
                raise

            return Receipt(
                product_name=reservation.name,
                quantity=quantity,
                total_price=total,
                change_amount=redeemable_change(remainder),
            )

        receipt = self._run("buy", work)
        logger.info(
            "Purchase %s: account=%d product=%d qty=%d total=%d",
            PurchaseState.COMMITTED.value,
            account_id,
            product_id,
            quantity,
            receipt.total_price,
        )
        return receipt

    def reset(self, account_id: int) -> ChangeBreakdown:
        """Drain the balance and pay it out in coins.

        Raises:
            AccountNotFoundError: If the account does not exist.
            LedgerInvariantError: If the balance is not expressible in coins.
                The drain is rolled back in that case.
        """

        def work(uow: UnitOfWork) -> ChangeBreakdown:
            drained = AccountLedger(uow.accounts).drain(account_id)
            residue = drained % min(DENOMINATIONS)
            if residue:
                logger.error(
                    "Balance of account=%d is not payable in coins: residue=%d",
                    account_id,
                    residue,
                )
                raise LedgerInvariantError(account_id, residue)
            return ChangeBreakdown(coins=breakdown(drained), new_balance=0)

        return self._run("reset", work)

    # ------------------------------------------------------------------
    # Listing operations
    # ------------------------------------------------------------------

    def create_product(
        self, caller_id: int, name: str, unit_cost: int, quantity: int
    ) -> Product:
        """List a new product owned by the caller."""
        return self._run(
            "create_product",
            lambda uow: Inventory(uow.products).create(caller_id, name, unit_cost, quantity),
        )

    def update_product(
        self, product_id: int, caller_id: int, fields: ProductFields
    ) -> Product:
        """Replace a product's fields if the caller owns it."""
        return self._run(
            "update_product",
            lambda uow: Inventory(uow.products).update(product_id, caller_id, fields),
        )

    def delete_product(self, product_id: int, caller_id: int) -> None:
        """Delete a product if the caller owns it."""
        self._run(
            "delete_product",
            lambda uow: Inventory(uow.products).remove(product_id, caller_id),
        )

    def get_product(self, product_id: int) -> Product:
        return self._run("get_product", lambda uow: Inventory(uow.products).get(product_id))

    def list_products(self) -> list[Product]:
        return self._run("list_products", lambda uow: Inventory(uow.products).list_all())

    # ------------------------------------------------------------------
    # Account lifecycle
    # ------------------------------------------------------------------

    def register_account(self, username: str, role: Role) -> Account:
        """Open an account with a zero balance.

        Raises:
            InvalidUsernameError: If the username is blank.
            UsernameTakenError: If the lower-cased username is in use.
        """
        normalized = self._normalize_username(username)

        def work(uow: UnitOfWork) -> Account:
            if uow.accounts.get_by_username(normalized) is not None:
                raise UsernameTakenError(normalized)
            return uow.accounts.add(Account(username=normalized, role=role, balance=0))

        account = self._run("register_account", work)
        logger.info("Registered account=%d role=%s", account.id, role.value)
        return account

    def get_account(self, account_id: int) -> Account:
        def work(uow: UnitOfWork) -> Account:
            account = uow.accounts.get_by_id(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            return account

        return self._run("get_account", work)

    def list_accounts(self) -> list[Account]:
        return self._run("list_accounts", lambda uow: uow.accounts.list_all())

    def rename_account(self, account_id: int, username: str) -> Account:
        """Give an account a new lower-cased username.

        Keeping the current name is allowed.

        Raises:
            InvalidUsernameError: If the username is blank.
            UsernameTakenError: If another account holds the name.
            AccountNotFoundError: If the account does not exist.
        """
        normalized = self._normalize_username(username)

        def work(uow: UnitOfWork) -> Account:
            holder = uow.accounts.get_by_username(normalized)
            if holder is not None and holder.id != account_id:
                raise UsernameTakenError(normalized)
            account = uow.accounts.rename(account_id, normalized)
            if account is None:
                raise AccountNotFoundError(account_id)
            return account

        account = self._run("rename_account", work)
        logger.info("Renamed account=%d", account.id)
        return account

    def delete_account(self, account_id: int) -> None:
        """Delete an account together with every product it sells."""

        def work(uow: UnitOfWork) -> None:
            if uow.accounts.get_by_id(account_id) is None:
                raise AccountNotFoundError(account_id)
            Inventory(uow.products).remove_all_for_seller(account_id)
            uow.accounts.delete(account_id)

        self._run("delete_account", work)
        logger.info("Deleted account=%d", account_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_username(username: str) -> str:
        normalized = username.strip().lower()
        if not normalized:
            raise InvalidUsernameError(username)
        return normalized

    def _run(self, operation: str, work: Callable[[UnitOfWork], T]) -> T:
        """Execute ``work`` in a fresh unit of work, retrying lock conflicts.

        The last ConflictError propagates once the retry budget is spent.
        """
        attempt = 1
        while True:
            try:
                with self._uow_factory() as uow:
                    result = work(uow)
                    uow.commit()
                    return result
            except ConflictError as exc:
                logger.warning(
                    "%s hit a lock conflict on %s (attempt %d/%d)",
                    operation,
                    exc.resource,
                    attempt,
                    self._max_attempts,
                )
                if attempt >= self._max_attempts:
                    raise
            if self._backoff_seconds > 0:
                time.sleep(self._backoff_seconds * attempt)
            attempt += 1

    @staticmethod
    def _advance(
        current: PurchaseState,
        target: PurchaseState,
        account_id: int,
        product_id: int,
    ) -> PurchaseState:
        logger.debug(
            "Purchase account=%d product=%d: %s -> %s",
            account_id,
            product_id,
            current.value,
            target.value,
        )
        return target
