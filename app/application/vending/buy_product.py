"""
Use case: Buy a quantity of a product with the caller's balance.

Input: BuyCommand (account_id, product_id, quantity)
Output: ReceiptResult
Side effects: Decrements stock and debits the balance, atomically.
Failure cases: InvalidQuantityError, ProductNotFoundError,
    InsufficientStockError, AccountNotFoundError, InsufficientFundsError,
    ConflictError. On any failure neither stock nor balance changes.
"""

import logging

from app.application.vending.dtos import BuyCommand, ReceiptResult
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class BuyProductUseCase:
    """Orchestrates a purchase.

    Delegates to the TransactionCoordinator, which reserves stock and
    debits the balance in one unit of work.
    """

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: BuyCommand) -> ReceiptResult:
        """Run the purchase use case.

        Args:
            command: Buyer identity, product and quantity.

        Returns:
            The purchase receipt.
        """
        logger.info(
            "Buy for account=%d, product=%d, qty=%d",
            command.account_id,
            command.product_id,
            command.quantity,
        )
        receipt = self._coordinator.buy(
            account_id=command.account_id,
            product_id=command.product_id,
            quantity=command.quantity,
        )
        return ReceiptResult(
            product_name=receipt.product_name,
            quantity=receipt.quantity,
            total_price=receipt.total_price,
            change_amount=receipt.change_amount,
        )
