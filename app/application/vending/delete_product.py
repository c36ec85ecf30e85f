"""
Use case: Remove a product owned by the caller.

Input: DeleteProductCommand (product_id, caller_id)
Output: None
Side effects: Deletes the product.
Failure cases: ProductNotFoundError (checked first), UnauthorizedError.
"""

import logging

from app.application.vending.dtos import DeleteProductCommand
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class DeleteProductUseCase:
    """Deletes a listing after verifying the caller owns it."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: DeleteProductCommand) -> None:
        logger.info(
            "Delete product=%d by seller=%d", command.product_id, command.caller_id
        )
        self._coordinator.delete_product(command.product_id, command.caller_id)
