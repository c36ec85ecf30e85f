"""
Use case: List a new product for the calling seller.

Input: CreateProductCommand (caller_id, name, unit_cost, quantity)
Output: ProductResult
Side effects: Persists a product owned by the caller.
Failure cases: InvalidProductError.
"""

import logging

from app.application.vending.dtos import CreateProductCommand, ProductResult
from app.application.vending.mappers import to_product_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class CreateProductUseCase:
    """Creates a listing owned by the caller."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: CreateProductCommand) -> ProductResult:
        """Run the create product use case.

        Args:
            command: Seller identity and the new listing's fields.

        Returns:
            The stored product with its assigned ID.

        Raises:
            InvalidProductError: If cost or quantity is below 1 or the name is empty.
        """
        logger.info("Create product for seller=%d", command.caller_id)
        product = self._coordinator.create_product(
            caller_id=command.caller_id,
            name=command.name,
            unit_cost=command.unit_cost,
            quantity=command.quantity,
        )
        return to_product_result(product)
