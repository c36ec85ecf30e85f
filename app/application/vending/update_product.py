"""
Use case: Replace the fields of a product owned by the caller.

Input: UpdateProductCommand (product_id, caller_id, name, unit_cost, stock)
Output: ProductResult
Side effects: Overwrites the product; the owner stays the caller.
Failure cases: ProductNotFoundError (checked first), UnauthorizedError,
    InvalidProductError.
"""

import logging

from app.application.vending.dtos import ProductResult, UpdateProductCommand
from app.application.vending.mappers import to_product_result
from app.domain.vending.entities import ProductFields
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class UpdateProductUseCase:
    """Updates a listing after verifying the caller owns it."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: UpdateProductCommand) -> ProductResult:
        logger.info(
            "Update product=%d by seller=%d", command.product_id, command.caller_id
        )
        product = self._coordinator.update_product(
            product_id=command.product_id,
            caller_id=command.caller_id,
            fields=ProductFields(
                name=command.name,
                unit_cost=command.unit_cost,
                stock=command.stock,
            ),
        )
        return to_product_result(product)
