"""
Use case: Read one product.

Input: GetProductQuery (product_id)
Output: ProductResult
Side effects: None.
Failure cases: ProductNotFoundError.
"""

from app.application.vending.dtos import GetProductQuery, ProductResult
from app.application.vending.mappers import to_product_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator


class GetProductUseCase:
    """Returns a single listing."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, query: GetProductQuery) -> ProductResult:
        return to_product_result(self._coordinator.get_product(query.product_id))
