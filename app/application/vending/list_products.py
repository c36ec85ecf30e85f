"""
Use case: List every product.

Input: None
Output: list[ProductResult] ordered by ID
Side effects: None.
"""

from app.application.vending.dtos import ProductResult
from app.application.vending.mappers import to_product_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator


class ListProductsUseCase:
    """Returns the full catalog."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self) -> list[ProductResult]:
        return [to_product_result(p) for p in self._coordinator.list_products()]
