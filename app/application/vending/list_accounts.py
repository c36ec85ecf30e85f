"""
Use case: List every account.

Input: None
Output: list[AccountResult] ordered by ID
Side effects: None.
"""

from app.application.vending.dtos import AccountResult
from app.application.vending.mappers import to_account_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator


class ListAccountsUseCase:
    """Returns every registered account."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self) -> list[AccountResult]:
        return [to_account_result(a) for a in self._coordinator.list_accounts()]
