"""
Use case: Read one account.

Input: AccountQuery (account_id)
Output: AccountResult
Side effects: None.
Failure cases: AccountNotFoundError.
"""

from app.application.vending.dtos import AccountQuery, AccountResult
from app.application.vending.mappers import to_account_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator


class GetAccountUseCase:
    """Returns an account and its balance."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, query: AccountQuery) -> AccountResult:
        return to_account_result(self._coordinator.get_account(query.account_id))
