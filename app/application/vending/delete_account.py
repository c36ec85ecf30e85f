"""
Use case: Close the caller's account.

Input: AccountQuery (account_id)
Output: None
Side effects: Deletes every product the account sells, then the account,
    in one unit of work.
Failure cases: AccountNotFoundError, ConflictError.
"""

import logging

from app.application.vending.dtos import AccountQuery
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class DeleteAccountUseCase:
    """Deletes an account and cascades to its listings."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, query: AccountQuery) -> None:
        logger.info("Delete account=%d", query.account_id)
        self._coordinator.delete_account(query.account_id)
