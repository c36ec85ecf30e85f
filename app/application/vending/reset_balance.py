"""
Use case: Pay out the caller's whole balance in coins.

Input: ResetCommand (account_id)
Output: ChangeResult
Side effects: Sets the balance to zero.
Failure cases: AccountNotFoundError, LedgerInvariantError, ConflictError.
"""

import logging

from app.application.vending.dtos import ChangeResult, ResetCommand
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class ResetBalanceUseCase:
    """Drains the balance and returns its coin breakdown."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: ResetCommand) -> ChangeResult:
        logger.info("Reset for account=%d", command.account_id)
        change = self._coordinator.reset(command.account_id)
        return ChangeResult(coins=dict(change.coins), new_balance=change.new_balance)
