"""
Use case: Deposit one coin into the caller's balance.

Input: DepositCommand (account_id, amount)
Output: BalanceResult
Side effects: Credits the account.
Failure cases: InvalidDenominationError, AccountNotFoundError, ConflictError.
"""

import logging

from app.application.vending.dtos import BalanceResult, DepositCommand
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class DepositUseCase:
    """Credits a single accepted coin to the caller's account."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: DepositCommand) -> BalanceResult:
        """Run the deposit use case.

        Args:
            command: The caller identity and coin value.

        Returns:
            The balance after the deposit.

        Raises:
            InvalidDenominationError: If the amount is not an accepted coin.
            AccountNotFoundError: If the account does not exist.
        """
        logger.info(
            "Deposit for account=%d, amount=%d", command.account_id, command.amount
        )
        balance = self._coordinator.deposit(command.account_id, command.amount)
        return BalanceResult(account_id=command.account_id, balance=balance)
