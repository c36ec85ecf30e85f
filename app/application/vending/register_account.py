"""
Use case: Open a new account.

Input: RegisterAccountCommand (username, role)
Output: AccountResult
Side effects: Persists an account with a zero balance.
Failure cases: InvalidUsernameError, UsernameTakenError.
"""

import logging

from app.application.vending.dtos import AccountResult, RegisterAccountCommand
from app.application.vending.mappers import to_account_result
from app.domain.vending.entities import Role
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class RegisterAccountUseCase:
    """Registers a buyer or seller account."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: RegisterAccountCommand) -> AccountResult:
        """Run the registration use case.

        Args:
            command: Username and role of the new account.

        Returns:
            The new account with its assigned ID and a zero balance.

        Raises:
            InvalidUsernameError: If the username is blank.
            UsernameTakenError: If the lower-cased username already exists.
            ValueError: If the role is unknown.
        """
        role = Role(command.role)
        logger.info("Register account with role=%s", role.value)
        account = self._coordinator.register_account(command.username, role)
        return to_account_result(account)
