"""
Use case: Rename the caller's own account.

Input: RenameAccountCommand (account_id, username)
Output: AccountResult
Side effects: Updates the stored username (lower-cased).
Failure cases: InvalidUsernameError, UsernameTakenError, AccountNotFoundError.
"""

import logging

from app.application.vending.dtos import AccountResult, RenameAccountCommand
from app.application.vending.mappers import to_account_result
from app.domain.vending.transaction_coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class RenameAccountUseCase:
    """Changes the login name of an existing account."""

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def execute(self, command: RenameAccountCommand) -> AccountResult:
        """Run the rename use case.

        Args:
            command: The caller and the requested username.

        Returns:
            The account under its new name.

        Raises:
            InvalidUsernameError: If the username is blank.
            UsernameTakenError: If another account holds the name.
            AccountNotFoundError: If the caller's account is gone.
        """
        logger.info("Rename account=%d", command.account_id)
        account = self._coordinator.rename_account(command.account_id, command.username)
        return to_account_result(account)
