"""
Domain service: account balances.

AccountLedger validates amounts and delegates every balance mutation to a
single atomic primitive of the AccountRepository port. It never performs a
read-then-write on a balance.
"""

import logging

from app.domain.vending.entities import DENOMINATIONS
from app.domain.vending.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidDenominationError,
)
from app.domain.vending.ports import AccountRepository

logger = logging.getLogger(__name__)


class AccountLedger:
    """Owns buyer balances: credit, debit and drain.

    Bound to the AccountRepository of the current unit of work.
    """

    def __init__(self, accounts: AccountRepository) -> None:
        self._accounts = accounts

    def credit(self, account_id: int, amount: int) -> int:
        """Add a single coin to the balance.

        Args:
            account_id: Account to credit.
            amount: One of the accepted denominations.

        Returns:
            The new balance.

        Raises:
            InvalidDenominationError: If the amount is not an accepted coin.
            AccountNotFoundError: If the account does not exist.
        """
        if isinstance(amount, bool) or amount not in DENOMINATIONS:
            raise InvalidDenominationError(amount)

        balance = self._accounts.credit(account_id, amount)
        if balance is None:
            raise AccountNotFoundError(account_id)

        logger.debug("Credited account=%d amount=%d", account_id, amount)
        return balance

    def debit(self, account_id: int, amount: int) -> int:
        """Subtract ``amount`` from the balance if it is covered.

        Returns:
            The new balance.

        Raises:
            InvalidAmountError: If the amount is negative.
            AccountNotFoundError: If the account does not exist.
            InsufficientFundsError: If the balance is lower than the amount.
        """
        if amount < 0:
            raise InvalidAmountError(amount, "must not be negative")

        balance = self._accounts.debit_if_sufficient(account_id, amount)
        if balance is not None:
            logger.debug("Debited account=%d amount=%d", account_id, amount)
            return balance

        # The conditional update changed nothing; find out why.
        account = self._accounts.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        raise InsufficientFundsError(required=amount, available=account.balance)

    def drain(self, account_id: int) -> int:
        """Clear the balance in one atomic step.

        Returns:
            The balance before the drain.

        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        drained = self._accounts.drain(account_id)
        if drained is None:
            raise AccountNotFoundError(account_id)

        logger.debug("Drained account=%d amount=%d", account_id, drained)
        return drained
