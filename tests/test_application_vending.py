"""
Tests for the vending application layer (use cases).

Orchestration is checked against a mocked coordinator; end-to-end
results against a coordinator over the in-memory store.
"""

from unittest.mock import MagicMock

import pytest

from app.application.vending.buy_product import BuyProductUseCase
from app.application.vending.create_product import CreateProductUseCase
from app.application.vending.delete_account import DeleteAccountUseCase
from app.application.vending.delete_product import DeleteProductUseCase
from app.application.vending.deposit import DepositUseCase
from app.application.vending.dtos import (
    AccountQuery,
    AccountResult,
    BalanceResult,
    BuyCommand,
    ChangeResult,
    CreateProductCommand,
    DeleteProductCommand,
    DepositCommand,
    GetProductQuery,
    ProductResult,
    ReceiptResult,
    RegisterAccountCommand,
    RenameAccountCommand,
    ResetCommand,
    UpdateProductCommand,
)
from app.application.vending.get_account import GetAccountUseCase
from app.application.vending.get_product import GetProductUseCase
from app.application.vending.list_accounts import ListAccountsUseCase
from app.application.vending.list_products import ListProductsUseCase
from app.application.vending.register_account import RegisterAccountUseCase
from app.application.vending.rename_account import RenameAccountUseCase
from app.application.vending.reset_balance import ResetBalanceUseCase
from app.application.vending.update_product import UpdateProductUseCase
from app.domain.vending.entities import (
    Account,
    ChangeBreakdown,
    Product,
    ProductFields,
    Receipt,
    Role,
)
from app.domain.vending.errors import (
    InsufficientFundsError,
    InvalidUsernameError,
    UnauthorizedError,
    UsernameTakenError,
)
from app.domain.vending.transaction_coordinator import TransactionCoordinator
from app.infrastructure.vending.memory_store import InMemoryStore, in_memory_uow_factory


@pytest.fixture
def coordinator() -> TransactionCoordinator:
    return TransactionCoordinator(in_memory_uow_factory(InMemoryStore()))


@pytest.fixture
def seller(coordinator: TransactionCoordinator) -> AccountResult:
    return RegisterAccountUseCase(coordinator).execute(
        RegisterAccountCommand(username="Acme", role="seller")
    )


@pytest.fixture
def buyer(coordinator: TransactionCoordinator) -> AccountResult:
    return RegisterAccountUseCase(coordinator).execute(
        RegisterAccountCommand(username="alice", role="buyer")
    )


class TestOrchestration:
    """Use cases forward their command fields to the coordinator."""

    def test_deposit_forwards_amount(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.deposit.return_value = 25

        result = DepositUseCase(mock).execute(DepositCommand(account_id=3, amount=5))

        mock.deposit.assert_called_once_with(3, 5)
        assert result == BalanceResult(account_id=3, balance=25)

    def test_buy_maps_receipt(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.buy.return_value = Receipt(
            product_name="Cola", quantity=2, total_price=24, change_amount=5
        )

        result = BuyProductUseCase(mock).execute(
            BuyCommand(account_id=1, product_id=9, quantity=2)
        )

        mock.buy.assert_called_once_with(account_id=1, product_id=9, quantity=2)
        assert result == ReceiptResult(
            product_name="Cola", quantity=2, total_price=24, change_amount=5
        )

    def test_buy_propagates_domain_errors(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.buy.side_effect = InsufficientFundsError(required=24, available=3)

        with pytest.raises(InsufficientFundsError):
            BuyProductUseCase(mock).execute(
                BuyCommand(account_id=1, product_id=9, quantity=2)
            )

    def test_reset_copies_coins(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.reset.return_value = ChangeBreakdown(coins={100: 0, 50: 1, 20: 0, 10: 0, 5: 1})

        result = ResetBalanceUseCase(mock).execute(ResetCommand(account_id=4))

        mock.reset.assert_called_once_with(4)
        assert result == ChangeResult(coins={100: 0, 50: 1, 20: 0, 10: 0, 5: 1})

    def test_update_builds_fields(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.update_product.return_value = Product(
            id=2, name="Water", unit_cost=7, stock=0, seller_id=8
        )

        result = UpdateProductUseCase(mock).execute(
            UpdateProductCommand(
                product_id=2, caller_id=8, name="Water", unit_cost=7, stock=0
            )
        )

        assert result.seller_id == 8
        mock.update_product.assert_called_once_with(
            product_id=2,
            caller_id=8,
            fields=ProductFields(name="Water", unit_cost=7, stock=0),
        )

    def test_rename_forwards_username(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        mock.rename_account.return_value = Account(
            id=3, username="bob", role=Role.BUYER, balance=15
        )

        result = RenameAccountUseCase(mock).execute(
            RenameAccountCommand(account_id=3, username="Bob")
        )

        mock.rename_account.assert_called_once_with(3, "Bob")
        assert result == AccountResult(id=3, username="bob", role="buyer", balance=15)

    def test_unknown_role_rejected(self) -> None:
        mock = MagicMock(spec=TransactionCoordinator)
        with pytest.raises(ValueError):
            RegisterAccountUseCase(mock).execute(
                RegisterAccountCommand(username="eve", role="admin")
            )
        mock.register_account.assert_not_called()


class TestAccountUseCases:
    def test_register_returns_normalized_account(self, seller: AccountResult) -> None:
        assert seller.username == "acme"
        assert seller.role == "seller"
        assert seller.balance == 0

    def test_get_account(self, coordinator, buyer: AccountResult) -> None:
        DepositUseCase(coordinator).execute(DepositCommand(account_id=buyer.id, amount=50))
        result = GetAccountUseCase(coordinator).execute(AccountQuery(account_id=buyer.id))
        assert result.balance == 50

    def test_list_accounts(self, coordinator, seller, buyer) -> None:
        results = ListAccountsUseCase(coordinator).execute()
        assert [r.id for r in results] == [seller.id, buyer.id]
        assert [r.role for r in results] == ["seller", "buyer"]

    def test_rename_account(self, coordinator, buyer: AccountResult) -> None:
        result = RenameAccountUseCase(coordinator).execute(
            RenameAccountCommand(account_id=buyer.id, username="  Alicia")
        )
        assert result.username == "alicia"
        assert result.balance == buyer.balance

    def test_rename_to_taken_name(self, coordinator, seller, buyer) -> None:
        with pytest.raises(UsernameTakenError):
            RenameAccountUseCase(coordinator).execute(
                RenameAccountCommand(account_id=buyer.id, username="acme")
            )

    def test_register_blank_username(self, coordinator) -> None:
        with pytest.raises(InvalidUsernameError):
            RegisterAccountUseCase(coordinator).execute(
                RegisterAccountCommand(username="   ", role="buyer")
            )

    def test_delete_account_cascades(self, coordinator, seller: AccountResult) -> None:
        CreateProductUseCase(coordinator).execute(
            CreateProductCommand(caller_id=seller.id, name="Cola", unit_cost=12, quantity=5)
        )
        DeleteAccountUseCase(coordinator).execute(AccountQuery(account_id=seller.id))
        assert ListProductsUseCase(coordinator).execute() == []


class TestProductUseCases:
    def test_create_and_get(self, coordinator, seller: AccountResult) -> None:
        created = CreateProductUseCase(coordinator).execute(
            CreateProductCommand(caller_id=seller.id, name="Cola", unit_cost=12, quantity=5)
        )
        fetched = GetProductUseCase(coordinator).execute(GetProductQuery(product_id=created.id))
        assert fetched == ProductResult(
            id=created.id, name="Cola", unit_cost=12, stock=5, seller_id=seller.id
        )

    def test_update_by_owner(self, coordinator, seller: AccountResult) -> None:
        created = CreateProductUseCase(coordinator).execute(
            CreateProductCommand(caller_id=seller.id, name="Cola", unit_cost=12, quantity=5)
        )
        updated = UpdateProductUseCase(coordinator).execute(
            UpdateProductCommand(
                product_id=created.id,
                caller_id=seller.id,
                name="Cola Zero",
                unit_cost=15,
                stock=2,
            )
        )
        assert (updated.name, updated.unit_cost, updated.stock) == ("Cola Zero", 15, 2)

    def test_delete_by_stranger(self, coordinator, seller: AccountResult) -> None:
        created = CreateProductUseCase(coordinator).execute(
            CreateProductCommand(caller_id=seller.id, name="Cola", unit_cost=12, quantity=5)
        )
        with pytest.raises(UnauthorizedError):
            DeleteProductUseCase(coordinator).execute(
                DeleteProductCommand(product_id=created.id, caller_id=seller.id + 1)
            )


class TestPurchaseFlow:
    def test_deposit_buy_reset(self, coordinator, seller, buyer) -> None:
        product = CreateProductUseCase(coordinator).execute(
            CreateProductCommand(caller_id=seller.id, name="Gum", unit_cost=15, quantity=4)
        )
        for coin in (50, 20, 10):
            DepositUseCase(coordinator).execute(DepositCommand(account_id=buyer.id, amount=coin))

        receipt = BuyProductUseCase(coordinator).execute(
            BuyCommand(account_id=buyer.id, product_id=product.id, quantity=3)
        )
        change = ResetBalanceUseCase(coordinator).execute(ResetCommand(account_id=buyer.id))

        assert receipt.total_price == 45
        assert receipt.change_amount == 35
        assert change.coins == {100: 0, 50: 0, 20: 1, 10: 1, 5: 1}
        assert change.new_balance == 0
