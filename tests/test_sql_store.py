"""
Tests for the SQL vending store.

Runs the adapter and the TransactionCoordinator against a temporary
SQLite database file.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from app.domain.vending.entities import Account, Product, ProductFields, Role
from app.domain.vending.errors import (
    InsufficientFundsError,
    InsufficientStockError,
    LedgerInvariantError,
    ProductNotFoundError,
    UnauthorizedError,
    UsernameTakenError,
)
from app.domain.vending.transaction_coordinator import TransactionCoordinator
from app.infrastructure.vending.sql_store import (
    SqlUnitOfWork,
    _is_lock_conflict,
    create_schema,
    create_sql_engine,
    sql_uow_factory,
)


@pytest.fixture
def engine(tmp_path: Path) -> Engine:
    engine = create_sql_engine(f"sqlite:///{tmp_path / 'vending.db'}", lock_timeout=1.0)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def coordinator(engine: Engine) -> TransactionCoordinator:
    return TransactionCoordinator(sql_uow_factory(engine, lock_timeout=1.0))


class TestSqlRepositories:
    """Tests for the atomic primitives of the SQL adapter."""

    def test_account_roundtrip(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            created = uow.accounts.add(Account(username="alice", role=Role.BUYER))
            uow.commit()

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            loaded = uow.accounts.get_by_username("alice")
        assert loaded == Account(id=created.id, username="alice", role=Role.BUYER, balance=0)

    def test_duplicate_username_maps_to_domain_error(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            uow.accounts.add(Account(username="alice", role=Role.BUYER))
            uow.commit()

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            with pytest.raises(UsernameTakenError):
                uow.accounts.add(Account(username="alice", role=Role.SELLER))

    def test_conditional_debit(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            account = uow.accounts.add(Account(username="bob", role=Role.BUYER, balance=20))
            assert uow.accounts.debit_if_sufficient(account.id, 25) is None
            assert uow.accounts.debit_if_sufficient(account.id, 15) == 5
            assert uow.accounts.debit_if_sufficient(999, 1) is None

    def test_drain_and_credit(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            account = uow.accounts.add(Account(username="bob", role=Role.BUYER, balance=35))
            assert uow.accounts.drain(account.id) == 35
            assert uow.accounts.credit(account.id, 10) == 10
            assert uow.accounts.drain(999) is None
            assert uow.accounts.credit(999, 10) is None

    def test_conditional_reserve(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            product = uow.products.add(
                Product(name="Cola", unit_cost=12, stock=2, seller_id=1)
            )
            assert uow.products.reserve_if_available(product.id, 3) is None
            reservation = uow.products.reserve_if_available(product.id, 2)
            assert reservation.remaining_stock == 0
            assert reservation.unit_cost == 12

    def test_rollback_discards_changes(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            account = uow.accounts.add(Account(username="bob", role=Role.BUYER, balance=20))
            uow.commit()

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            uow.accounts.credit(account.id, 100)

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            assert uow.accounts.get_by_id(account.id).balance == 20

    def test_list_and_rename_accounts(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            first = uow.accounts.add(Account(username="alice", role=Role.BUYER, balance=0))
            second = uow.accounts.add(Account(username="acme", role=Role.SELLER, balance=0))
            renamed = uow.accounts.rename(first.id, "alicia")
            uow.commit()

        assert renamed.username == "alicia"
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            assert [a.username for a in uow.accounts.list_all()] == ["alicia", "acme"]
            assert [a.id for a in uow.accounts.list_all()] == [first.id, second.id]
            assert uow.accounts.rename(404, "ghost") is None

    def test_rename_to_taken_name_maps_to_domain_error(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            first = uow.accounts.add(Account(username="alice", role=Role.BUYER, balance=0))
            uow.accounts.add(Account(username="acme", role=Role.SELLER, balance=0))
            uow.commit()

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            with pytest.raises(UsernameTakenError):
                uow.accounts.rename(first.id, "acme")

        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            assert uow.accounts.get_by_id(first.id).username == "alice"

    def test_delete_by_seller(self, engine: Engine) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            for seller in (1, 1, 2):
                uow.products.add(Product(name="Gum", unit_cost=5, stock=1, seller_id=seller))
            assert uow.products.delete_by_seller(1) == 2
            assert [p.seller_id for p in uow.products.list_all()] == [2]


class TestSqlCoordinator:
    """The coordinator behaves the same over the SQL store."""

    def test_purchase_scenario(self, coordinator: TransactionCoordinator) -> None:
        seller = coordinator.register_account("acme", Role.SELLER)
        buyer = coordinator.register_account("alice", Role.BUYER)
        product = coordinator.create_product(seller.id, "Cola", 12, 5)
        coordinator.deposit(buyer.id, 10)
        coordinator.deposit(buyer.id, 5)

        receipt = coordinator.buy(buyer.id, product.id, 1)

        assert (receipt.total_price, receipt.change_amount) == (12, 0)
        assert coordinator.get_account(buyer.id).balance == 3
        assert coordinator.get_product(product.id).stock == 4

    def test_failed_debit_restores_stock(self, coordinator: TransactionCoordinator) -> None:
        seller = coordinator.register_account("acme", Role.SELLER)
        buyer = coordinator.register_account("alice", Role.BUYER)
        product = coordinator.create_product(seller.id, "Cola", 12, 5)
        coordinator.deposit(buyer.id, 10)

        with pytest.raises(InsufficientFundsError):
            coordinator.buy(buyer.id, product.id, 1)
        with pytest.raises(InsufficientStockError):
            coordinator.buy(buyer.id, product.id, 6)

        assert coordinator.get_product(product.id).stock == 5
        assert coordinator.get_account(buyer.id).balance == 10

    def test_reset_breakdown(self, coordinator: TransactionCoordinator) -> None:
        buyer = coordinator.register_account("alice", Role.BUYER)
        for coin in (100, 50, 20, 5):
            coordinator.deposit(buyer.id, coin)

        change = coordinator.reset(buyer.id)

        assert change.coins == {100: 1, 50: 1, 20: 1, 10: 0, 5: 1}
        assert coordinator.get_account(buyer.id).balance == 0

    def test_reset_residue_keeps_balance(self, engine, coordinator) -> None:
        with SqlUnitOfWork(engine, lock_timeout=1.0) as uow:
            account = uow.accounts.add(Account(username="odd", role=Role.BUYER, balance=7))
            uow.commit()

        with pytest.raises(LedgerInvariantError):
            coordinator.reset(account.id)
        assert coordinator.get_account(account.id).balance == 7

    def test_concurrent_buyers_cannot_oversell(self, engine: Engine) -> None:
        """Ten buyers race for one unit; exactly one gets it."""
        coordinator = TransactionCoordinator(
            sql_uow_factory(engine, lock_timeout=10.0), max_attempts=5
        )
        seller = coordinator.register_account("acme", Role.SELLER)
        product = coordinator.create_product(seller.id, "Last one", 10, 1)
        buyers = [
            coordinator.register_account(f"buyer{i}", Role.BUYER).id for i in range(10)
        ]
        for buyer in buyers:
            coordinator.deposit(buyer, 10)

        def attempt(buyer: int) -> bool:
            try:
                coordinator.buy(buyer, product.id, 1)
            except InsufficientStockError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=10) as pool:
            outcomes = list(pool.map(attempt, buyers))

        assert outcomes.count(True) == 1
        assert coordinator.get_product(product.id).stock == 0
        balances = sorted(coordinator.get_account(b).balance for b in buyers)
        assert balances == [0] + [10] * 9

    def test_rename_account(self, coordinator: TransactionCoordinator) -> None:
        buyer = coordinator.register_account("alice", Role.BUYER)
        coordinator.register_account("acme", Role.SELLER)

        assert coordinator.rename_account(buyer.id, "Alicia").username == "alicia"
        with pytest.raises(UsernameTakenError):
            coordinator.rename_account(buyer.id, "ACME")
        assert [a.username for a in coordinator.list_accounts()] == ["alicia", "acme"]

    def test_ownership_and_cascade(self, coordinator: TransactionCoordinator) -> None:
        owner = coordinator.register_account("acme", Role.SELLER)
        other = coordinator.register_account("globex", Role.SELLER)
        product = coordinator.create_product(owner.id, "Cola", 12, 5)

        with pytest.raises(UnauthorizedError):
            coordinator.update_product(
                product.id, other.id, ProductFields(name="X", unit_cost=1, stock=0)
            )

        coordinator.delete_account(owner.id)
        with pytest.raises(ProductNotFoundError):
            coordinator.get_product(product.id)


class TestLockConflictDetection:
    """Tests for mapping driver errors to lock conflicts."""

    def test_sqlite_locked_message(self) -> None:
        exc = OperationalError("UPDATE accounts", {}, Exception("database is locked"))
        assert _is_lock_conflict(exc)

    def test_postgres_sqlstate(self) -> None:
        class LockNotAvailable(Exception):
            sqlstate = "55P03"

        exc = OperationalError("UPDATE accounts", {}, LockNotAvailable("timeout"))
        assert _is_lock_conflict(exc)

    def test_other_operational_error(self) -> None:
        exc = OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert not _is_lock_conflict(exc)

    def test_psycopg2_pgcode(self) -> None:
        class LockNotAvailable(Exception):
            pgcode = "55P03"

        exc = OperationalError("UPDATE accounts", {}, LockNotAvailable("timeout"))
        assert _is_lock_conflict(exc)


class TestSqlUnitOfWorkSetup:
    """Tests for connection handling when a unit of work cannot start."""

    def test_failed_begin_closes_connection(self) -> None:
        connection = MagicMock()
        connection.begin.side_effect = OperationalError("BEGIN", {}, Exception("disk I/O error"))
        engine = MagicMock()
        engine.connect.return_value = connection
        engine.dialect.name = "sqlite"

        with pytest.raises(OperationalError):
            with SqlUnitOfWork(engine, lock_timeout=1.0):
                pass

        connection.close.assert_called_once()

    def test_failed_lock_timeout_setup_closes_connection(self) -> None:
        connection = MagicMock()
        connection.execute.side_effect = OperationalError(
            "SET LOCAL lock_timeout", {}, Exception("server closed the connection")
        )
        engine = MagicMock()
        engine.connect.return_value = connection
        engine.dialect.name = "postgresql"

        with pytest.raises(OperationalError):
            with SqlUnitOfWork(engine, lock_timeout=1.0):
                pass

        connection.close.assert_called_once()
