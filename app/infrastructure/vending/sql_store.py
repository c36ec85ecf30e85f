"""
Adapter: SQL vending store.

Implements the UnitOfWork, AccountRepository and ProductRepository ports
on top of SQLAlchemy Core. Runs against PostgreSQL in production and
SQLite for local development and tests.

Every stock or balance mutation is one conditional UPDATE ... RETURNING
statement, so the check and the write happen in a single atomic step and
the touched row stays locked until the unit of work ends. Lock waits that
exceed the configured timeout are reported as ConflictError.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, OperationalError

from app.domain.vending.entities import Account, Product, Role, StockReservation
from app.domain.vending.errors import ConflictError, UsernameTakenError
from app.domain.vending.ports import AccountRepository, ProductRepository, UnitOfWork

logger = logging.getLogger(__name__)

# SQLSTATE codes for lock timeouts, deadlocks and serialization failures.
_CONFLICT_SQLSTATES = {"55P03", "40P01", "40001"}

metadata = MetaData()

accounts_table = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(150), nullable=False, unique=True),
    Column("role", String(16), nullable=False),
    Column("balance", Integer, nullable=False, default=0),
    CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
)

products_table = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("unit_cost", Integer, nullable=False),
    Column("stock", Integer, nullable=False),
    Column("seller_id", Integer, ForeignKey("accounts.id"), nullable=False, index=True),
    CheckConstraint("unit_cost > 0", name="ck_products_unit_cost_positive"),
    CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
)


def create_sql_engine(dsn: str, lock_timeout: float) -> Engine:
    """Build a SQLAlchemy engine for the vending store.

    Args:
        dsn: SQLAlchemy database URL.
        lock_timeout: Seconds a statement may wait for a row lock.
    """
    if dsn.startswith("sqlite"):
        return create_engine(
            dsn,
            connect_args={"timeout": lock_timeout, "check_same_thread": False},
        )
    return create_engine(dsn, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create the vending tables if they do not exist."""
    metadata.create_all(engine)
    logger.info("Vending schema ready on %s", engine.dialect.name)


def _is_lock_conflict(exc: OperationalError) -> bool:
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    return "locked" in str(exc.orig).lower()


class _SqlRepository:
    resource: str

    def __init__(self, connection: Connection) -> None:
        self._conn = connection

    def _execute(self, statement):
        try:
            return self._conn.execute(statement)
        except OperationalError as exc:
            if _is_lock_conflict(exc):
                raise ConflictError(self.resource) from exc
            raise


def _to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        role=Role(row.role),
        balance=row.balance,
    )


def _to_product(row) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        unit_cost=row.unit_cost,
        stock=row.stock,
        seller_id=row.seller_id,
    )


class SqlAccountRepository(_SqlRepository, AccountRepository):
    """Account persistence on the accounts table."""

    resource = "accounts"

    def get_by_id(self, account_id: int) -> Optional[Account]:
        row = self._execute(
            select(accounts_table).where(accounts_table.c.id == account_id)
        ).first()
        return _to_account(row) if row is not None else None

    def get_by_username(self, username: str) -> Optional[Account]:
        row = self._execute(
            select(accounts_table).where(accounts_table.c.username == username)
        ).first()
        return _to_account(row) if row is not None else None

    def add(self, account: Account) -> Account:
        try:
            result = self._conn.execute(
                insert(accounts_table).values(
                    username=account.username,
                    role=account.role.value,
                    balance=account.balance,
                )
            )
        except IntegrityError as exc:
            raise UsernameTakenError(account.username) from exc
        return Account(
            id=result.inserted_primary_key[0],
            username=account.username,
            role=account.role,
            balance=account.balance,
        )

    def list_all(self) -> list[Account]:
        rows = self._execute(select(accounts_table).order_by(accounts_table.c.id))
        return [_to_account(row) for row in rows]

    def rename(self, account_id: int, username: str) -> Optional[Account]:
        statement = (
            update(accounts_table)
            .where(accounts_table.c.id == account_id)
            .values(username=username)
            .returning(*accounts_table.c)
        )
        try:
            row = self._execute(statement).first()
        except IntegrityError as exc:
            raise UsernameTakenError(username) from exc
        return _to_account(row) if row is not None else None

    def delete(self, account_id: int) -> bool:
        result = self._execute(
            delete(accounts_table).where(accounts_table.c.id == account_id)
        )
        return result.rowcount > 0

    def credit(self, account_id: int, amount: int) -> Optional[int]:
        return self._execute(
            update(accounts_table)
            .where(accounts_table.c.id == account_id)
            .values(balance=accounts_table.c.balance + amount)
            .returning(accounts_table.c.balance)
        ).scalar_one_or_none()

    def debit_if_sufficient(self, account_id: int, amount: int) -> Optional[int]:
        return self._execute(
            update(accounts_table)
            .where(accounts_table.c.id == account_id)
            .where(accounts_table.c.balance >= amount)
            .values(balance=accounts_table.c.balance - amount)
            .returning(accounts_table.c.balance)
        ).scalar_one_or_none()

    def drain(self, account_id: int) -> Optional[int]:
        # RETURNING only exposes the new value, so clear with a compare-and-set
        # against the balance read under the row lock.
        observed = self._execute(
            select(accounts_table.c.balance)
            .where(accounts_table.c.id == account_id)
            .with_for_update()
        ).scalar_one_or_none()
        if observed is None:
            return None

        cleared = self._execute(
            update(accounts_table)
            .where(accounts_table.c.id == account_id)
            .where(accounts_table.c.balance == observed)
            .values(balance=0)
            .returning(accounts_table.c.id)
        ).scalar_one_or_none()
        if cleared is None:
            raise ConflictError(f"{self.resource}:{account_id}")
        return observed


class SqlProductRepository(_SqlRepository, ProductRepository):
    """Product persistence on the products table."""

    resource = "products"

    def get_by_id(self, product_id: int) -> Optional[Product]:
        row = self._execute(
            select(products_table).where(products_table.c.id == product_id)
        ).first()
        return _to_product(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._execute(select(products_table).order_by(products_table.c.id))
        return [_to_product(row) for row in rows]

    def add(self, product: Product) -> Product:
        result = self._execute(
            insert(products_table).values(
                name=product.name,
                unit_cost=product.unit_cost,
                stock=product.stock,
                seller_id=product.seller_id,
            )
        )
        return Product(
            id=result.inserted_primary_key[0],
            name=product.name,
            unit_cost=product.unit_cost,
            stock=product.stock,
            seller_id=product.seller_id,
        )

    def replace(self, product: Product) -> Optional[Product]:
        row = self._execute(
            update(products_table)
            .where(products_table.c.id == product.id)
            .values(
                name=product.name,
                unit_cost=product.unit_cost,
                stock=product.stock,
                seller_id=product.seller_id,
            )
            .returning(*products_table.c)
        ).first()
        return _to_product(row) if row is not None else None

    def delete(self, product_id: int) -> bool:
        result = self._execute(
            delete(products_table).where(products_table.c.id == product_id)
        )
        return result.rowcount > 0

    def delete_by_seller(self, seller_id: int) -> int:
        result = self._execute(
            delete(products_table).where(products_table.c.seller_id == seller_id)
        )
        return result.rowcount

    def reserve_if_available(
        self, product_id: int, quantity: int
    ) -> Optional[StockReservation]:
        row = self._execute(
            update(products_table)
            .where(products_table.c.id == product_id)
            .where(products_table.c.stock >= quantity)
            .values(stock=products_table.c.stock - quantity)
            .returning(
                products_table.c.id,
                products_table.c.name,
                products_table.c.unit_cost,
                products_table.c.stock,
            )
        ).first()
        if row is None:
            return None
        return StockReservation(
            product_id=row.id,
            name=row.name,
            unit_cost=row.unit_cost,
            remaining_stock=row.stock,
        )


class SqlUnitOfWork(UnitOfWork):
    """One database transaction on one pooled connection."""

    def __init__(self, engine: Engine, lock_timeout: float) -> None:
        self._engine = engine
        self._lock_timeout = lock_timeout
        self._connection: Optional[Connection] = None
        self._transaction = None

    def __enter__(self) -> "SqlUnitOfWork":
        try:
            self._connection = self._engine.connect()
        except OperationalError as exc:
            logger.error("Could not connect to the vending database: %s", exc)
            raise
        try:
            self._transaction = self._connection.begin()
            if self._engine.dialect.name == "postgresql":
                millis = int(self._lock_timeout * 1000)
                self._connection.execute(text(f"SET LOCAL lock_timeout = {millis}"))
        except Exception:
            self._connection.close()
            self._connection = None
            self._transaction = None
            raise
        self.accounts = SqlAccountRepository(self._connection)
        self.products = SqlProductRepository(self._connection)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def commit(self) -> None:
        try:
            self._transaction.commit()
        except OperationalError as exc:
            if _is_lock_conflict(exc):
                raise ConflictError("commit") from exc
            raise

    def rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            self._transaction.rollback()


def sql_uow_factory(engine: Engine, lock_timeout: float) -> Callable[[], SqlUnitOfWork]:
    """Return a factory producing units of work over one engine."""
    return lambda: SqlUnitOfWork(engine, lock_timeout=lock_timeout)
