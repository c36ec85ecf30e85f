"""
Dependency injection for the vending bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into the TransactionCoordinator and use cases via
constructor injection. These are the composition root for the
vending context.
"""

import logging
from functools import lru_cache
from typing import Callable

from fastapi import Depends
from sqlalchemy.engine import Engine

from app.application.vending.buy_product import BuyProductUseCase
from app.application.vending.create_product import CreateProductUseCase
from app.application.vending.delete_account import DeleteAccountUseCase
from app.application.vending.delete_product import DeleteProductUseCase
from app.application.vending.deposit import DepositUseCase
from app.application.vending.get_account import GetAccountUseCase
from app.application.vending.get_product import GetProductUseCase
from app.application.vending.list_accounts import ListAccountsUseCase
from app.application.vending.list_products import ListProductsUseCase
from app.application.vending.register_account import RegisterAccountUseCase
from app.application.vending.rename_account import RenameAccountUseCase
from app.application.vending.reset_balance import ResetBalanceUseCase
from app.application.vending.update_product import UpdateProductUseCase
from app.core.config import settings
from app.domain.vending.ports import UnitOfWork
from app.domain.vending.transaction_coordinator import TransactionCoordinator
from app.infrastructure.vending.memory_store import in_memory_uow_factory
from app.infrastructure.vending.sql_store import (
    create_schema,
    create_sql_engine,
    sql_uow_factory,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_sql_engine() -> Engine:
    """Create the database engine and schema once per process."""
    engine = create_sql_engine(
        settings.get_database_dsn(), lock_timeout=settings.lock_timeout_seconds
    )
    create_schema(engine)
    return engine


@lru_cache(maxsize=1)
def get_unit_of_work_factory() -> Callable[[], UnitOfWork]:
    """Build the storage backend once per process."""
    if settings.storage_backend == "memory":
        logger.warning("Using the in-memory vending store; data is not persisted.")
        return in_memory_uow_factory(lock_timeout=settings.lock_timeout_seconds)
    return sql_uow_factory(get_sql_engine(), lock_timeout=settings.lock_timeout_seconds)


def dispose_storage() -> None:
    """Close pooled database connections if the engine was ever created."""
    if get_sql_engine.cache_info().currsize:
        get_sql_engine().dispose()
        logger.info("Vending database connections closed")


def get_transaction_coordinator(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> TransactionCoordinator:
    """Build the TransactionCoordinator with the configured retry budget."""
    return TransactionCoordinator(
        uow_factory,
        max_attempts=settings.conflict_retry_attempts,
        backoff_seconds=settings.conflict_retry_backoff_seconds,
    )


def get_deposit_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> DepositUseCase:
    return DepositUseCase(coordinator=coordinator)


def get_buy_product_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> BuyProductUseCase:
    return BuyProductUseCase(coordinator=coordinator)


def get_reset_balance_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> ResetBalanceUseCase:
    return ResetBalanceUseCase(coordinator=coordinator)


def get_create_product_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> CreateProductUseCase:
    return CreateProductUseCase(coordinator=coordinator)


def get_update_product_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> UpdateProductUseCase:
    return UpdateProductUseCase(coordinator=coordinator)


def get_delete_product_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> DeleteProductUseCase:
    return DeleteProductUseCase(coordinator=coordinator)


def get_get_product_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> GetProductUseCase:
    return GetProductUseCase(coordinator=coordinator)


def get_list_products_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> ListProductsUseCase:
    return ListProductsUseCase(coordinator=coordinator)


def get_register_account_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> RegisterAccountUseCase:
    return RegisterAccountUseCase(coordinator=coordinator)


def get_get_account_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> GetAccountUseCase:
    return GetAccountUseCase(coordinator=coordinator)


def get_delete_account_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> DeleteAccountUseCase:
    return DeleteAccountUseCase(coordinator=coordinator)


def get_list_accounts_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> ListAccountsUseCase:
    return ListAccountsUseCase(coordinator=coordinator)


def get_rename_account_use_case(
    coordinator: TransactionCoordinator = Depends(get_transaction_coordinator),
) -> RenameAccountUseCase:
    return RenameAccountUseCase(coordinator=coordinator)
