"""
Adapter: In-memory vending store.

Implements the UnitOfWork, AccountRepository and ProductRepository ports
with process-local dictionaries. Used for local runs and tests.

Concurrency model:
    - Every row has its own re-entrant lock.
    - A mutation acquires the row lock (bounded by lock_timeout) and keeps
      it until the unit of work commits or rolls back.
    - Reads wait for the row lock and release it immediately, so they only
      ever observe committed state.
    - Rollback replays an undo log in reverse order.
    - Locks of rows that no longer exist are dropped on release.
"""

import dataclasses
import itertools
import logging
import threading
from typing import Callable, Optional

from app.domain.vending.entities import Account, Product, StockReservation
from app.domain.vending.errors import ConflictError, UsernameTakenError
from app.domain.vending.ports import AccountRepository, ProductRepository, UnitOfWork

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
PRODUCTS = "products"

DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0


class InMemoryStore:
    """Shared state behind every InMemoryUnitOfWork of one application."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[int, object]] = {ACCOUNTS: {}, PRODUCTS: {}}
        self.registry_lock = threading.Lock()
        self._row_locks: dict[tuple[str, int], threading.RLock] = {}
        self._sequences = {ACCOUNTS: itertools.count(1), PRODUCTS: itertools.count(1)}

    def row_lock(self, table: str, row_id: int) -> threading.RLock:
        """Return the lock guarding one row, creating it on first use."""
        with self.registry_lock:
            key = (table, row_id)
            lock = self._row_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._row_locks[key] = lock
            return lock

    def allocate_row(self, table: str) -> tuple[int, threading.RLock]:
        """Issue a fresh row ID whose lock is already held by the caller."""
        with self.registry_lock:
            row_id = next(self._sequences[table])
            lock = threading.RLock()
            lock.acquire()
            self._row_locks[(table, row_id)] = lock
            return row_id, lock

    def release_row(self, table: str, row_id: int, lock: threading.RLock) -> None:
        """Release a row lock, forgetting it once the row no longer exists.

        Row IDs are never reused, so a missing row never comes back.
        """
        lock.release()
        with self.registry_lock:
            key = (table, row_id)
            if row_id not in self.tables[table] and self._row_locks.get(key) is lock:
                del self._row_locks[key]

    @property
    def tracked_locks(self) -> int:
        with self.registry_lock:
            return len(self._row_locks)


class InMemoryUnitOfWork(UnitOfWork):
    """Row-locking unit of work over an InMemoryStore."""

    def __init__(
        self,
        store: InMemoryStore,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    ) -> None:
        self._store = store
        self._lock_timeout = lock_timeout
        self._held: dict[tuple[str, int], threading.RLock] = {}
        self._undo: list[Callable[[], None]] = []
        self.accounts = InMemoryAccountRepository(store, self)
        self.products = InMemoryProductRepository(store, self)

    def lock_row(self, table: str, row_id: int) -> None:
        """Acquire a row lock for the rest of this unit of work."""
        key = (table, row_id)
        if key in self._held:
            return
        lock = self._store.row_lock(table, row_id)
        if not lock.acquire(timeout=self._lock_timeout):
            raise ConflictError(f"{table}:{row_id}")
        self._held[key] = lock

    def claim_new_row(self, table: str) -> int:
        """Allocate a row ID locked for the rest of this unit of work."""
        row_id, lock = self._store.allocate_row(table)
        self._held[(table, row_id)] = lock
        return row_id

    def wait_for_row(self, table: str, row_id: int) -> None:
        """Block until no other unit of work holds the row."""
        if (table, row_id) in self._held:
            return
        lock = self._store.row_lock(table, row_id)
        if not lock.acquire(timeout=self._lock_timeout):
            raise ConflictError(f"{table}:{row_id}")
        self._store.release_row(table, row_id, lock)

    def on_rollback(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    def commit(self) -> None:
        self._undo.clear()
        self._release_all()

    def rollback(self) -> None:
        if self._undo:
            logger.debug("Rolling back %d in-memory changes", len(self._undo))
        while self._undo:
            self._undo.pop()()
        self._release_all()

    def _release_all(self) -> None:
        for (table, row_id), lock in self._held.items():
            self._store.release_row(table, row_id, lock)
        self._held.clear()


class _InMemoryRepository:
    table: str

    def __init__(self, store: InMemoryStore, uow: InMemoryUnitOfWork) -> None:
        self._store = store
        self._uow = uow

    @property
    def _rows(self) -> dict:
        return self._store.tables[self.table]

    def list_all(self) -> list:
        with self._store.registry_lock:
            ids = sorted(self._rows)
        rows = (self._read(row_id) for row_id in ids)
        return [row for row in rows if row is not None]

    def _read(self, row_id: int):
        self._uow.wait_for_row(self.table, row_id)
        row = self._rows.get(row_id)
        return dataclasses.replace(row) if row is not None else None

    def _locked(self, row_id: int):
        """Lock a row for writing and return the stored object, or None."""
        self._uow.lock_row(self.table, row_id)
        return self._rows.get(row_id)

    def _restore_field(self, row, name: str) -> None:
        previous = getattr(row, name)
        self._uow.on_rollback(lambda: setattr(row, name, previous))

    def _insert(self, row, conflicts: Optional[Callable[[object], bool]] = None) -> bool:
        """Insert a new row unless an existing row conflicts with it."""
        row_id = self._uow.claim_new_row(self.table)
        row.id = row_id
        with self._store.registry_lock:
            if conflicts is not None and any(map(conflicts, self._rows.values())):
                return False
            self._rows[row_id] = row
        self._uow.on_rollback(lambda: self._drop(row_id))
        return True

    def _drop(self, row_id: int) -> None:
        with self._store.registry_lock:
            self._rows.pop(row_id, None)

    def _put(self, row_id: int, row) -> None:
        with self._store.registry_lock:
            self._rows[row_id] = row

    def _remove(self, row_id: int) -> bool:
        row = self._locked(row_id)
        if row is None:
            return False
        self._drop(row_id)
        self._uow.on_rollback(lambda: self._put(row_id, row))
        return True


class InMemoryAccountRepository(_InMemoryRepository, AccountRepository):
    table = ACCOUNTS

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._read(account_id)

    def get_by_username(self, username: str) -> Optional[Account]:
        with self._store.registry_lock:
            match = next(
                (row.id for row in self._rows.values() if row.username == username),
                None,
            )
        if match is None:
            return None
        account = self._read(match)
        # The name may have been an uncommitted rename that rolled back.
        return account if account is not None and account.username == username else None

    def add(self, account: Account) -> Account:
        row = dataclasses.replace(account)
        if not self._insert(row, conflicts=lambda r: r.username == row.username):
            raise UsernameTakenError(row.username)
        return dataclasses.replace(row)

    def rename(self, account_id: int, username: str) -> Optional[Account]:
        row = self._locked(account_id)
        if row is None:
            return None
        with self._store.registry_lock:
            if any(
                other.username == username and other.id != account_id
                for other in self._rows.values()
            ):
                raise UsernameTakenError(username)
            self._restore_field(row, "username")
            row.username = username
        return dataclasses.replace(row)

    def delete(self, account_id: int) -> bool:
        return self._remove(account_id)

    def credit(self, account_id: int, amount: int) -> Optional[int]:
        row = self._locked(account_id)
        if row is None:
            return None
        self._restore_field(row, "balance")
        row.balance += amount
        return row.balance

    def debit_if_sufficient(self, account_id: int, amount: int) -> Optional[int]:
        row = self._locked(account_id)
        if row is None or row.balance < amount:
            return None
        self._restore_field(row, "balance")
        row.balance -= amount
        return row.balance

    def drain(self, account_id: int) -> Optional[int]:
        row = self._locked(account_id)
        if row is None:
            return None
        self._restore_field(row, "balance")
        drained, row.balance = row.balance, 0
        return drained


class InMemoryProductRepository(_InMemoryRepository, ProductRepository):
    table = PRODUCTS

    def get_by_id(self, product_id: int) -> Optional[Product]:
        return self._read(product_id)

    def add(self, product: Product) -> Product:
        row = dataclasses.replace(product)
        self._insert(row)
        return dataclasses.replace(row)

    def replace(self, product: Product) -> Optional[Product]:
        row = self._locked(product.id)
        if row is None:
            return None
        for name in ("name", "unit_cost", "stock", "seller_id"):
            self._restore_field(row, name)
            setattr(row, name, getattr(product, name))
        return dataclasses.replace(row)

    def delete(self, product_id: int) -> bool:
        return self._remove(product_id)

    def delete_by_seller(self, seller_id: int) -> int:
        with self._store.registry_lock:
            candidates = sorted(
                row.id for row in self._rows.values() if row.seller_id == seller_id
            )
        removed = 0
        for product_id in candidates:
            row = self._locked(product_id)
            # Re-check under the row lock; the seller may have changed meanwhile.
            if row is not None and row.seller_id == seller_id:
                removed += self._remove(product_id)
        return removed

    def reserve_if_available(
        self, product_id: int, quantity: int
    ) -> Optional[StockReservation]:
        row = self._locked(product_id)
        if row is None or row.stock < quantity:
            return None
        self._restore_field(row, "stock")
        row.stock -= quantity
        return StockReservation(
            product_id=row.id,
            name=row.name,
            unit_cost=row.unit_cost,
            remaining_stock=row.stock,
        )


def in_memory_uow_factory(
    store: Optional[InMemoryStore] = None,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
) -> Callable[[], InMemoryUnitOfWork]:
    """Return a factory producing units of work over one shared store."""
    shared = store if store is not None else InMemoryStore()
    return lambda: InMemoryUnitOfWork(shared, lock_timeout=lock_timeout)
