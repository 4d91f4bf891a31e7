"""In-memory store and unit of work.

The store holds committed state.  Each unit of work stages its writes in a
private session and applies them to the store at commit, under the store's
commit lock, after checking that no other transaction appended to a ledger
this one has read.  Repositories hand out copies, so an uncommitted change
never leaks into the store.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator

from stockroom.domain.exceptions import ConcurrencyConflictError, ValidationError
from stockroom.domain.model.order import Order
from stockroom.domain.model.product import Product
from stockroom.domain.model.stock import StockMovement
from stockroom.domain.repository.order_repository import OrderRepository
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class ProductLocks:
    """One mutex per product, taken in sorted order with a timeout."""

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, product_ids: Iterable[str]) -> Iterator[None]:
        acquired: list[threading.Lock] = []
        try:
            for product_id in sorted(set(product_ids)):
                lock = self._lock_for(product_id)
                if not lock.acquire(timeout=self._timeout):
                    raise ConcurrencyConflictError(
                        f"Timed out waiting for stock of product '{product_id}'"
                    )
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def _lock_for(self, product_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(product_id, threading.Lock())


class InMemoryStore:

    def __init__(
        self,
        products: Iterable[Product] = (),
        movements: Iterable[StockMovement] = (),
        orders: Iterable[Order] = (),
        lock_timeout: float = 5.0,
    ) -> None:
        self.products: dict[str, Product] = {p.id: p for p in products}
        self.movements: list[StockMovement] = list(movements)
        self.orders: dict[int, Order] = {o.id: o for o in orders}  # type: ignore[misc]
        self.commit_lock = threading.RLock()
        self.product_locks = ProductLocks(lock_timeout)
        self._order_seq = 0
        self._product_seq = 0

    def next_order_id(self) -> int:
        """Hand out a fresh order ID; IDs of rolled-back orders are not reused."""
        with self.commit_lock:
            self._order_seq = max(self._order_seq, max(self.orders, default=0)) + 1
            return self._order_seq

    def next_product_id(self) -> str:
        """Hand out a fresh product ID; IDs are sequential numeric strings."""
        with self.commit_lock:
            highest = max((int(p) for p in self.products if p.isdigit()), default=0)
            self._product_seq = max(self._product_seq, highest) + 1
            return str(self._product_seq)

    def movement_count(self, product_id: str) -> int:
        return sum(1 for m in list(self.movements) if m.product_id == product_id)

    def refresh(self) -> None:
        """Reload committed state from durable storage (nothing to do in memory)."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Exclusive section in which a unit of work applies its writes."""
        with self.commit_lock:
            yield


@dataclass
class _Session:
    products: dict[str, Product] = field(default_factory=dict)
    movements: list[StockMovement] = field(default_factory=list)
    orders: dict[int, Order] = field(default_factory=dict)
    new_products: set[str] = field(default_factory=set)
    # product_id -> number of committed movements seen on first read
    observed: dict[str, int] = field(default_factory=dict)
    # product_id -> committed `active` flag seen on first read
    observed_active: dict[str, bool] = field(default_factory=dict)

    def clear(self) -> None:
        self.products.clear()
        self.movements.clear()
        self.orders.clear()
        self.new_products.clear()
        self.observed.clear()
        self.observed_active.clear()


class InMemoryProductRepository(ProductRepository):

    def __init__(self, store: InMemoryStore, session: _Session) -> None:
        self._store = store
        self._session = session

    def get_by_id(self, product_id: str) -> Product | None:
        staged = self._session.products.get(product_id)
        if staged is not None:
            return replace(staged)
        product = self._store.products.get(product_id)
        if product is None:
            return None
        self._session.observed_active.setdefault(product_id, product.active)
        return replace(product)

    def find_active(self, product_id: str) -> Product | None:
        product = self.get_by_id(product_id)
        if product is None or not product.active:
            return None
        return product

    def get_by_name(self, name: str) -> Product | None:
        for product in self.list_all():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        merged = {**self._store.products, **self._session.products}
        return [replace(p) for p in merged.values()]

    def next_id(self) -> str:
        return self._store.next_product_id()

    def add(self, product: Product) -> None:
        self._session.new_products.add(product.id)
        self._session.products[product.id] = replace(product)

    def save(self, product: Product) -> None:
        self._session.products[product.id] = replace(product)


class InMemoryStockMovementRepository(StockMovementRepository):

    def __init__(self, store: InMemoryStore, session: _Session) -> None:
        self._store = store
        self._session = session

    def add(self, movement: StockMovement) -> None:
        self._session.movements.append(movement)

    def list_for_product(self, product_id: str) -> list[StockMovement]:
        committed = [m for m in list(self._store.movements) if m.product_id == product_id]
        self._session.observed.setdefault(product_id, len(committed))
        staged = [m for m in self._session.movements if m.product_id == product_id]
        return committed + staged

    def list_all(self) -> list[StockMovement]:
        return list(self._store.movements) + list(self._session.movements)


class InMemoryOrderRepository(OrderRepository):

    def __init__(self, store: InMemoryStore, session: _Session) -> None:
        self._store = store
        self._session = session

    def add(self, order: Order) -> None:
        if order.id is not None:
            raise ValidationError(f"Order #{order.id} was already added")
        order.id = self._store.next_order_id()
        self._session.orders[order.id] = order

    def get_by_id(self, order_id: int) -> Order | None:
        if order_id in self._session.orders:
            return self._session.orders[order_id]
        order = self._store.orders.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def list_all(self) -> list[Order]:
        committed = [copy.deepcopy(o) for o in list(self._store.orders.values())]
        return committed + list(self._session.orders.values())


class InMemoryUnitOfWork(AbstractUnitOfWork):

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._session = _Session()
        self._bind_repositories()

    def lock_products(self, product_ids: Iterable[str]):
        return self._store.product_locks.hold(product_ids)

    def rollback(self) -> None:
        self._session.clear()

    def _begin(self) -> None:
        self._store.refresh()
        self._session = _Session()
        self._bind_repositories()

    def _commit(self) -> None:
        session = self._session
        with self._store.transaction():
            self._check_conflicts(session)
            self._store.products.update(session.products)
            self._store.movements.extend(session.movements)
            self._store.orders.update(session.orders)
        session.clear()

    def _check_conflicts(self, session: _Session) -> None:
        for product_id, seen in session.observed.items():
            current = self._store.movement_count(product_id)
            if current != seen:
                raise ConcurrencyConflictError(
                    f"Stock of product '{product_id}' changed during the transaction "
                    f"({seen} movements seen, {current} now)"
                )
        for product_id, was_active in session.observed_active.items():
            current = self._store.products.get(product_id)
            if current is None or current.active != was_active:
                raise ConcurrencyConflictError(
                    f"Product '{product_id}' changed during the transaction"
                )
        for product_id in session.new_products:
            if product_id in self._store.products:
                raise ConcurrencyConflictError(
                    f"Product #{product_id} was written by another transaction"
                )
        for order_id in session.orders:
            if order_id in self._store.orders:
                raise ConcurrencyConflictError(
                    f"Order #{order_id} was written by another transaction"
                )

    def _bind_repositories(self) -> None:
        self.products = InMemoryProductRepository(self._store, self._session)
        self.movements = InMemoryStockMovementRepository(self._store, self._session)
        self.orders = InMemoryOrderRepository(self._store, self._session)
