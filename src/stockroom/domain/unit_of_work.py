"""Unit of Work port.

A unit of work is the atomic boundary around every write of one business
operation.  It is passed explicitly to whoever needs it; nothing in the
domain relies on an ambient session.

Usage::

    with uow:
        with uow.lock_products(["1", "2"]):
            ...reads and staged writes through uow.products / uow.movements / uow.orders...
            uow.commit()

Leaving the ``with`` block without ``commit()`` (normally or via an
exception) discards every staged write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable

from stockroom.domain.repository.order_repository import OrderRepository
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)


class AbstractUnitOfWork(ABC):

    products: ProductRepository
    movements: StockMovementRepository
    orders: OrderRepository

    def __enter__(self) -> AbstractUnitOfWork:
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op when the transaction was already committed.
        self.rollback()

    def commit(self) -> None:
        self._commit()

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write staged since the transaction began."""

    @abstractmethod
    def lock_products(self, product_ids: Iterable[str]) -> AbstractContextManager[None]:
        """Serialize access to the given products' ledgers for the block's duration.

        Raises ConcurrencyConflictError if the locks cannot be taken in time.
        """

    @abstractmethod
    def _begin(self) -> None:
        ...

    @abstractmethod
    def _commit(self) -> None:
        ...
