"""Abstract repository for the stock ledger.

Append-only: movements are never updated or deleted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockroom.domain.model.stock import StockMovement


class StockMovementRepository(ABC):

    @abstractmethod
    def add(self, movement: StockMovement) -> None:
        """Append a movement to the ledger."""

    @abstractmethod
    def list_for_product(self, product_id: str) -> list[StockMovement]:
        """Return a product's movements in the order they were recorded."""

    @abstractmethod
    def list_all(self) -> list[StockMovement]:
        """Return every movement in the order they were recorded."""
