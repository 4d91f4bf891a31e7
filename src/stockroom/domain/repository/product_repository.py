"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockroom.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, active or not, or None if not found."""

    @abstractmethod
    def find_active(self, product_id: str) -> Product | None:
        """Catalog lookup: the product if it exists and is active, else None."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def next_id(self) -> str:
        """Reserve a fresh product ID."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Register a new product under an ID obtained from ``next_id``."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist changes to an existing product."""
