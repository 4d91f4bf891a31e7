"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class MoneyOutOfRangeError(ValidationError):
    """A monetary amount fell outside the allowed range."""


class InvalidFiscalIdFormatError(ValidationError):
    """A fiscal identity number has the wrong shape (length / characters)."""


class InvalidFiscalIdChecksumError(ValidationError):
    """A fiscal identity number failed its check-digit verification."""


class NotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(NotFoundError):

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product '{product_id}' not found or inactive")
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):

    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order #{order_id} not found")
        self.order_id = order_id


class InsufficientStockError(DomainException):
    """Not enough stock to cover a requested quantity."""

    def __init__(self, product_id: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(available {available}, requested {requested})"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ConcurrencyConflictError(DomainException):
    """Stock changed underneath a transaction; the whole operation may be retried."""


class PersistenceError(DomainException):
    """The storage layer failed to load or commit data."""
