"""Order aggregate.

The Order is an aggregate root that owns its lines.  An order is only ever
persisted as part of a fulfillment transaction, so the only observable
states are PENDING (inside the transaction) and FINALIZED.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.product import Product
from stockroom.domain.model.value_objects import FiscalId, Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    FINALIZED = "FINALIZED"


@dataclass(frozen=True)
class OrderLine:
    """Captures the price of a product at order time (price lock)."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_CUSTOMER_NAME_LENGTH = 200


@dataclass
class Order:
    """Aggregate root for sales orders.

    Use the ``Order.create()`` factory for new orders; it enforces the
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_document: FiscalId
    customer_name: str
    actor: str
    lines: list[OrderLine] = field(default_factory=list)
    status: OrderStatus = OrderStatus.PENDING
    total: Money = Money.ZERO
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finalized_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_document: FiscalId,
        customer_name: str,
        actor: str,
        created_at: datetime | None = None,
    ) -> Order:
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        if len(customer_name.strip()) > MAX_CUSTOMER_NAME_LENGTH:
            raise ValidationError(
                f"Customer name cannot exceed {MAX_CUSTOMER_NAME_LENGTH} characters"
            )
        if not actor or not actor.strip():
            raise ValidationError("Actor is required")

        return Order(
            id=None,
            customer_document=customer_document,
            customer_name=customer_name.strip(),
            actor=actor.strip(),
            created_at=created_at or datetime.now(timezone.utc),
        )

    # --- Lines ----------------------------------------------------------------

    def add_line(self, product: Product, quantity: int) -> OrderLine:
        """Append a line priced at the product's *current* price."""
        self._assert_pending()
        line = OrderLine(
            product_id=product.id,
            product_name=product.name,
            quantity=Quantity(quantity),
            unit_price=product.price,  # <-- price snapshot
        )
        self.lines.append(line)
        return line

    # --- State transitions ----------------------------------------------------

    def finalize(self, total: Money, finalized_at: datetime | None = None) -> None:
        """Transition PENDING -> FINALIZED, fixing the order total."""
        self._assert_pending()
        if not self.lines:
            raise ValidationError("Order must contain at least one line")
        self.total = total
        self.status = OrderStatus.FINALIZED
        self.finalized_at = finalized_at or datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def reference(self) -> str:
        """Document reference written on the ledger entries of this order."""
        return f"ORDER-{self.id}"

    @property
    def lines_total(self) -> Money:
        result = Money.ZERO
        for line in self.lines:
            result = result + line.line_total
        return result

    # --- Internal helpers -----------------------------------------------------

    def _assert_pending(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise ValidationError(
                f"Order is {self.status.value}; only PENDING orders can change"
            )
