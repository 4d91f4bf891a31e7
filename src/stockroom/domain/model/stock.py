"""Stock ledger entries.

The ledger is an append-only log of movements.  A product's available
quantity is never stored; it is always derived from its movements.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MovementDirection(Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


@dataclass(frozen=True)
class StockMovement:
    """One entry in the ledger.

    ``quantity`` is always a positive magnitude; ``direction`` gives its sign.
    """

    product_id: str
    quantity: int
    direction: MovementDirection
    occurred_at: datetime
    actor: str
    document_ref: str | None = None
    notes: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def signed_quantity(self) -> int:
        if self.direction is MovementDirection.INBOUND:
            return self.quantity
        return -self.quantity
