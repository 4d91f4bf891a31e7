"""Domain service: Stock Ledger.

The ledger is a pure historical record.  It answers "how much is available"
by summing the log and appends new movements; it does not judge whether a
movement leaves the balance negative.  Balance sufficiency is the caller's
business (see the fulfillment use case).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import structlog

from stockroom.domain.exceptions import ProductNotFoundError
from stockroom.domain.model.stock import MovementDirection, StockMovement
from stockroom.domain.model.value_objects import Quantity
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StockLedger:

    def __init__(
        self,
        movement_repo: StockMovementRepository,
        product_repo: ProductRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._movement_repo = movement_repo
        self._product_repo = product_repo
        self._clock = clock

    def available_quantity(self, product_id: str) -> int:
        """Sum of signed movements; recomputed from the log on every call."""
        return sum(
            m.signed_quantity for m in self._movement_repo.list_for_product(product_id)
        )

    def record_movement(
        self,
        product_id: str,
        quantity: int,
        direction: MovementDirection,
        actor: str,
        document_ref: str | None = None,
        notes: str | None = None,
    ) -> StockMovement:
        """Append a movement for an active product.

        Raises ValidationError for a non-positive quantity and
        ProductNotFoundError for a missing or inactive product.
        """
        qty = Quantity(quantity)
        if self._product_repo.find_active(product_id) is None:
            raise ProductNotFoundError(product_id)

        movement = StockMovement(
            product_id=product_id,
            quantity=qty.value,
            direction=direction,
            occurred_at=self._clock(),
            actor=actor,
            document_ref=document_ref,
            notes=notes,
        )
        self._movement_repo.add(movement)
        logger.debug(
            "Stock movement recorded",
            product_id=product_id,
            direction=direction.value,
            quantity=qty.value,
            document_ref=document_ref,
        )
        return movement

    def history(self, product_id: str | None = None) -> list[StockMovement]:
        """Movements newest first; ties keep the most recently recorded first."""
        if product_id is None:
            log = self._movement_repo.list_all()
        else:
            log = self._movement_repo.list_for_product(product_id)
        return sorted(reversed(log), key=lambda m: m.occurred_at, reverse=True)
