"""Application service: Receive Stock use case.

Records an INBOUND ledger movement (goods arriving, usually against a
supplier invoice) and announces it once committed.
"""

from __future__ import annotations

import structlog

from stockroom.domain.events import EventPublisher, StockReceived
from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.stock import MovementDirection, StockMovement
from stockroom.domain.service.stock_ledger import Clock, StockLedger, utc_now
from stockroom.domain.unit_of_work import AbstractUnitOfWork

logger = structlog.get_logger(__name__)


class ReceiveStockHandler:

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        publisher: EventPublisher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._publisher = publisher
        self._clock = clock

    def handle(
        self,
        product_id: str,
        quantity: int,
        actor: str,
        invoice: str | None = None,
        notes: str | None = None,
    ) -> StockMovement:
        if not actor or not actor.strip():
            raise ValidationError("Actor is required")

        with self._uow as uow:
            ledger = StockLedger(uow.movements, uow.products, self._clock)
            movement = ledger.record_movement(
                product_id=product_id,
                quantity=quantity,
                direction=MovementDirection.INBOUND,
                actor=actor.strip(),
                document_ref=invoice or None,
                notes=notes or None,
            )
            uow.commit()

        logger.info(
            "Stock received",
            product_id=product_id,
            quantity=movement.quantity,
            movement_id=movement.id,
        )
        if self._publisher is not None:
            event = StockReceived.from_movement(movement)
            try:
                self._publisher.publish(event)
            except Exception:
                logger.exception("Event publication failed", event_name=event.name)
        return movement
