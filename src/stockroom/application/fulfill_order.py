"""Application service: Fulfill Order use case.

Turns a requested item list into a finalized Order plus one ledger debit
per line, all inside a single unit of work:

  Validating: read-only; every line is checked (product active, enough
              stock) before anything is written.
  Committing: the order, its lines and the debits are staged and then
              committed together.

Any failure rolls the whole unit of work back and surfaces the original
error.  The products' ledgers stay locked from the first availability read
until the commit, so two fulfillments can never both spend the same units.
"""

from __future__ import annotations

from enum import Enum

import structlog

from stockroom.application.dto import OrderLineSpec
from stockroom.domain.events import EventPublisher, OrderFulfilled
from stockroom.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from stockroom.domain.model.order import Order
from stockroom.domain.model.stock import MovementDirection
from stockroom.domain.model.value_objects import FiscalId, Money, Quantity
from stockroom.domain.service.stock_ledger import Clock, StockLedger, utc_now
from stockroom.domain.unit_of_work import AbstractUnitOfWork

logger = structlog.get_logger(__name__)


class FulfillmentStage(Enum):
    VALIDATING = "VALIDATING"
    COMMITTING = "COMMITTING"
    FINALIZED = "FINALIZED"
    ABORTED = "ABORTED"


class FulfillOrderHandler:

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
        customer_document: str,
        customer_name: str,
        lines: list[OrderLineSpec],
        actor: str,
    ) -> Order:
        """Fulfill an order atomically and return it FINALIZED.

        Raises:
            ValidationError: malformed document, name, actor or quantities.
            ProductNotFoundError: a product is missing or inactive.
            InsufficientStockError: a product cannot cover the request.
            ConcurrencyConflictError: stock changed underneath; retryable.
            PersistenceError: the store could not commit.
        """
        document = FiscalId.of(customer_document)
        order = Order.create(document, customer_name, actor, created_at=self._clock())
        requested = self._requested_quantities(lines)

        log = logger.bind(customer_document=document.masked, actor=order.actor)
        stage = FulfillmentStage.VALIDATING
        log.info("Fulfillment started", stage=stage.value, line_count=len(lines))

        try:
            with self._uow as uow, uow.lock_products(requested):
                ledger = StockLedger(uow.movements, uow.products, self._clock)
                self._validate(uow, ledger, requested)

                stage = FulfillmentStage.COMMITTING
                log.info("Fulfillment validated", stage=stage.value)
                self._stage_writes(uow, ledger, order, lines)
                uow.commit()
        except Exception as exc:
            log.warning(
                "Fulfillment aborted",
                stage=FulfillmentStage.ABORTED.value,
                failed_during=stage.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        log.info(
            "Fulfillment finalized",
            stage=FulfillmentStage.FINALIZED.value,
            order_id=order.id,
            total=order.total.format_plain(),
        )
        self._publish(OrderFulfilled.from_order(order))
        return order

    # --- Phases ---------------------------------------------------------------

    @staticmethod
    def _requested_quantities(lines: list[OrderLineSpec]) -> dict[str, int]:
        """Total requested quantity per product, in first-seen order."""
        if not lines:
            raise ValidationError("Order must contain at least one item")
        totals: dict[str, int] = {}
        for spec in lines:
            qty = Quantity(spec.quantity)
            totals[spec.product_id] = totals.get(spec.product_id, 0) + qty.value
        return totals

    @staticmethod
    def _validate(
        uow: AbstractUnitOfWork,
        ledger: StockLedger,
        requested: dict[str, int],
    ) -> None:
        for product_id, qty in requested.items():
            if uow.products.find_active(product_id) is None:
                raise ProductNotFoundError(product_id)
            available = ledger.available_quantity(product_id)
            if available < qty:
                raise InsufficientStockError(product_id, available, qty)

    def _stage_writes(
        self,
        uow: AbstractUnitOfWork,
        ledger: StockLedger,
        order: Order,
        lines: list[OrderLineSpec],
    ) -> None:
        uow.orders.add(order)

        total = Money.ZERO
        for spec in lines:
            product = uow.products.find_active(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)

            line = order.add_line(product, spec.quantity)
            total = total + line.line_total

            ledger.record_movement(
                product_id=product.id,
                quantity=spec.quantity,
                direction=MovementDirection.OUTBOUND,
                actor=order.actor,
                document_ref=order.reference,
                notes=f"Automatic debit for order #{order.id}",
            )

        order.finalize(total, self._clock())

    # --- Events ---------------------------------------------------------------

    def _publish(self, event: OrderFulfilled) -> None:
        if self._publisher is None:
            return
        try:
            self._publisher.publish(event)
        except Exception:
            logger.exception("Event publication failed", event_name=event.name)
