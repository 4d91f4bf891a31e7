"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockroom.domain.model.order import Order
from stockroom.domain.model.stock import StockMovement

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: what the customer asked for (product ID + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineDTO:
    """Output: a single order line as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "R$ 15,00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_document: str
    customer_document_masked: str
    customer_name: str
    actor: str
    status: str
    lines: list[OrderLineDTO]
    total: str
    created_at: str
    finalized_at: str | None


@dataclass(frozen=True)
class StockMovementDTO:
    id: str
    product_id: str
    direction: str
    quantity: int
    actor: str
    document_ref: str | None
    notes: str | None
    occurred_at: str


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_document=order.customer_document.formatted,
        customer_document_masked=order.customer_document.masked,
        customer_name=order.customer_name,
        actor=order.actor,
        status=order.status.value,
        lines=[
            OrderLineDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity.value,
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
            )
            for line in order.lines
        ],
        total=str(order.total),
        created_at=order.created_at.strftime(_TIMESTAMP_FORMAT),
        finalized_at=(
            order.finalized_at.strftime(_TIMESTAMP_FORMAT)
            if order.finalized_at
            else None
        ),
    )


def movement_to_dto(movement: StockMovement) -> StockMovementDTO:
    return StockMovementDTO(
        id=movement.id,
        product_id=movement.product_id,
        direction=movement.direction.value,
        quantity=movement.quantity,
        actor=movement.actor,
        document_ref=movement.document_ref,
        notes=movement.notes,
        occurred_at=movement.occurred_at.strftime(_TIMESTAMP_FORMAT),
    )
