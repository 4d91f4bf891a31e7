"""Domain events and the publisher port.

Events are handed to a publisher only *after* the unit of work has
committed.  Publishing is best-effort: a publisher failure never undoes a
committed operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from stockroom.domain.model.order import Order
from stockroom.domain.model.stock import StockMovement


@dataclass(frozen=True)
class FulfilledLine:
    product_id: str
    quantity: int
    unit_price: str


@dataclass(frozen=True)
class OrderFulfilled:
    name: ClassVar[str] = "orders.fulfilled"

    order_id: int
    customer_document: str
    customer_name: str
    actor: str
    lines: tuple[FulfilledLine, ...]
    total: str
    occurred_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> OrderFulfilled:
        return cls(
            order_id=order.id,  # type: ignore[arg-type]
            customer_document=order.customer_document.digits,
            customer_name=order.customer_name,
            actor=order.actor,
            lines=tuple(
                FulfilledLine(
                    product_id=line.product_id,
                    quantity=line.quantity.value,
                    unit_price=line.unit_price.format_plain(),
                )
                for line in order.lines
            ),
            total=order.total.format_plain(),
            occurred_at=order.finalized_at or order.created_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "timestamp": self.occurred_at.isoformat(),
            "data": {
                "order_id": self.order_id,
                "customer_document": self.customer_document,
                "customer_name": self.customer_name,
                "actor": self.actor,
                "lines": [
                    {
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                        "unit_price": line.unit_price,
                    }
                    for line in self.lines
                ],
                "total": self.total,
            },
        }


@dataclass(frozen=True)
class StockReceived:
    name: ClassVar[str] = "stock.received"

    movement_id: str
    product_id: str
    quantity: int
    actor: str
    document_ref: str | None
    notes: str | None
    occurred_at: datetime

    @classmethod
    def from_movement(cls, movement: StockMovement) -> StockReceived:
        return cls(
            movement_id=movement.id,
            product_id=movement.product_id,
            quantity=movement.quantity,
            actor=movement.actor,
            document_ref=movement.document_ref,
            notes=movement.notes,
            occurred_at=movement.occurred_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "timestamp": self.occurred_at.isoformat(),
            "data": {
                "movement_id": self.movement_id,
                "product_id": self.product_id,
                "quantity": self.quantity,
                "direction": "INBOUND",
                "document_ref": self.document_ref,
                "notes": self.notes,
                "actor": self.actor,
            },
        }


DomainEvent = OrderFulfilled | StockReceived


class EventPublisher(ABC):

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Hand an event to external consumers."""
