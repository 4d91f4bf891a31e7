"""Application service: List Orders use case (query, newest first)."""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, order_to_dto
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class ListOrdersHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[OrderDTO]:
        with self._uow as uow:
            orders = uow.orders.list_all()
        orders.sort(key=lambda o: (o.created_at, o.id or 0), reverse=True)
        return [order_to_dto(o) for o in orders]
