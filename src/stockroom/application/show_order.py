"""Application service: Show Order use case (query)."""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, order_to_dto
from stockroom.domain.exceptions import OrderNotFoundError
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order_to_dto(order)
