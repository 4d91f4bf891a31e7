"""Application service: stock queries (available quantity, ledger history)."""

from __future__ import annotations

from stockroom.application.dto import StockMovementDTO, movement_to_dto
from stockroom.domain.exceptions import NotFoundError
from stockroom.domain.service.stock_ledger import StockLedger
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class StockQueryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def available(self, product_id: str) -> int:
        with self._uow as uow:
            if uow.products.get_by_id(product_id) is None:
                raise NotFoundError(f"Product '{product_id}' not found")
            return StockLedger(uow.movements, uow.products).available_quantity(product_id)

    def history(self, product_id: str | None = None) -> list[StockMovementDTO]:
        with self._uow as uow:
            movements = StockLedger(uow.movements, uow.products).history(product_id)
        return [movement_to_dto(m) for m in movements]
