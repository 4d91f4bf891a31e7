"""Application service: Deactivate Product use case.

An inactive product keeps its ledger history but can no longer be sold
or receive stock.
"""

from __future__ import annotations

from stockroom.domain.exceptions import NotFoundError
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class DeactivateProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str) -> None:
        with self._uow as uow, uow.lock_products([product_id]):
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError(f"Product with ID '{product_id}' not found")
            product.deactivate()
            uow.products.save(product)
            uow.commit()
