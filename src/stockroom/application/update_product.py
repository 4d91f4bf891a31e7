"""Application service: Update Product use case."""

from __future__ import annotations

from stockroom.domain.exceptions import NotFoundError
from stockroom.domain.model.value_objects import Money
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, new_price: str) -> None:
        """Update a product's price.

        This does NOT affect any existing orders; they captured a
        price snapshot at order time.
        """
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError(f"Product with ID '{product_id}' not found")

            product.update_price(Money.of(new_price))
            uow.products.save(product)
            uow.commit()
