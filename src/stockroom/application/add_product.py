"""Application service: Add Product use case."""

from __future__ import annotations

from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.product import Product
from stockroom.domain.model.value_objects import Money
from stockroom.domain.unit_of_work import AbstractUnitOfWork


class AddProductHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, name: str, price: str) -> Product:
        """Add a new, active product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        unit_price = Money.of(price)
        if unit_price.is_zero:
            raise ValidationError("Product price must be greater than zero")

        with self._uow as uow:
            if uow.products.get_by_name(name.strip()) is not None:
                raise ValidationError(f"Product '{name.strip()}' already exists")

            product = Product(
                id=uow.products.next_id(), name=name.strip(), price=unit_price
            )
            uow.products.add(product)
            uow.commit()
        return product
