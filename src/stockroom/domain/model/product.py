"""Product aggregate.

Products live independently of orders and of the stock ledger.  Prices
change and products are withdrawn from sale; neither affects orders that
already captured a price.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Only *active* products can be sold or receive stock.
    """

    id: str
    name: str
    price: Money
    active: bool = True

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.is_zero:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def deactivate(self) -> None:
        if not self.active:
            raise ValidationError(f"Product '{self.name}' is already inactive")
        self.active = False
