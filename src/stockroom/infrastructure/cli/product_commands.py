"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from stockroom.application.add_product import AddProductHandler
from stockroom.application.deactivate_product import DeactivateProductHandler
from stockroom.application.update_product import UpdateProductHandler
from stockroom.domain.exceptions import DomainException
from stockroom.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
def product_add(name: str, price: str) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(uow=unit_of_work())

    try:
        product = handler.handle(name=name, price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price."""
    handler = UpdateProductHandler(uow=unit_of_work())

    try:
        handler.handle(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} price updated to {price}")


@click.command("deactivate")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_deactivate(product_id: str) -> None:
    """Withdraw a product from sale (its ledger history is kept)."""
    handler = DeactivateProductHandler(uow=unit_of_work())

    try:
        handler.handle(product_id=product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deactivated.")
