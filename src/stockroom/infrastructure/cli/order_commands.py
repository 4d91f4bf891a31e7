"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from stockroom.application.dto import OrderDTO, OrderLineSpec, order_to_dto
from stockroom.application.fulfill_order import FulfillOrderHandler
from stockroom.application.list_orders import ListOrdersHandler
from stockroom.application.show_order import ShowOrderHandler
from stockroom.domain.exceptions import DomainException
from stockroom.infrastructure.bootstrap import event_publisher, unit_of_work


def _parse_items(raw: str) -> list[OrderLineSpec]:
    """Parse '1:3,2:5' (product ID:quantity) into OrderLineSpec list."""
    specs: list[OrderLineSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderLineSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name}  [{dto.customer_document_masked}]")
    click.echo(f"Seller:   {dto.actor}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.finalized_at:
        click.echo(f"Finalized: {dto.finalized_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*55}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>14} {line.line_total:>14}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Order Total':<27} {dto.total:>28}")


@click.command("fulfill")
@click.option("--document", required=True, help="Customer CPF or CNPJ.")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.pass_obj
def order_fulfill(obj: dict, document: str, customer: str, items: str) -> None:
    """Sell items: create a finalized order and debit stock atomically."""
    specs = _parse_items(items)

    handler = FulfillOrderHandler(uow=unit_of_work(), publisher=event_publisher())

    try:
        order = handler.handle(
            customer_document=document,
            customer_name=customer,
            lines=specs,
            actor=obj["actor"],
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(order_to_dto(order))


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
def order_list() -> None:
    """List orders, newest first."""
    try:
        orders = ListOrdersHandler(uow=unit_of_work()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Created':<21} {'Customer':<24} {'Document':<20} {'Total':>14}")
    click.echo("-" * 89)
    for o in orders:
        click.echo(
            f"{o.id:<6} {o.created_at:<21} {o.customer_name:<24} "
            f"{o.customer_document_masked:<20} {o.total:>14}"
        )
