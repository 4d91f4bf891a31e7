"""CLI commands for the stock ledger."""

from __future__ import annotations

import click

from stockroom.application.receive_stock import ReceiveStockHandler
from stockroom.application.stock_queries import StockQueryHandler
from stockroom.domain.exceptions import DomainException
from stockroom.infrastructure.bootstrap import event_publisher, unit_of_work


@click.command("receive")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--invoice", default=None, help="Supplier invoice number.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.pass_obj
def stock_receive(
    obj: dict, product_id: str, quantity: int, invoice: str | None, notes: str | None
) -> None:
    """Record goods arriving for a product."""
    handler = ReceiveStockHandler(uow=unit_of_work(), publisher=event_publisher())

    try:
        movement = handler.handle(
            product_id=product_id,
            quantity=quantity,
            actor=obj["actor"],
            invoice=invoice,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Received {movement.quantity} of product #{product_id} (movement {movement.id})")


@click.command("available")
@click.option("--product", "product_id", required=True, help="Product ID.")
def stock_available(product_id: str) -> None:
    """Show the quantity currently available for a product."""
    handler = StockQueryHandler(uow=unit_of_work())

    try:
        quantity = handler.available(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id}: {quantity} available")


@click.command("history")
@click.option("--product", "product_id", default=None, help="Only this product.")
def stock_history(product_id: str | None) -> None:
    """List ledger movements, newest first."""
    try:
        movements = StockQueryHandler(uow=unit_of_work()).history(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not movements:
        click.echo("No stock movements found.")
        return

    click.echo(
        f"{'When':<21} {'Product':<8} {'Dir':<9} {'Qty':>6} {'Document':<14} {'Actor':<12} Notes"
    )
    click.echo("-" * 90)
    for m in movements:
        click.echo(
            f"{m.occurred_at:<21} {m.product_id:<8} {m.direction:<9} {m.quantity:>6} "
            f"{m.document_ref or '-':<14} {m.actor:<12} {m.notes or ''}"
        )
