import click

from stockroom.infrastructure import bootstrap
from stockroom.infrastructure.cli.order_commands import order_fulfill, order_list, order_show
from stockroom.infrastructure.cli.product_commands import (
    product_add,
    product_deactivate,
    product_update,
)
from stockroom.infrastructure.cli.stock_commands import (
    stock_available,
    stock_history,
    stock_receive,
)
from stockroom.infrastructure.logging_config import configure_logging


@click.group()
@click.option(
    "--actor",
    envvar="STOCKROOM_ACTOR",
    default="operator",
    show_default=True,
    help="Operator recorded on stock movements and orders.",
)
@click.pass_context
def cli(ctx: click.Context, actor: str) -> None:
    """Stockroom: stock ledger and order fulfillment"""
    try:
        cfg = bootstrap.settings()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    configure_logging(cfg.log_level, cfg.log_format)
    ctx.obj = {"actor": actor}
    ctx.call_on_close(bootstrap.shutdown)


@cli.group()
def order() -> None:
    """Fulfill and inspect orders."""


@cli.group()
def product() -> None:
    """Maintain catalog entries."""


@cli.group()
def stock() -> None:
    """Receive stock and inspect the ledger."""


# Register subcommands
order.add_command(order_fulfill)
order.add_command(order_list)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_deactivate)
product.add_command(product_update)
stock.add_command(stock_available)
stock.add_command(stock_history)
stock.add_command(stock_receive)
