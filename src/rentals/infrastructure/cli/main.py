import logging

import click

from rentals.domain.model.auth import AuthContext
from rentals.infrastructure.bootstrap import log_level
from rentals.infrastructure.cli.finance_commands import finance_summary
from rentals.infrastructure.cli.item_commands import item_add, item_list, item_update
from rentals.infrastructure.cli.order_commands import (
    order_audit,
    order_cancel,
    order_check,
    order_create,
    order_list,
    order_return,
    order_show,
    order_start,
    order_update,
)
from rentals.infrastructure.cli.payment_commands import (
    payment_callback,
    payment_cancel,
    payment_link,
    payment_list,
    payment_refund,
)


@click.group()
@click.option("--user", envvar="RENTALS_USER", default="guest", show_default=True,
              help="Acting user id.")
@click.option("--role", "roles", multiple=True, help="Role of the acting user (repeatable).")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, user: str, roles: tuple[str, ...], verbose: bool) -> None:
    """Rentals: rental order lifecycle engine"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = AuthContext.of(user, *roles)


@cli.group()
def item() -> None:
    """Manage catalog items."""


@cli.group()
def order() -> None:
    """Manage rental orders."""


@cli.group()
def payment() -> None:
    """Manage payments and refunds."""


@cli.group()
def finance() -> None:
    """Inspect the finance ledger."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_list)
item.add_command(item_update)
order.add_command(order_audit)
order.add_command(order_cancel)
order.add_command(order_check)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_return)
order.add_command(order_show)
order.add_command(order_start)
order.add_command(order_update)
payment.add_command(payment_callback)
payment.add_command(payment_cancel)
payment.add_command(payment_link)
payment.add_command(payment_list)
payment.add_command(payment_refund)
finance.add_command(finance_summary)
