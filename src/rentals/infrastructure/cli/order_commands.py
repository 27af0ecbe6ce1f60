"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from rentals.application.audit_order import AuditOrderHandler
from rentals.application.cancel_order import CancelOrderHandler
from rentals.application.check_availability import CheckAvailabilityHandler
from rentals.application.create_order import CreateOrderHandler
from rentals.application.dto import OrderDTO, OrderItemSpec, ReturnRequest
from rentals.application.list_orders import ListOrdersHandler, OrderListing
from rentals.application.return_order import ReturnOrderHandler
from rentals.application.show_order import ShowOrderHandler
from rentals.application.start_using_order import StartUsingOrderHandler
from rentals.application.update_order import UpdateOrderHandler
from rentals.domain.exceptions import DomainException
from rentals.domain.model.auth import AuthContext
from rentals.infrastructure.bootstrap import (
    event_publisher,
    rental_config,
    unit_of_work,
)

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:2,3:1' (item id : quantity) into an OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            item_id, qty_str = pair, "1"
        else:
            item_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{item_id}'."
            )
        specs.append(OrderItemSpec(item_id=item_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_no}  (#{dto.id}, status={dto.status})")
    click.echo(f"Renter:  {dto.user_id}")
    click.echo(f"Period:  {dto.start_date} -> {dto.end_date}  ({dto.rental_days} day(s))")
    click.echo(f"Created: {dto.created_at}")
    if dto.actual_return_date:
        click.echo(f"Returned: {dto.actual_return_date}")
    click.echo()
    click.echo(f"  {'Item':<24} {'Qty':>5} {'Price/day':>10} {'Total':>10}")
    click.echo(f"  {'-'*52}")
    for line in dto.items:
        click.echo(
            f"  {line.item_name:<24} {line.quantity:>5} {line.price_per_day:>10} {line.total_amount:>10}"
        )
    click.echo(f"  {'-'*52}")
    click.echo(f"  {'Order Total':<30} {dto.total_amount:>22}")
    click.echo(f"  {'Deposit':<30} {dto.deposit_amount:>22}")
    if dto.remark:
        click.echo()
        for line in dto.remark.splitlines():
            click.echo(f"  {line}")


@click.command("create")
@click.option("--start", "start", required=True, type=DATE, help="First day (YYYY-MM-DD).")
@click.option("--end", "end", required=True, type=DATE, help="Last day (YYYY-MM-DD).")
@click.option("--items", required=True, help="Items as 'ItemId:Qty,ItemId:Qty'.")
@click.option("--remark", default="", help="Free-text remark.")
@click.pass_obj
def order_create(
    auth: AuthContext, start: datetime, end: datetime, items: str, remark: str
) -> None:
    """Create a new rental order (PENDING until audited)."""
    specs = _parse_items(items)
    handler = CreateOrderHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, start.date(), end.date(), specs, remark=remark)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("show")
@click.argument("order_ref")
@click.pass_obj
def order_show(auth: AuthContext, order_ref: str) -> None:
    """Show an order by ID or order number."""
    handler = ShowOrderHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, order_ref)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option(
    "--view",
    type=click.Choice([v.value for v in OrderListing]),
    default=OrderListing.MINE.value,
    show_default=True,
)
@click.pass_obj
def order_list(auth: AuthContext, view: str) -> None:
    """List orders."""
    handler = ListOrdersHandler(unit_of_work(), rental_config())

    try:
        orders = handler.handle(auth, OrderListing(view))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return
    for dto in orders:
        click.echo(
            f"{dto.id:>4}  {dto.order_no}  {dto.status:<10} {dto.user_id:<12} "
            f"{dto.start_date} -> {dto.end_date}  {dto.total_amount:>10}"
        )


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--start", "start", type=DATE, default=None, help="New first day.")
@click.option("--end", "end", type=DATE, default=None, help="New last day.")
@click.option("--remark", default=None, help="Replace the remark.")
@click.pass_obj
def order_update(
    auth: AuthContext,
    order_id: int,
    start: datetime | None,
    end: datetime | None,
    remark: str | None,
) -> None:
    """Reschedule a PENDING order."""
    handler = UpdateOrderHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(
            auth,
            order_id,
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
            remark=remark,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("audit")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to audit.")
@click.option("--approve/--reject", "approved", required=True, help="Audit decision.")
@click.option("--comment", default="", help="Audit comment.")
@click.pass_obj
def order_audit(auth: AuthContext, order_id: int, approved: bool, comment: str) -> None:
    """Approve or reject an order."""
    handler = AuditOrderHandler(unit_of_work(), rental_config(), event_publisher())

    try:
        dto = handler.handle(auth, order_id, approved, comment)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_no} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default="", help="Cancellation reason.")
@click.pass_obj
def order_cancel(auth: AuthContext, order_id: int, reason: str) -> None:
    """Cancel a PENDING or CONFIRMED order."""
    handler = CancelOrderHandler(unit_of_work(), rental_config(), event_publisher())

    try:
        dto = handler.handle(auth, order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_no} cancelled.")


@click.command("start")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to start.")
@click.pass_obj
def order_start(auth: AuthContext, order_id: int) -> None:
    """Hand the items of a PAID order to the renter."""
    handler = StartUsingOrderHandler(unit_of_work(), rental_config(), event_publisher())

    try:
        dto = handler.handle(auth, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_no} is now {dto.status}.")


@click.command("return")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to return.")
@click.option("--date", "return_date", type=DATE, default=None, help="Return date (default today).")
@click.option("--damage", is_flag=True, default=False, help="Items came back damaged.")
@click.option("--damage-amount", default=None, help="Repair cost to book as an expense.")
@click.option("--damage-description", default="", help="What was damaged.")
@click.option("--remark", default="", help="Return remark.")
@click.pass_obj
def order_return(
    auth: AuthContext,
    order_id: int,
    return_date: datetime | None,
    damage: bool,
    damage_amount: str | None,
    damage_description: str,
    remark: str,
) -> None:
    """Take back the items of an IN_USE order."""
    handler = ReturnOrderHandler(unit_of_work(), rental_config(), event_publisher())
    request = ReturnRequest(
        order_id=order_id,
        return_date=return_date.date() if return_date else None,
        has_damage=damage,
        damage_description=damage_description,
        damage_amount=damage_amount,
        return_remark=remark,
    )

    try:
        dto = handler.handle(auth, request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_no} returned on {dto.actual_return_date}.")


@click.command("check")
@click.option("--item", "item_id", required=True, help="Item ID.")
@click.option("--start", "start", required=True, type=DATE, help="First day.")
@click.option("--end", "end", required=True, type=DATE, help="Last day.")
def order_check(item_id: str, start: datetime, end: datetime) -> None:
    """Check whether an item is free for a date range (advisory)."""
    handler = CheckAvailabilityHandler(unit_of_work())

    try:
        available = handler.handle(item_id, start.date(), end.date())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    state = "available" if available else "NOT available"
    click.echo(f"Item {item_id} is {state} from {start.date()} to {end.date()}.")
