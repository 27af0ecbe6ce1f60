"""CLI commands for the item catalog."""

from __future__ import annotations

import click

from rentals.application.manage_items import (
    AddItemHandler,
    ListItemsHandler,
    UpdateItemHandler,
)
from rentals.domain.exceptions import DomainException
from rentals.domain.model.auth import AuthContext
from rentals.infrastructure.bootstrap import rental_config, unit_of_work


@click.command("add")
@click.option("--name", required=True, help="Item name.")
@click.option("--price", required=True, help="Price per day (e.g. 150.00).")
@click.option("--deposit", default="0", show_default=True, help="Deposit per unit.")
@click.pass_obj
def item_add(auth: AuthContext, name: str, price: str, deposit: str) -> None:
    """Add an item to the catalog."""
    handler = AddItemHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, name=name, price_per_day=price, deposit=deposit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {dto.id} '{dto.name}' added at {dto.price_per_day}/day")


@click.command("list")
def item_list() -> None:
    """List catalog items."""
    items = ListItemsHandler(unit_of_work()).handle()

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Price/day':>10} {'Deposit':>10}  Status")
    click.echo("-" * 62)
    for dto in items:
        click.echo(
            f"{dto.id:<6} {dto.name:<24} {dto.price_per_day:>10} {dto.deposit:>10}  {dto.status}"
        )


@click.command("update")
@click.option("--id", "item_id", required=True, help="Item ID to update.")
@click.option("--price", default=None, help="New price per day.")
@click.option("--status", default=None, help="AVAILABLE, MAINTENANCE or REMOVED.")
@click.pass_obj
def item_update(
    auth: AuthContext, item_id: str, price: str | None, status: str | None
) -> None:
    """Change an item's daily price or catalog status."""
    if price is None and status is None:
        raise click.UsageError("Nothing to update: pass --price and/or --status")

    handler = UpdateItemHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, item_id, price_per_day=price, status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {dto.id} '{dto.name}': {dto.price_per_day}/day, {dto.status}")
