"""CLI commands for the finance ledger."""

from __future__ import annotations

import click

from rentals.application.finance_summary import FinanceSummaryHandler
from rentals.domain.exceptions import DomainException
from rentals.domain.model.auth import AuthContext
from rentals.infrastructure.bootstrap import rental_config, unit_of_work


@click.command("summary")
@click.option("--order", "order_id", type=int, default=None, help="Limit to one order.")
@click.option("--records", "show_records", is_flag=True, default=False, help="List every entry.")
@click.pass_obj
def finance_summary(auth: AuthContext, order_id: int | None, show_records: bool) -> None:
    """Show income, expenses and refunds."""
    handler = FinanceSummaryHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Income:   {dto.total_income:>12}")
    click.echo(f"Expenses: {dto.total_expense:>12}")
    click.echo(f"Refunds:  {dto.total_refund:>12}")
    click.echo(f"Net:      {dto.net:>12}")
    if dto.by_category:
        click.echo()
        for category, amount in dto.by_category.items():
            click.echo(f"  {category:<18} {amount:>12}")
    if show_records:
        click.echo()
        for r in dto.records:
            click.echo(
                f"  {r.record_no}  {r.type:<8} {r.category:<8} {r.amount:>10}  {r.description}"
            )
