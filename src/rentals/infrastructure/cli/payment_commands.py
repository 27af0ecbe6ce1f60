"""CLI commands for payments and refunds."""

from __future__ import annotations

import click

from rentals.application.cancel_payment import CancelPaymentHandler
from rentals.application.dto import PaymentDTO
from rentals.application.link_payment import LinkPaymentHandler
from rentals.application.list_payments import ListPaymentsHandler
from rentals.application.payment_callback import PaymentCallbackHandler
from rentals.application.refund_payment import RefundPaymentHandler
from rentals.domain.exceptions import DomainException
from rentals.domain.model.auth import AuthContext
from rentals.domain.model.payment import PaymentMethod, PaymentType
from rentals.infrastructure.bootstrap import (
    event_publisher,
    rental_config,
    unit_of_work,
)


def _describe(dto: PaymentDTO) -> str:
    line = f"{dto.payment_no}  {dto.type:<8} {dto.amount:>10}  {dto.method:<14} {dto.status}"
    if dto.refunded_payment_id is not None:
        line += f"  (refund of #{dto.refunded_payment_id})"
    return line


@click.command("link")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--amount", required=True, help="Amount to pay.")
@click.option(
    "--method",
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    default=PaymentMethod.ALIPAY.value,
    show_default=True,
)
@click.option(
    "--type",
    "payment_type",
    type=click.Choice([PaymentType.RENTAL.value, PaymentType.DEPOSIT.value], case_sensitive=False),
    default=PaymentType.RENTAL.value,
    show_default=True,
)
@click.pass_obj
def payment_link(
    auth: AuthContext, order_id: int, amount: str, method: str, payment_type: str
) -> None:
    """Open a pending payment against a confirmed order."""
    handler = LinkPaymentHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, order_id, amount, method, payment_type)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment {dto.payment_no} opened: {dto.amount} ({dto.type})")


@click.command("callback")
@click.option("--payment-no", required=True, help="Payment number.")
@click.option("--status", required=True, help="Gateway status, e.g. TRADE_SUCCESS.")
@click.option("--txn", "transaction_id", default=None, help="Gateway transaction id.")
def payment_callback(payment_no: str, status: str, transaction_id: str | None) -> None:
    """Apply a (verified) gateway notification."""
    handler = PaymentCallbackHandler(unit_of_work(), rental_config(), event_publisher())

    try:
        dto = handler.handle(payment_no, status, transaction_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment {dto.payment_no} is {dto.status}.")


@click.command("refund")
@click.option("--payment-no", required=True, help="Settled payment to refund.")
@click.option("--amount", required=True, help="Amount to refund.")
@click.option("--reason", default="", help="Refund reason.")
@click.pass_obj
def payment_refund(auth: AuthContext, payment_no: str, amount: str, reason: str) -> None:
    """Refund part or all of a settled payment."""
    handler = RefundPaymentHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, payment_no, amount, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Refund {dto.payment_no} of {dto.amount} issued.")


@click.command("cancel")
@click.option("--payment-no", required=True, help="Pending payment to cancel.")
@click.pass_obj
def payment_cancel(auth: AuthContext, payment_no: str) -> None:
    """Cancel a payment that is still pending."""
    handler = CancelPaymentHandler(unit_of_work(), rental_config())

    try:
        dto = handler.handle(auth, payment_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment {dto.payment_no} cancelled.")


@click.command("list")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def payment_list(auth: AuthContext, order_id: int) -> None:
    """List the payments of an order."""
    handler = ListPaymentsHandler(unit_of_work(), rental_config())

    try:
        payments = handler.handle(auth, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not payments:
        click.echo("No payments found.")
        return
    for dto in payments:
        click.echo(_describe(dto))
