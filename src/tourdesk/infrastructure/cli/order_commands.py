"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from tourdesk.application.cancel_order import CancelOrderHandler
from tourdesk.application.confirm_order import ConfirmOrderHandler
from tourdesk.application.record_payment import RecordPaymentHandler
from tourdesk.application.show_order import ListOrdersHandler, ShowOrderHandler
from tourdesk.domain.exceptions import DomainException
from tourdesk.domain.model.actor import Actor
from tourdesk.infrastructure.bootstrap import build
from tourdesk.infrastructure.cli.common import display_order, resolve_tour


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.pass_obj
def order_show(actor: Actor, order_id: str) -> None:
    """Show details of an existing order."""
    container = build()
    handler = ShowOrderHandler(container.orders, container.passengers)

    try:
        dto = handler.handle(actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("list")
@click.option("--tour", "tour_ref", default=None, help="Only orders for this tour (title or ID).")
@click.pass_obj
def order_list(actor: Actor, tour_ref: str | None) -> None:
    """List the orders visible to the acting user."""
    container = build()
    handler = ListOrdersHandler(container.orders, container.passengers)

    try:
        tour_id = resolve_tour(container, tour_ref).id if tour_ref else None
        orders = handler.handle(actor, tour_id=tour_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders.")
        return

    click.echo(f"  {'Order':<36} {'Tour':<22} {'Departure':<12} {'Pax':>4} {'Total':>10} {'Status':>10}")
    click.echo(f"  {'-'*99}")
    for o in orders:
        click.echo(
            f"  {o.id:<36} {o.tour_title[:22]:<22} {o.departure_date:<12} "
            f"{o.passenger_count:>4} {o.total_price:>10} {o.status:>10}"
        )


@click.command("confirm")
@click.option("--id", "order_id", required=True, help="Order ID to confirm.")
@click.pass_obj
def order_confirm(actor: Actor, order_id: str) -> None:
    """Confirm a pending order (staff only)."""
    container = build()
    handler = ConfirmOrderHandler(container.orders, container.passengers)

    try:
        handler.handle(actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} confirmed, passengers are now active.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.pass_obj
def order_cancel(actor: Actor, order_id: str) -> None:
    """Cancel an order and give its seats back."""
    container = build()
    handler = CancelOrderHandler(container.orders, container.passengers, container.seats)

    try:
        handler.handle(actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} cancelled, seats released.")


@click.command("pay")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--amount", required=True, help="Amount received, e.g. 250.00")
@click.pass_obj
def order_pay(actor: Actor, order_id: str, amount: str) -> None:
    """Record a payment received for an order (staff only)."""
    handler = RecordPaymentHandler(build().orders)

    try:
        updated = handler.handle(actor, order_id, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id}: paid {updated.paid_amount}, balance {updated.balance}")
