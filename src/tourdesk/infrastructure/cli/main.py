import logging

import click

from tourdesk.domain.model.actor import Actor, Role
from tourdesk.infrastructure.cli.booking_commands import book
from tourdesk.infrastructure.cli.order_commands import (
    order_cancel,
    order_confirm,
    order_list,
    order_pay,
    order_show,
)
from tourdesk.infrastructure.cli.tour_commands import seats, tour_add, tour_list
from tourdesk.infrastructure.config import get_settings


@click.group()
@click.option("--actor", "actor_id", envvar="TOURDESK_ACTOR", default="guest", show_default=True,
              help="ID of the acting user (authentication happens elsewhere).")
@click.option("--role", type=click.Choice([r.value for r in Role]), envvar="TOURDESK_ROLE",
              default=Role.USER.value, show_default=True, help="Role of the acting user.")
@click.pass_context
def cli(ctx: click.Context, actor_id: str, role: str) -> None:
    """tourdesk: tour bookings with live seat control"""
    logging.basicConfig(
        level=get_settings().LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Actor(id=actor_id, username=actor_id, role=Role(role))


@cli.group()
def tour() -> None:
    """Manage tours."""


@cli.group()
def order() -> None:
    """Manage orders."""


# Register subcommands
tour.add_command(tour_add)
tour.add_command(tour_list)
order.add_command(order_cancel)
order.add_command(order_confirm)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_show)
cli.add_command(seats)
cli.add_command(book)
