"""CLI commands for tours and their departures."""

from __future__ import annotations

import click

from tourdesk.application.add_tour import AddTourHandler
from tourdesk.application.show_departures import ShowDeparturesHandler
from tourdesk.domain.exceptions import DomainException
from tourdesk.domain.model.actor import Actor
from tourdesk.infrastructure.bootstrap import build
from tourdesk.infrastructure.cli.common import resolve_tour


def _parse_services(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('Guide:50', 'Horse ride:30') into {name: price}."""
    services: dict[str, str] = {}
    for pair in raw:
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid service format '{pair}'. Expected 'Name:Price'."
            )
        name, price = pair.rsplit(":", 1)
        services[name.strip()] = price.strip()
    return services


@click.command("add")
@click.option("--title", required=True, help="Tour title.")
@click.option("--capacity", type=int, default=None, help="Seats per departure (omit for unlimited).")
@click.option("--date", "dates", multiple=True, required=True, help="Departure date YYYY-MM-DD (repeatable).")
@click.option("--hotel", "hotels", multiple=True, help="Hotel option (repeatable).")
@click.option("--service", "services", multiple=True, help="Add-on as 'Name:Price' (repeatable).")
@click.option("--base-price", default="0", show_default=True, help="Price per passenger.")
@click.option("--hide-from-providers", is_flag=True, default=False, help="Hide bookings from provider accounts.")
@click.pass_obj
def tour_add(
    actor: Actor,
    title: str,
    capacity: int | None,
    dates: tuple[str, ...],
    hotels: tuple[str, ...],
    services: tuple[str, ...],
    base_price: str,
    hide_from_providers: bool,
) -> None:
    """Add a tour to the catalog (staff only)."""
    handler = AddTourHandler(tour_repo=build().tours)

    try:
        created = handler.handle(
            actor,
            title,
            capacity=capacity,
            departure_dates=list(dates),
            hotels=list(hotels),
            services=_parse_services(services),
            base_price=base_price,
            show_in_provider=not hide_from_providers,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    seats_text = "unlimited" if created.capacity is None else str(created.capacity)
    click.echo(f"Tour '{created.title}' added (id={created.id}, seats={seats_text})")


@click.command("list")
def tour_list() -> None:
    """List all tours."""
    try:
        tours = build().tours.list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not tours:
        click.echo("No tours yet.")
        return

    click.echo(f"  {'Title':<28} {'Seats':>9} {'Price':>10}  Departures")
    click.echo(f"  {'-'*70}")
    for t in sorted(tours, key=lambda t: t.title.lower()):
        seats_text = "unlimited" if t.capacity is None else str(t.capacity)
        dates = ", ".join(d.isoformat() for d in sorted(t.departure_dates))
        click.echo(f"  {t.title:<28} {seats_text:>9} {str(t.base_price):>10}  {dates}")


@click.command("seats")
@click.option("--tour", "tour_ref", default=None, help="Tour title or ID (all tours when omitted).")
def seats(tour_ref: str | None) -> None:
    """Show remaining seats per departure."""
    container = build()
    try:
        tour_id = resolve_tour(container, tour_ref).id if tour_ref else None
        lines = ShowDeparturesHandler(container.tours, container.oracle).handle(tour_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No departures.")
        return

    click.echo(f"  {'Tour':<28} {'Departure':<12} {'Seats left':>10}  Status")
    click.echo(f"  {'-'*66}")
    for line in lines:
        click.echo(
            f"  {line.tour_title:<28} {line.departure_date:<12} {line.seats:>10}  {line.status}"
        )
