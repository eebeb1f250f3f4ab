"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import click

from tourdesk.application.dto import OrderDTO
from tourdesk.domain.model.tour import Tour
from tourdesk.infrastructure.bootstrap import Container


def resolve_tour(container: Container, ref: str) -> Tour:
    """Find a tour by title or by ID."""
    tour = container.tours.get_by_title(ref) or container.tours.get_by_id(ref)
    if tour is None:
        raise click.ClickException(f"Tour not found: '{ref}'")
    return tour


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status})")
    click.echo(f"Tour:     {dto.tour_title} departing {dto.departure_date}")
    click.echo(f"Lead:     {dto.lead_name}  {dto.email}  {dto.phone}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at} by {dto.created_by}")
    if dto.capacity_override:
        click.echo("Note:     booked past tour capacity by staff")
    click.echo()
    click.echo(f"  {'Serial':<12} {'Name':<24} {'Passport':<12} {'Room':<8} {'Price':>10} {'Status':>10}")
    click.echo(f"  {'-'*81}")
    for p in dto.passengers:
        click.echo(
            f"  {p.serial_no:<12} {p.name:<24} {p.passport_number:<12} "
            f"{p.room_type:<8} {p.price:>10} {p.status:>10}"
        )
    click.echo(f"  {'-'*81}")
    click.echo(f"  {'Total':<27} {dto.total_price:>20}")
    click.echo(f"  {'Paid':<27} {dto.paid_amount:>20}")
    click.echo(f"  {'Balance':<27} {dto.balance:>20}")
