"""CLI command for the booking wizard.

Passengers come from a CSV file (header row with field names such as
``first_name,last_name,email,...``) or are typed in at the prompt.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import TextIO

import click

from tourdesk.application.booking_wizard import BookingWizard, StepResult
from tourdesk.domain.exceptions import DomainException
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.passenger import DraftPassenger
from tourdesk.domain.service.validation import ValidationError
from tourdesk.infrastructure.bootstrap import build
from tourdesk.infrastructure.cli.common import resolve_tour
from tourdesk.infrastructure.notifiers import ClickNotifier

# (field, label, required)
PROMPTED_FIELDS = [
    ("first_name", "First name", True),
    ("last_name", "Last name", True),
    ("email", "Email", True),
    ("phone", "Phone", True),
    ("gender", "Gender", True),
    ("date_of_birth", "Date of birth (YYYY-MM-DD)", False),
    ("nationality", "Nationality", True),
    ("passport_number", "Passport number", True),
    ("passport_expiry", "Passport expiry (YYYY-MM-DD)", True),
    ("room_type", "Room type", True),
    ("hotel", "Hotel", True),
    ("additional_services", "Add-on services (comma separated)", False),
    ("emergency_phone", "Emergency phone", False),
    ("allergy", "Allergies", False),
]
_LABELS = {name: label for name, label, _ in PROMPTED_FIELDS}


def _fail(result: StepResult) -> click.ClickException:
    lines = [result.message] + [f"  - {e.message}" for e in result.errors]
    return click.ClickException("\n".join(lines))


def _current(passenger: DraftPassenger, field: str) -> str:
    value = getattr(passenger, field)
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _prompt_field(wizard: BookingWizard, passenger: DraftPassenger, field: str, required: bool) -> None:
    label = _LABELS.get(field, field)
    if field == "hotel" and wizard.tour is not None and wizard.tour.hotels:
        label = f"{label} [{' / '.join(wizard.tour.hotels)}]"
    while True:
        value = click.prompt(
            f"    {label}",
            default=_current(passenger, field) or ("" if not required else None),
            show_default=bool(_current(passenger, field)),
        )
        result = wizard.update_passenger(passenger.id, field, value)
        if result.ok:
            return
        click.secho(f"    {result.message}", fg="red", err=True)


def _enter_passengers(wizard: BookingWizard) -> None:
    for passenger in wizard.manifest.passengers:
        click.echo(f"  Passenger {passenger.serial_no}")
        for field, _, required in PROMPTED_FIELDS:
            _prompt_field(wizard, passenger, field, required)


def _fix_errors(wizard: BookingWizard, errors: list[ValidationError]) -> None:
    for error in errors:
        if error.passenger_id is None or error.attribute is None:
            continue
        passenger = wizard.manifest.get(error.passenger_id)
        click.secho(f"  Passenger {passenger.serial_no}: {error.message}", fg="yellow")
        _prompt_field(wizard, passenger, error.attribute, True)


@click.command("book")
@click.option("--tour", "tour_ref", required=True, help="Tour title or ID.")
@click.option("--date", "departure", required=True, help="Departure date YYYY-MM-DD.")
@click.option("--csv", "csv_file", type=click.File("r", encoding="utf-8"), default=None,
              help="Import passengers from a CSV file.")
@click.option("--passengers", "count", type=int, default=1, show_default=True,
              help="Number of passengers to enter at the prompt (ignored with --csv).")
@click.option("--passport", "passports", multiple=True,
              type=(int, click.Path(exists=True, dir_okay=False, path_type=Path)),
              help="Passport copy for a passenger: SERIAL FILE (repeatable).")
@click.option("--payment", default=None, help="Payment method, e.g. 'bank transfer'.")
@click.option("--yes", is_flag=True, default=False, help="Book without asking for confirmation.")
@click.pass_obj
def book(
    actor: Actor,
    tour_ref: str,
    departure: str,
    csv_file: TextIO | None,
    count: int,
    passports: tuple[tuple[int, Path], ...],
    payment: str | None,
    yes: bool,
) -> None:
    """Book passengers on a tour departure."""
    try:
        container = build()
        chosen = resolve_tour(container, tour_ref)
        wizard, reconciler, _ = container.booking_session(actor, ClickNotifier())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    reconciler.start()
    try:
        result = wizard.select_tour(chosen.id, departure)
        if not result.ok:
            raise _fail(result)
        click.echo(f"{chosen.title} on {wizard.departure_date}: {result.message}")

        # Step 2: passengers
        if csv_file is not None:
            result = wizard.import_passengers(csv.DictReader(csv_file))
            if not result.ok:
                raise _fail(result)
            for error in result.errors:
                click.secho(f"  skipped: {error.message}", fg="yellow", err=True)
        else:
            result = wizard.add_passengers(count)
            if not result.ok:
                raise _fail(result)
            _enter_passengers(wizard)

        drafts = wizard.manifest.passengers
        for serial, path in passports:
            if not 1 <= serial <= len(drafts):
                raise click.BadParameter(f"No passenger with serial {serial}", param_hint="--passport")
            result = wizard.attach_document(drafts[serial - 1].id, path.name, path.read_bytes())
            if not result.ok:
                raise _fail(result)

        result = wizard.review()
        while not result.ok and csv_file is None and any(e.passenger_id for e in result.errors):
            _fix_errors(wizard, result.errors)
            result = wizard.review()
        if not result.ok:
            raise _fail(result)

        # Step 3: review and commit
        method = payment or click.prompt("Payment method", default="bank transfer")
        result = wizard.choose_payment_method(method)
        if not result.ok:
            raise _fail(result)

        click.echo()
        for p in wizard.manifest.passengers:
            click.echo(f"  {p.serial_no:>2}. {p.name:<28} {p.room_type:<8} {str(p.price):>10}")
        if not yes:
            click.confirm(f"Book {len(wizard.manifest)} passengers?", abort=True)

        result = wizard.commit()
        if not result.ok:
            raise _fail(result)

        committed = result.commit
        click.echo(f"Order {committed.order.id} created  (status={committed.order.status.value})")
        for p in committed.passengers:
            click.echo(f"  {p.serial_no}  {p.name}")
    finally:
        reconciler.stop()
