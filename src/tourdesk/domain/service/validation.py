"""Domain service: booking validation.

Pure functions over a manifest snapshot. They never mutate a passenger and
never consult seat availability; the result is an ordered list of
``ValidationError`` records, empty when everything is acceptable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from tourdesk.domain.model.dates import add_months
from tourdesk.domain.model.passenger import PassengerProfile
from tourdesk.domain.model.tour import Tour

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
PASSPORT_MIN_VALIDITY_MONTHS = 6


@dataclass(frozen=True)
class ValidationError:
    """A single problem found in a booking.

    ``field`` is a stable identifier (``passenger_<id>_<attribute>`` for
    passenger fields, ``tour``/``departure``/``passengers``/``payment`` for
    manifest-level problems) that a form can map back to an input.
    """

    field: str
    message: str
    passenger_id: str | None = None
    attribute: str | None = None

    def __str__(self) -> str:
        return self.message


def _passenger_error(passenger_id: str, attribute: str, message: str) -> ValidationError:
    return ValidationError(
        field=f"passenger_{passenger_id}_{attribute}",
        message=message,
        passenger_id=passenger_id,
        attribute=attribute,
    )


def _blank(value: str | None) -> bool:
    return not value or not str(value).strip()


def validate_passenger(
    passenger: PassengerProfile,
    passenger_id: str,
    *,
    tour: Tour | None,
    departure_date: date | None,
    min_validity_months: int = PASSPORT_MIN_VALIDITY_MONTHS,
) -> list[ValidationError]:
    """Check one passenger's required fields and passport validity."""
    errors: list[ValidationError] = []

    def fail(attribute: str, message: str) -> None:
        errors.append(_passenger_error(passenger_id, attribute, message))

    if _blank(passenger.first_name):
        fail("first_name", "First name is required")
    if _blank(passenger.last_name):
        fail("last_name", "Last name is required")
    if _blank(passenger.email) or not EMAIL_PATTERN.search(passenger.email):
        fail("email", "Valid email is required")
    if _blank(passenger.phone):
        fail("phone", "Phone number is required")
    if _blank(passenger.nationality):
        fail("nationality", "Nationality is required")
    if _blank(passenger.gender):
        fail("gender", "Gender is required")
    if _blank(passenger.passport_number):
        fail("passport_number", "Passport number is required")

    if passenger.passport_expiry is None:
        fail("passport_expiry", "Passport expiry date is required")
    elif departure_date is not None:
        minimum = add_months(departure_date, min_validity_months)
        if passenger.passport_expiry < minimum:
            fail(
                "passport_expiry",
                f"Passport must be valid for at least {min_validity_months} "
                f"months after departure (until {minimum.isoformat()})",
            )

    if _blank(passenger.room_type):
        fail("room_type", "Room type is required")

    if _blank(passenger.hotel):
        fail("hotel", "Hotel selection is required")
    elif tour is not None and not tour.offers_hotel(passenger.hotel):
        fail("hotel", f"Hotel '{passenger.hotel}' is not offered by {tour.title}")

    return errors


def validate_manifest(
    *,
    tour: Tour | None,
    departure_date: date | None,
    passengers: Sequence,
    payment_method: str | None = None,
    require_payment: bool = True,
    min_validity_months: int = PASSPORT_MIN_VALIDITY_MONTHS,
) -> list[ValidationError]:
    """Validate a whole booking: manifest-level checks first, then each passenger.

    ``passengers`` holds ``DraftPassenger`` (or anything with an ``id`` and
    the profile fields). With ``require_payment=False`` the payment method
    is not checked, which is how the review step is entered before a
    payment method has been chosen.
    """
    errors: list[ValidationError] = []

    if tour is None:
        errors.append(ValidationError("tour", "Please select a tour"))
    if departure_date is None:
        errors.append(ValidationError("departure", "Please select a departure date"))
    elif tour is not None and not tour.offers_departure(departure_date):
        errors.append(
            ValidationError(
                "departure",
                f"{tour.title} does not depart on {departure_date.isoformat()}",
            )
        )
    if not passengers:
        errors.append(ValidationError("passengers", "At least one passenger is required"))
    if require_payment and _blank(payment_method):
        errors.append(ValidationError("payment", "Please select a payment method"))

    for passenger in passengers:
        errors.extend(
            validate_passenger(
                passenger,
                passenger.id,
                tour=tour,
                departure_date=departure_date,
                min_validity_months=min_validity_months,
            )
        )
    return errors
