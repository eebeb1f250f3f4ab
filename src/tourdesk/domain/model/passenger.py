"""Passenger records in their two lifecycle phases.

A ``DraftPassenger`` lives only in an actor's manifest: it has no order and
never counts against capacity. Committing a draft produces a
``CommittedPassenger`` that carries the persisted ``order_id``. The two
phases share the same profile fields but are distinct types, so "is this
passenger attached to an order" is answered by the type, not by checking
for an empty string.
"""

from __future__ import annotations

import random
import re
import string
import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.value_objects import Money

SERIAL_PATTERN = re.compile(r"^PASS-[A-Z0-9]{6}$")


def new_id() -> str:
    return str(uuid.uuid4())


def make_serial() -> str:
    return "PASS-" + "".join(random.choices(string.ascii_uppercase + string.digits, k=6))


def looks_durable(serial: str | int | None) -> bool:
    """True for serials already issued by a commit (``PASS-XXXXXX``)."""
    return bool(serial) and SERIAL_PATTERN.match(str(serial)) is not None


class PassengerStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    CANCELLED = "cancelled"


@dataclass(kw_only=True)
class PassengerProfile:
    """Fields a traveler fills in, shared by both lifecycle phases."""

    first_name: str = ""
    last_name: str = ""
    name: str = ""
    date_of_birth: date | None = None
    age: int | None = None
    gender: str = ""
    passport_number: str = ""
    passport_expiry: date | None = None
    nationality: str = ""
    room_type: str = ""
    hotel: str = ""
    additional_services: list[str] = field(default_factory=list)
    price: Money = field(default_factory=Money.zero)
    email: str = ""
    phone: str = ""
    emergency_phone: str = ""
    allergy: str = ""
    notes: str = ""
    passport_upload: str | None = None

    def profile(self) -> dict:
        """Copy of the profile fields only (no identity or order data)."""
        data = {f.name: getattr(self, f.name) for f in fields(PassengerProfile)}
        data["additional_services"] = list(self.additional_services)
        return data


PROFILE_FIELDS = tuple(f.name for f in fields(PassengerProfile))


@dataclass(kw_only=True)
class DraftPassenger(PassengerProfile):
    """A passenger being assembled in a manifest; not attached to any order."""

    id: str = field(default_factory=new_id)
    owner_id: str
    serial_no: int = 1

    @property
    def order_id(self) -> str:
        return ""

    def commit(
        self,
        *,
        order_id: str,
        tour_id: str,
        departure_date: date,
        status: PassengerStatus = PassengerStatus.PENDING,
    ) -> CommittedPassenger:
        """Attach this draft to a persisted order."""
        if not order_id:
            raise RuleViolation("A committed passenger needs an order id")
        serial = str(self.serial_no)
        return CommittedPassenger(
            **self.profile(),
            id=self.id,
            order_id=order_id,
            owner_id=self.owner_id,
            tour_id=tour_id,
            departure_date=departure_date,
            serial_no=serial if looks_durable(serial) else make_serial(),
            status=status,
        )


@dataclass(kw_only=True)
class CommittedPassenger(PassengerProfile):
    """A passenger permanently attached to an order."""

    id: str
    order_id: str
    owner_id: str
    tour_id: str
    departure_date: date
    serial_no: str
    status: PassengerStatus = PassengerStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def activate(self) -> None:
        if self.status == PassengerStatus.CANCELLED:
            raise RuleViolation(f"Passenger {self.serial_no} is cancelled")
        self.status = PassengerStatus.ACTIVE

    def cancel(self) -> None:
        self.status = PassengerStatus.CANCELLED
