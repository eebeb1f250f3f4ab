"""Flat read models of orders, passengers and departures for the CLI."""

from __future__ import annotations

from dataclasses import dataclass

from tourdesk.domain.model.order import Order
from tourdesk.domain.model.passenger import CommittedPassenger


@dataclass(frozen=True)
class PassengerDTO:
    """Output: a committed passenger as displayed to the user."""

    id: str
    serial_no: str
    name: str
    nationality: str
    passport_number: str
    passport_expiry: str  # ISO date or ""
    room_type: str
    hotel: str
    price: str  # formatted, e.g. "$1200.00"
    status: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    tour_title: str
    departure_date: str
    status: str
    lead_name: str
    email: str
    phone: str
    payment_method: str
    total_price: str
    paid_amount: str
    balance: str
    passenger_count: int
    capacity_override: bool
    created_by: str
    created_at: str
    passengers: list[PassengerDTO]


@dataclass(frozen=True)
class DepartureDTO:
    """Output: one departure of a tour with its live seat count."""

    tour_id: str
    tour_title: str
    departure_date: str
    seats: str  # a number, "unlimited" or "unknown"
    status: str


def passenger_to_dto(passenger: CommittedPassenger) -> PassengerDTO:
    return PassengerDTO(
        id=passenger.id,
        serial_no=passenger.serial_no,
        name=passenger.name or f"{passenger.first_name} {passenger.last_name}".strip(),
        nationality=passenger.nationality,
        passport_number=passenger.passport_number,
        passport_expiry=(
            passenger.passport_expiry.isoformat() if passenger.passport_expiry else ""
        ),
        room_type=passenger.room_type,
        hotel=passenger.hotel,
        price=str(passenger.price),
        status=passenger.status.value,
    )


def order_to_dto(order: Order, passengers: list[CommittedPassenger]) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        tour_title=order.tour_title,
        departure_date=order.departure_date.isoformat(),
        status=order.status.value,
        lead_name=order.lead_name,
        email=order.email,
        phone=order.phone,
        payment_method=order.payment_method,
        total_price=str(order.total_price),
        paid_amount=str(order.paid_amount),
        balance=str(order.balance),
        passenger_count=order.passenger_count,
        capacity_override=order.capacity_override,
        created_by=order.created_by,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        passengers=[passenger_to_dto(p) for p in passengers],
    )
