"""Tour aggregate.

Tours are created and edited by staff. From the traveler's side a tour is
read-only: it supplies the departure dates, hotels, add-on services and
the seat capacity that bookings are admitted against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.value_objects import Money


@dataclass(frozen=True)
class TourService:
    """A named add-on a passenger can select (guide, horse ride, ...)."""

    name: str
    price: Money


@dataclass
class Tour:
    """A bookable trip product.

    ``capacity`` is the number of seats per departure; ``None`` means the
    tour is uncapped and every departure is always available.
    """

    id: str
    title: str
    capacity: int | None = None
    departure_dates: list[date] = field(default_factory=list)
    hotels: list[str] = field(default_factory=list)
    services: list[TourService] = field(default_factory=list)
    base_price: Money = field(default_factory=Money.zero)
    show_in_provider: bool = True

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise RuleViolation("Tour title is required")
        if self.capacity is not None and self.capacity < 0:
            raise RuleViolation("Tour capacity cannot be negative")

    @property
    def is_capped(self) -> bool:
        return self.capacity is not None

    def offers_departure(self, departure_date: date) -> bool:
        return departure_date in self.departure_dates

    def offers_hotel(self, hotel: str) -> bool:
        wanted = hotel.strip().lower()
        return any(h.strip().lower() == wanted for h in self.hotels)

    def service_price(self, name: str) -> Money:
        """Price of an add-on by name; names the tour does not offer cost nothing."""
        for service in self.services:
            if service.name == name:
                return service.price
        return Money.zero(self.base_price.currency)

    def price_with_services(self, service_names: list[str]) -> Money:
        return Money.total(
            [self.base_price, *(self.service_price(n) for n in service_names)],
            self.base_price.currency,
        )
