"""Application service: Add Tour use case."""

from __future__ import annotations

from datetime import date

from tourdesk.domain.exceptions import PermissionDenied, RuleViolation
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.dates import parse_date
from tourdesk.domain.model.passenger import new_id
from tourdesk.domain.model.tour import Tour, TourService
from tourdesk.domain.model.value_objects import Money
from tourdesk.domain.repository.tour_repository import TourRepository


class AddTourHandler:

    def __init__(self, tour_repo: TourRepository) -> None:
        self._tour_repo = tour_repo

    def handle(
        self,
        actor: Actor,
        title: str,
        *,
        capacity: int | None,
        departure_dates: list[str],
        hotels: list[str] | None = None,
        services: dict[str, str] | None = None,
        base_price: str = "0",
        show_in_provider: bool = True,
    ) -> Tour:
        """Add a new tour to the catalog."""
        if not actor.is_staff:
            raise PermissionDenied("Only staff can add tours")
        if not title or not title.strip():
            raise RuleViolation("Tour title is required")

        existing = self._tour_repo.get_by_title(title)
        if existing is not None:
            raise RuleViolation(f"Tour '{title}' already exists")

        tour = Tour(
            id=new_id(),
            title=title.strip(),
            capacity=capacity,
            departure_dates=sorted(self._parse_dates(departure_dates)),
            hotels=[h.strip() for h in hotels or [] if h.strip()],
            services=[
                TourService(name=name.strip(), price=Money.of(price))
                for name, price in (services or {}).items()
            ],
            base_price=Money.of(base_price),
            show_in_provider=show_in_provider,
        )
        self._tour_repo.save(tour)
        return tour

    @staticmethod
    def _parse_dates(values: list[str]) -> set[date]:
        dates: set[date] = set()
        for value in values:
            try:
                parsed = parse_date(value)
            except ValueError as exc:
                raise RuleViolation(f"Invalid departure date: {value!r}") from exc
            if parsed is not None:
                dates.add(parsed)
        if not dates:
            raise RuleViolation("A tour needs at least one departure date")
        return dates
