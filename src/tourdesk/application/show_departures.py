"""Application service: Show Departures use case (query)."""

from __future__ import annotations

from datetime import date

from tourdesk.application.dto import DepartureDTO
from tourdesk.domain.repository.tour_repository import TourRepository
from tourdesk.domain.service.capacity_oracle import CapacityOracle, SeatStatus


class ShowDeparturesHandler:

    def __init__(self, tour_repo: TourRepository, oracle: CapacityOracle) -> None:
        self._tour_repo = tour_repo
        self._oracle = oracle

    def handle(
        self, tour_id: str | None = None, *, upcoming_from: date | None = None
    ) -> list[DepartureDTO]:
        tours = self._tour_repo.list_all()
        if tour_id is not None:
            tours = [t for t in tours if t.id == tour_id]

        lines: list[DepartureDTO] = []
        for tour in sorted(tours, key=lambda t: t.title.lower()):
            for when in sorted(tour.departure_dates):
                if upcoming_from is not None and when < upcoming_from:
                    continue
                availability = self._oracle.remaining_seats(tour.id, when)
                if availability.status == SeatStatus.UNLIMITED:
                    seats = "unlimited"
                elif availability.reachable:
                    seats = str(availability.seats)
                else:
                    seats = "unknown"
                lines.append(
                    DepartureDTO(
                        tour_id=tour.id,
                        tour_title=tour.title,
                        departure_date=when.isoformat(),
                        seats=seats,
                        status=availability.status.value,
                    )
                )
        return lines
