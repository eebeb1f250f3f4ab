"""Domain service: Capacity Oracle.

Answers "how many seats are left on this departure" from committed state
only. The count is derived on every call and never cached: a draft
passenger never counts, and neither does anyone on a cancelled order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from tourdesk.domain.exceptions import StoreError
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.tour_repository import TourRepository

logger = logging.getLogger(__name__)


class SeatStatus(Enum):
    AVAILABLE = "available"
    FULL = "full"
    UNLIMITED = "unlimited"
    ORACLE_UNAVAILABLE = "oracle_unavailable"
    UNKNOWN_TOUR = "unknown_tour"


@dataclass(frozen=True)
class SeatAvailability:
    """Point-in-time answer for one departure.

    ``seats`` is None for an uncapped tour. An unreachable store reports
    ``available=False, seats=0`` like a full tour, but with its own status
    so callers can tell "full" from "could not check".
    """

    available: bool
    seats: int | None
    status: SeatStatus
    booked: int = 0

    @property
    def reachable(self) -> bool:
        return self.status != SeatStatus.ORACLE_UNAVAILABLE

    @property
    def unlimited(self) -> bool:
        return self.status == SeatStatus.UNLIMITED

    def admits(self, count: int) -> bool:
        """True when ``count`` more passengers fit on this departure."""
        if self.unlimited:
            return True
        return self.available and self.seats is not None and count <= self.seats

    @property
    def message(self) -> str:
        if self.status == SeatStatus.UNLIMITED:
            return "Unlimited seats"
        if self.status == SeatStatus.AVAILABLE:
            noun = "seat" if self.seats == 1 else "seats"
            return f"{self.seats} {noun} left"
        if self.status == SeatStatus.FULL:
            return "Tour is full"
        if self.status == SeatStatus.UNKNOWN_TOUR:
            return "Tour not found"
        return "Seat availability could not be checked"


class CapacityOracle:

    def __init__(
        self,
        tour_repo: TourRepository,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
    ) -> None:
        self._tour_repo = tour_repo
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo

    def remaining_seats(self, tour_id: str, departure_date: date) -> SeatAvailability:
        """Compute remaining seats for (tour, departure) from committed state."""
        try:
            tour = self._tour_repo.get_by_id(tour_id)
            if tour is None:
                return SeatAvailability(False, 0, SeatStatus.UNKNOWN_TOUR)
            if not tour.is_capped:
                return SeatAvailability(True, None, SeatStatus.UNLIMITED)
            booked = self.booked_seats(tour.id, departure_date)
        except StoreError as exc:
            logger.error(
                "Seat check failed for %s on %s: %s", tour_id, departure_date, exc
            )
            return SeatAvailability(False, 0, SeatStatus.ORACLE_UNAVAILABLE)

        return self._from_count(tour, booked)

    def booked_seats(self, tour_id: str, departure_date: date) -> int:
        """Passengers on non-cancelled orders for the departure.

        Raises StoreError when the store cannot be read.
        """
        live_orders = {
            order.id
            for order in self._order_repo.find(
                tour_id=tour_id, departure_date=departure_date
            )
            if order.consumes_capacity
        }
        if not live_orders:
            return 0
        passengers = self._passenger_repo.find(
            tour_id=tour_id, departure_date=departure_date
        )
        return sum(1 for p in passengers if p.order_id in live_orders)

    @staticmethod
    def _from_count(tour: Tour, booked: int) -> SeatAvailability:
        seats = max(0, (tour.capacity or 0) - booked)
        status = SeatStatus.AVAILABLE if seats > 0 else SeatStatus.FULL
        return SeatAvailability(seats > 0, seats, status, booked)
