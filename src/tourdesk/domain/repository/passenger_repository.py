"""Abstract repository for committed passengers.

Draft passengers are never stored here; they live only in a manifest.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from tourdesk.domain.model.passenger import CommittedPassenger


class PassengerRepository(ABC):

    @abstractmethod
    def get_by_id(self, passenger_id: str) -> CommittedPassenger | None:
        """Return a passenger by its ID, or None if not found."""

    @abstractmethod
    def find(
        self,
        *,
        order_id: str | None = None,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[CommittedPassenger]:
        """Return passengers matching every filter that is not None."""

    @abstractmethod
    def save(self, passenger: CommittedPassenger) -> None:
        """Persist a new or updated passenger."""

    @abstractmethod
    def save_all(self, passengers: list[CommittedPassenger]) -> None:
        """Persist a batch of passengers as one write: all of them or none."""

    @abstractmethod
    def delete_by_order(self, order_id: str) -> None:
        """Remove every passenger attached to an order."""
