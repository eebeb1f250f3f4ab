"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from tourdesk.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_draft_key(self, draft_key: str) -> Order | None:
        """Return the order committed from the given manifest, or None."""

    @abstractmethod
    def find(
        self,
        *,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[Order]:
        """Return orders matching every filter that is not None."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""

    @abstractmethod
    def delete(self, order_id: str) -> None:
        """Remove an order. Deleting a missing order is a no-op."""
