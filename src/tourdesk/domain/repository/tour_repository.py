"""Abstract repository for Tour aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tourdesk.domain.model.tour import Tour


class TourRepository(ABC):

    @abstractmethod
    def get_by_id(self, tour_id: str) -> Tour | None:
        """Return a tour by its ID, or None if not found."""

    @abstractmethod
    def get_by_title(self, title: str) -> Tour | None:
        """Return a tour by its title (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Tour]:
        """Return every tour in the catalog."""

    @abstractmethod
    def save(self, tour: Tour) -> None:
        """Persist a new or updated tour."""
