"""Interfaces the application layer needs from the outside world.

Repositories are domain-level abstractions; these ports cover the
collaborators that only matter to the use cases: user notifications,
document uploads and the change feed of committed records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Callable

SUCCESS = "success"
ERROR = "error"


class Notifier(ABC):

    @abstractmethod
    def notify(self, level: str, message: str) -> None:
        """Show a short message to the acting user (``success`` or ``error``)."""


class DocumentStore(ABC):

    @abstractmethod
    def upload(self, filename: str, content: bytes) -> str:
        """Store a document and return its path.

        Raises UploadFailed when the document could not be stored.
        """


# ---------------------------------------------------------------------------
# Change feed
# ---------------------------------------------------------------------------

ORDERS = "orders"
PASSENGERS = "passengers"
TOURS = "tours"


@dataclass(frozen=True)
class ChangeEvent:
    """"Something changed" notice for one committed record.

    Carries only enough to route the event; subscribers re-fetch state.
    """

    entity: str
    action: str
    entity_id: str
    owner_id: str | None = None
    tour_id: str | None = None
    departure_date: date | None = None


Callback = Callable[[ChangeEvent], None]


class Subscription(ABC):

    @abstractmethod
    def close(self) -> None:
        """Stop receiving events."""


class ChangeFeed(ABC):

    @abstractmethod
    def subscribe(
        self, entity: str, callback: Callback, owner_id: str | None = None
    ) -> Subscription:
        """Deliver events for ``entity``; with ``owner_id`` only that owner's."""

    @abstractmethod
    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every matching subscriber."""
