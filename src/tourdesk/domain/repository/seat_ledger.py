"""Abstract seat ledger: the per-departure booked-seat counter.

The ledger is the concurrency guard of a commit. ``claim`` must be a
single conditional write (``booked = booked + n WHERE booked + n <=
capacity``) so two commits racing for the last seat cannot both succeed.

The ledger can drift above the derived count when a release fails; the
commit coordinator brings it back with ``resync``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from tourdesk.domain.model.value_objects import DepartureKey


class SeatLedger(ABC):

    @abstractmethod
    def booked(self, departure: DepartureKey) -> int | None:
        """Return the ledger's booked count, or None if the departure has no row yet."""

    @abstractmethod
    def claim(
        self,
        departure: DepartureKey,
        seats: int,
        capacity: int | None,
        *,
        seed_booked: int = 0,
    ) -> bool:
        """Atomically add ``seats`` to the departure's booked count.

        Returns False (and changes nothing) when the result would exceed
        ``capacity``. ``capacity=None`` claims unconditionally. A departure
        without a row is first seeded with ``seed_booked``.
        """

    @abstractmethod
    def release(self, departure: DepartureKey, seats: int) -> None:
        """Give back previously claimed seats; the count never drops below zero."""

    @abstractmethod
    def resync(self, departure: DepartureKey, booked: int, *, idle_since: datetime) -> bool:
        """Lower a drifted booked count to ``booked``, the derived count.

        Conditional write: applies only when the row holds more than
        ``booked`` and no claim was made after ``idle_since``, so seats held
        by commits still writing their passengers are never handed out.
        Returns True when the row was changed.
        """
