"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON and SQL
repositories but keep everything in a dict. No file I/O, no side
effects. Each fake can be told to fail so error paths can be exercised.
"""

from __future__ import annotations

import copy
import threading
from datetime import date, datetime, timezone

from tourdesk.application.ports import DocumentStore, Notifier
from tourdesk.domain.exceptions import StoreError, UploadFailed
from tourdesk.domain.model.order import Order
from tourdesk.domain.model.passenger import CommittedPassenger
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.model.value_objects import DepartureKey
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.seat_ledger import SeatLedger
from tourdesk.domain.repository.tour_repository import TourRepository


class FakeTourRepository(TourRepository):

    def __init__(self, tours: list[Tour] | None = None) -> None:
        self._store: dict[str, Tour] = {}
        for t in tours or []:
            self._store[t.id] = t
        self.fail_reads = False

    def get_by_id(self, tour_id: str) -> Tour | None:
        self._check()
        return self._store.get(tour_id)

    def get_by_title(self, title: str) -> Tour | None:
        self._check()
        for t in list(self._store.values()):
            if t.title.lower() == title.strip().lower():
                return t
        return None

    def list_all(self) -> list[Tour]:
        self._check()
        return list(self._store.values())

    def save(self, tour: Tour) -> None:
        self._store[tour.id] = tour

    def _check(self) -> None:
        if self.fail_reads:
            raise StoreError("tours unavailable")


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}
        self.fail_reads = False
        self.fail_save = False
        self.fail_delete = False
        self.saves = 0

    def get_by_id(self, order_id: str) -> Order | None:
        self._check()
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def get_by_draft_key(self, draft_key: str) -> Order | None:
        self._check()
        for order in list(self._store.values()):
            if order.draft_key == draft_key:
                return copy.deepcopy(order)
        return None

    def find(
        self,
        *,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[Order]:
        self._check()
        return [
            copy.deepcopy(o)
            for o in list(self._store.values())
            if (owner_id is None or o.owner_id == owner_id)
            and (tour_id is None or o.tour_id == tour_id)
            and (departure_date is None or o.departure_date == departure_date)
        ]

    def save(self, order: Order) -> None:
        if self.fail_save:
            raise StoreError("orders write failed")
        self.saves += 1
        self._store[order.id] = copy.deepcopy(order)

    def delete(self, order_id: str) -> None:
        if self.fail_delete:
            raise StoreError("orders delete failed")
        self._store.pop(order_id, None)

    def all(self) -> list[Order]:
        return list(self._store.values())

    def _check(self) -> None:
        if self.fail_reads:
            raise StoreError("orders unavailable")


class FakePassengerRepository(PassengerRepository):

    def __init__(self) -> None:
        self._store: dict[str, CommittedPassenger] = {}
        self.fail_reads = False
        self.fail_save = False

    def get_by_id(self, passenger_id: str) -> CommittedPassenger | None:
        self._check()
        p = self._store.get(passenger_id)
        return copy.deepcopy(p) if p is not None else None

    def find(
        self,
        *,
        order_id: str | None = None,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[CommittedPassenger]:
        self._check()
        return [
            copy.deepcopy(p)
            for p in list(self._store.values())
            if (order_id is None or p.order_id == order_id)
            and (owner_id is None or p.owner_id == owner_id)
            and (tour_id is None or p.tour_id == tour_id)
            and (departure_date is None or p.departure_date == departure_date)
        ]

    def save(self, passenger: CommittedPassenger) -> None:
        self.save_all([passenger])

    def save_all(self, passengers: list[CommittedPassenger]) -> None:
        if self.fail_save:
            raise StoreError("passengers write failed")
        for p in passengers:
            self._store[p.id] = copy.deepcopy(p)

    def delete_by_order(self, order_id: str) -> None:
        self._store = {k: p for k, p in self._store.items() if p.order_id != order_id}

    def all(self) -> list[CommittedPassenger]:
        return list(self._store.values())

    def _check(self) -> None:
        if self.fail_reads:
            raise StoreError("passengers unavailable")


class FakeSeatLedger(SeatLedger):

    def __init__(self) -> None:
        self._booked: dict[DepartureKey, int] = {}
        self.claimed_at: dict[DepartureKey, datetime] = {}
        self._lock = threading.Lock()
        self.fail = False
        self.fail_release = False

    def booked(self, departure: DepartureKey) -> int | None:
        return self._booked.get(departure)

    def claim(
        self,
        departure: DepartureKey,
        seats: int,
        capacity: int | None,
        *,
        seed_booked: int = 0,
    ) -> bool:
        if self.fail:
            raise StoreError("ledger unavailable")
        with self._lock:
            current = self._booked.setdefault(departure, seed_booked)
            if capacity is not None and current + seats > capacity:
                return False
            self._booked[departure] = current + seats
            self.claimed_at[departure] = datetime.now(timezone.utc)
            return True

    def release(self, departure: DepartureKey, seats: int) -> None:
        if self.fail_release:
            raise StoreError("ledger unavailable")
        with self._lock:
            if departure in self._booked:
                self._booked[departure] = max(0, self._booked[departure] - seats)

    def resync(self, departure: DepartureKey, booked: int, *, idle_since: datetime) -> bool:
        with self._lock:
            if self._booked.get(departure, 0) <= booked:
                return False
            claimed_at = self.claimed_at.get(departure)
            if claimed_at is not None and claimed_at > idle_since:
                return False
            self._booked[departure] = booked
            return True


class RecordingNotifier(Notifier):

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def notify(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    @property
    def last(self) -> tuple[str, str] | None:
        return self.messages[-1] if self.messages else None


class FakeDocumentStore(DocumentStore):

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: dict[str, bytes] = {}

    def upload(self, filename: str, content: bytes) -> str:
        if self.fail:
            raise UploadFailed(f"{filename} could not be stored")
        path = f"documents/{filename}"
        self.uploads[path] = content
        return path
