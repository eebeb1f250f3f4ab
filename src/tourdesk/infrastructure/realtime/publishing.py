"""Repository decorators that announce every write on the change feed.

Reads are passed straight through. Events are published after the
underlying write has succeeded.
"""

from __future__ import annotations

from datetime import date

from tourdesk.application.ports import ORDERS, PASSENGERS, TOURS, ChangeEvent, ChangeFeed
from tourdesk.domain.model.order import Order
from tourdesk.domain.model.passenger import CommittedPassenger
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.tour_repository import TourRepository


class PublishingTourRepository(TourRepository):

    def __init__(self, inner: TourRepository, feed: ChangeFeed) -> None:
        self._inner = inner
        self._feed = feed

    def get_by_id(self, tour_id: str) -> Tour | None:
        return self._inner.get_by_id(tour_id)

    def get_by_title(self, title: str) -> Tour | None:
        return self._inner.get_by_title(title)

    def list_all(self) -> list[Tour]:
        return self._inner.list_all()

    def save(self, tour: Tour) -> None:
        self._inner.save(tour)
        self._feed.publish(ChangeEvent(TOURS, "upsert", tour.id))


class PublishingOrderRepository(OrderRepository):

    def __init__(self, inner: OrderRepository, feed: ChangeFeed) -> None:
        self._inner = inner
        self._feed = feed

    def get_by_id(self, order_id: str) -> Order | None:
        return self._inner.get_by_id(order_id)

    def get_by_draft_key(self, draft_key: str) -> Order | None:
        return self._inner.get_by_draft_key(draft_key)

    def find(
        self,
        *,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[Order]:
        return self._inner.find(
            owner_id=owner_id, tour_id=tour_id, departure_date=departure_date
        )

    def save(self, order: Order) -> None:
        self._inner.save(order)
        self._feed.publish(self._event("upsert", order))

    def delete(self, order_id: str) -> None:
        order = self._inner.get_by_id(order_id)
        self._inner.delete(order_id)
        if order is not None:
            self._feed.publish(self._event("delete", order))

    @staticmethod
    def _event(action: str, order: Order) -> ChangeEvent:
        return ChangeEvent(
            ORDERS,
            action,
            order.id,
            owner_id=order.owner_id,
            tour_id=order.tour_id,
            departure_date=order.departure_date,
        )


class PublishingPassengerRepository(PassengerRepository):

    def __init__(self, inner: PassengerRepository, feed: ChangeFeed) -> None:
        self._inner = inner
        self._feed = feed

    def get_by_id(self, passenger_id: str) -> CommittedPassenger | None:
        return self._inner.get_by_id(passenger_id)

    def find(
        self,
        *,
        order_id: str | None = None,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[CommittedPassenger]:
        return self._inner.find(
            order_id=order_id,
            owner_id=owner_id,
            tour_id=tour_id,
            departure_date=departure_date,
        )

    def save(self, passenger: CommittedPassenger) -> None:
        self.save_all([passenger])

    def save_all(self, passengers: list[CommittedPassenger]) -> None:
        self._inner.save_all(passengers)
        # One event per order touched, not per passenger.
        announced: set[str] = set()
        for p in passengers:
            if p.order_id in announced:
                continue
            announced.add(p.order_id)
            self._feed.publish(
                ChangeEvent(
                    PASSENGERS,
                    "upsert",
                    p.order_id,
                    owner_id=p.owner_id,
                    tour_id=p.tour_id,
                    departure_date=p.departure_date,
                )
            )

    def delete_by_order(self, order_id: str) -> None:
        gone = self._inner.find(order_id=order_id)
        self._inner.delete_by_order(order_id)
        if gone:
            first = gone[0]
            self._feed.publish(
                ChangeEvent(
                    PASSENGERS,
                    "delete",
                    order_id,
                    owner_id=first.owner_id,
                    tour_id=first.tour_id,
                    departure_date=first.departure_date,
                )
            )
