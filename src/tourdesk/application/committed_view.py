"""The actor's view of committed orders and passengers.

Only the reconciler replaces its contents wholesale; the commit
coordinator adds the order it has just written so the view is current
before the change feed catches up.
"""

from __future__ import annotations

from tourdesk.domain.model.order import Order
from tourdesk.domain.model.passenger import CommittedPassenger


class CommittedView:

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._passengers: dict[str, CommittedPassenger] = {}

    @property
    def orders(self) -> list[Order]:
        return sorted(self._orders.values(), key=lambda o: o.created_at, reverse=True)

    @property
    def passengers(self) -> list[CommittedPassenger]:
        return list(self._passengers.values())

    def passengers_for(self, order_id: str) -> list[CommittedPassenger]:
        return [p for p in self._passengers.values() if p.order_id == order_id]

    def record(self, order: Order, passengers: list[CommittedPassenger]) -> None:
        self._orders[order.id] = order
        for passenger in passengers:
            self._passengers[passenger.id] = passenger

    def replace_orders(self, orders: list[Order]) -> None:
        self._orders = {o.id: o for o in orders}

    def replace_passengers(self, passengers: list[CommittedPassenger]) -> None:
        self._passengers = {p.id: p for p in passengers}
