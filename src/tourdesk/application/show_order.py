"""Application service: Show Order / List Orders use cases (queries).

Visibility follows the actor's role: staff see every order, travelers
only their own, and providers their own plus orders flagged
``show_in_provider``.
"""

from __future__ import annotations

from tourdesk.application.dto import OrderDTO, order_to_dto
from tourdesk.domain.exceptions import EntityNotFoundError
from tourdesk.domain.model.actor import Actor, Role
from tourdesk.domain.model.order import Order
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository


def can_view(actor: Actor, order: Order) -> bool:
    if actor.is_staff or order.owner_id == actor.id:
        return True
    return actor.role == Role.PROVIDER and order.show_in_provider


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
    ) -> None:
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo

    def handle(self, actor: Actor, order_id: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        # Orders the actor may not see are reported as missing.
        if order is None or not can_view(actor, order):
            raise EntityNotFoundError(f"Order {order_id} not found")
        passengers = self._passenger_repo.find(order_id=order.id)
        return order_to_dto(order, sorted(passengers, key=lambda p: p.created_at))


class ListOrdersHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
    ) -> None:
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo

    def handle(self, actor: Actor, tour_id: str | None = None) -> list[OrderDTO]:
        owner = None if actor.is_staff or actor.role == Role.PROVIDER else actor.id
        orders = [
            o
            for o in self._order_repo.find(owner_id=owner, tour_id=tour_id)
            if can_view(actor, o)
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [
            order_to_dto(o, self._passenger_repo.find(order_id=o.id)) for o in orders
        ]
