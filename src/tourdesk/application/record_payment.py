"""Application service: Record Payment use case.

Only the amount received is tracked; no payment is processed here.
"""

from __future__ import annotations

from tourdesk.domain.exceptions import EntityNotFoundError, PermissionDenied
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.order import Order
from tourdesk.domain.model.value_objects import Money
from tourdesk.domain.repository.order_repository import OrderRepository


class RecordPaymentHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, actor: Actor, order_id: str, amount: str) -> Order:
        if not actor.is_staff:
            raise PermissionDenied("Only staff can record payments")

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        order.record_payment(Money.of(amount), edited_by=actor.id)
        self._order_repo.save(order)
        return order
