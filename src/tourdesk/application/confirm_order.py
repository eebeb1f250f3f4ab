"""Application service: Confirm Order use case.

Staff confirm a pending order; its passengers become active.
"""

from __future__ import annotations

import logging

from tourdesk.domain.exceptions import EntityNotFoundError, PermissionDenied
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository

logger = logging.getLogger(__name__)


class ConfirmOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
    ) -> None:
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo

    def handle(self, actor: Actor, order_id: str) -> None:
        if not actor.is_staff:
            raise PermissionDenied("Only staff can confirm orders")

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        order.confirm(edited_by=actor.id)
        passengers = self._passenger_repo.find(order_id=order.id)
        for passenger in passengers:
            passenger.activate()

        self._order_repo.save(order)
        self._passenger_repo.save_all(passengers)
        logger.info("Order %s confirmed by %s", order.id, actor.display_name)
