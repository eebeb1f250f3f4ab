"""Application service: Cancel Order use case.

Cancelling an order cancels its passengers and gives their seats back
to the departure's seat ledger. Staff may cancel any order; a traveler
only their own order while it is still pending.
"""

from __future__ import annotations

import logging

from tourdesk.domain.exceptions import EntityNotFoundError, PermissionDenied
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.order import OrderStatus
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.seat_ledger import SeatLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
        seat_ledger: SeatLedger,
    ) -> None:
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo
        self._seat_ledger = seat_ledger

    def handle(self, actor: Actor, order_id: str) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        if not actor.is_staff:
            if order.owner_id != actor.id:
                raise EntityNotFoundError(f"Order {order_id} not found")
            if order.status != OrderStatus.PENDING:
                raise PermissionDenied("Only pending orders can be cancelled; contact the agency")

        order.cancel(edited_by=actor.id)
        passengers = self._passenger_repo.find(order_id=order.id)
        for passenger in passengers:
            passenger.cancel()

        self._order_repo.save(order)
        try:
            self._passenger_repo.save_all(passengers)
        finally:
            # A saved cancelled order no longer counts against the departure.
            if passengers:
                self._seat_ledger.release(order.departure, len(passengers))
        logger.info(
            "Order %s cancelled by %s, %d seats released on %s",
            order.id, actor.display_name, len(passengers), order.departure,
        )
