"""Application service: Realtime Reconciler.

Keeps the actor's committed view in step with the record store. Change
events are treated as "something changed" hints only: on every event the
affected entity set is re-fetched in full and the view replaced, then
the seat count of the wizard's active departure is recomputed.

The reconciler never reads or writes the draft manifest.
"""

from __future__ import annotations

import logging

from tourdesk.application.booking_wizard import BookingWizard
from tourdesk.application.committed_view import CommittedView
from tourdesk.application.ports import (
    ERROR,
    ORDERS,
    PASSENGERS,
    TOURS,
    ChangeEvent,
    ChangeFeed,
    Notifier,
    Subscription,
)
from tourdesk.domain.exceptions import StoreError
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository

logger = logging.getLogger(__name__)


class RealtimeReconciler:

    def __init__(
        self,
        actor: Actor,
        feed: ChangeFeed,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
        view: CommittedView,
        notifier: Notifier,
        wizard: BookingWizard | None = None,
    ) -> None:
        self._actor = actor
        self._feed = feed
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo
        self._view = view
        self._notifier = notifier
        self._wizard = wizard
        self._subscriptions: list[Subscription] = []

    @property
    def scope(self) -> str | None:
        """Owner filter for subscriptions and re-fetches; None for staff."""
        return None if self._actor.is_staff else self._actor.id

    def start(self) -> None:
        if self._subscriptions:
            return
        owner = self.scope
        self._subscriptions = [
            self._feed.subscribe(ORDERS, self._on_orders, owner_id=owner),
            self._feed.subscribe(PASSENGERS, self._on_passengers, owner_id=owner),
            self._feed.subscribe(TOURS, self._on_tours),
        ]
        if owner is not None:
            # Other actors' bookings change the seats left on our departure.
            self._subscriptions += [
                self._feed.subscribe(ORDERS, self._on_foreign_change),
                self._feed.subscribe(PASSENGERS, self._on_foreign_change),
            ]
        self.refresh()

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions = []

    def refresh(self) -> bool:
        """Full re-fetch of orders and passengers, then the live seat count."""
        orders_ok = self._refresh_orders()
        passengers_ok = self._refresh_passengers()
        self._refresh_seats()
        return orders_ok and passengers_ok

    # --- Event handlers -------------------------------------------------------

    def _on_orders(self, event: ChangeEvent) -> None:
        logger.debug("Order %s %s", event.entity_id, event.action)
        self._refresh_orders()
        self._refresh_seats()

    def _on_passengers(self, event: ChangeEvent) -> None:
        logger.debug("Passenger %s %s", event.entity_id, event.action)
        self._refresh_passengers()
        self._refresh_seats()

    def _on_tours(self, event: ChangeEvent) -> None:
        logger.debug("Tour %s %s", event.entity_id, event.action)
        self._refresh_seats()

    def _on_foreign_change(self, event: ChangeEvent) -> None:
        if event.owner_id == self._actor.id or self._wizard is None:
            return
        departure = self._wizard.active_departure
        if departure is None:
            return
        if event.tour_id == departure.tour_id and event.departure_date == departure.departure_date:
            self._refresh_seats()

    # --- Re-fetch -------------------------------------------------------------

    def _refresh_orders(self) -> bool:
        try:
            orders = self._order_repo.find(owner_id=self.scope)
        except StoreError as exc:
            logger.error("Could not refresh orders: %s", exc)
            self._notifier.notify(ERROR, "Orders could not be refreshed")
            return False
        self._view.replace_orders(orders)
        return True

    def _refresh_passengers(self) -> bool:
        try:
            passengers = self._passenger_repo.find(owner_id=self.scope)
        except StoreError as exc:
            logger.error("Could not refresh passengers: %s", exc)
            self._notifier.notify(ERROR, "Passengers could not be refreshed")
            return False
        self._view.replace_passengers(passengers)
        return True

    def _refresh_seats(self) -> None:
        if self._wizard is not None:
            self._wizard.refresh_availability()
