"""Builds the stores, seat ledger, change feed and booking sessions.

The backend (JSON files or SQL) is chosen from the settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from tourdesk.application.booking_wizard import BookingWizard
from tourdesk.application.commit_order import OrderCommitCoordinator
from tourdesk.application.committed_view import CommittedView
from tourdesk.application.ports import ChangeFeed, DocumentStore, Notifier
from tourdesk.application.reconciler import RealtimeReconciler
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.seat_ledger import SeatLedger
from tourdesk.domain.repository.tour_repository import TourRepository
from tourdesk.domain.service.capacity_oracle import CapacityOracle
from tourdesk.infrastructure.config import Settings, get_settings
from tourdesk.infrastructure.persistence.json_order_repository import JsonOrderRepository
from tourdesk.infrastructure.persistence.json_passenger_repository import (
    JsonPassengerRepository,
)
from tourdesk.infrastructure.persistence.json_seat_ledger import JsonSeatLedger
from tourdesk.infrastructure.persistence.json_tour_repository import JsonTourRepository
from tourdesk.infrastructure.persistence.sql.repositories import (
    SqlOrderRepository,
    SqlPassengerRepository,
    SqlTourRepository,
)
from tourdesk.infrastructure.persistence.sql.seat_ledger import SqlSeatLedger
from tourdesk.infrastructure.persistence.sql.session import (
    create_schema,
    make_engine,
    make_session_factory,
)
from tourdesk.infrastructure.realtime.local_feed import LocalChangeFeed
from tourdesk.infrastructure.realtime.publishing import (
    PublishingOrderRepository,
    PublishingPassengerRepository,
    PublishingTourRepository,
)
from tourdesk.infrastructure.storage.local_document_store import LocalDocumentStore


@dataclass
class Container:
    settings: Settings
    feed: ChangeFeed
    tours: TourRepository
    orders: OrderRepository
    passengers: PassengerRepository
    seats: SeatLedger
    documents: DocumentStore

    @property
    def oracle(self) -> CapacityOracle:
        return CapacityOracle(self.tours, self.orders, self.passengers)

    def coordinator(self, view: CommittedView | None = None) -> OrderCommitCoordinator:
        return OrderCommitCoordinator(
            self.orders,
            self.passengers,
            self.seats,
            self.oracle,
            committed_view=view,
            allow_staff_bypass=self.settings.ALLOW_STAFF_CAPACITY_BYPASS,
            min_validity_months=self.settings.PASSPORT_MIN_VALIDITY_MONTHS,
            resync_idle=timedelta(seconds=self.settings.LEDGER_RESYNC_IDLE_SECONDS),
        )

    def booking_session(
        self, actor: Actor, notifier: Notifier
    ) -> tuple[BookingWizard, RealtimeReconciler, CommittedView]:
        """A wizard for one actor with its committed view kept live."""
        view = CommittedView()
        wizard = BookingWizard(
            actor,
            self.tours,
            self.oracle,
            self.coordinator(view),
            notifier,
            document_store=self.documents,
            max_passengers=self.settings.MAX_PASSENGERS,
            allow_staff_bypass=self.settings.ALLOW_STAFF_CAPACITY_BYPASS,
            min_validity_months=self.settings.PASSPORT_MIN_VALIDITY_MONTHS,
        )
        reconciler = RealtimeReconciler(
            actor, self.feed, self.orders, self.passengers, view, notifier, wizard
        )
        return wizard, reconciler, view


def build(settings: Settings | None = None) -> Container:
    settings = settings or get_settings()
    feed = LocalChangeFeed()

    if settings.STORE_BACKEND == "sql":
        if not settings.DATABASE_URL:
            # default SQLite file lives in DATA_DIR
            settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        engine = make_engine(settings.database_url)
        create_schema(engine)
        sessions = make_session_factory(engine)
        tours: TourRepository = SqlTourRepository(sessions)
        orders: OrderRepository = SqlOrderRepository(sessions)
        passengers: PassengerRepository = SqlPassengerRepository(sessions)
        seats: SeatLedger = SqlSeatLedger(sessions)
    else:
        data_dir = settings.DATA_DIR
        tours = JsonTourRepository(data_dir / "tours.json")
        orders = JsonOrderRepository(data_dir / "orders.json")
        passengers = JsonPassengerRepository(data_dir / "passengers.json")
        seats = JsonSeatLedger(data_dir / "seats.json")

    return Container(
        settings=settings,
        feed=feed,
        tours=PublishingTourRepository(tours, feed),
        orders=PublishingOrderRepository(orders, feed),
        passengers=PublishingPassengerRepository(passengers, feed),
        seats=seats,
        documents=LocalDocumentStore(settings.DOCUMENT_DIR),
    )
