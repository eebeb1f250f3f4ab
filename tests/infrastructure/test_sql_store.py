"""Tests for the SQLAlchemy store against a throwaway SQLite file."""

from datetime import date, datetime, timedelta, timezone

import pytest

from tourdesk.application.commit_order import CommitErrorKind, OrderCommitCoordinator
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.order import OrderStatus
from tourdesk.domain.model.value_objects import DepartureKey, Money
from tourdesk.domain.service.capacity_oracle import CapacityOracle
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
from tests.builders import DEPARTURE, book_directly, make_tour, ready_manifest

GOBI = DepartureKey("gobi", DEPARTURE)


@pytest.fixture
def sessions(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'tourdesk.db'}")
    create_schema(engine)
    yield make_session_factory(engine)
    engine.dispose()


class TestSqlRepositories:

    def test_tour_round_trip(self, sessions):
        tours = SqlTourRepository(sessions)
        tours.save(make_tour())

        loaded = tours.get_by_id("gobi")

        assert loaded.capacity == 10
        assert loaded.departure_dates == [DEPARTURE, date(2026, 8, 1)]
        assert loaded.service_price("Guide") == Money.of("30")
        assert tours.get_by_title("GOBI CLASSIC").id == "gobi"

    def test_order_and_passengers_round_trip(self, sessions):
        orders = SqlOrderRepository(sessions)
        passengers = SqlPassengerRepository(sessions)
        order = book_directly(orders, passengers, make_tour(), 2, owner_id="u1")

        loaded = orders.get_by_id(order.id)

        assert loaded.total_price == Money.of("2400")
        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at.astimezone(timezone.utc) == order.created_at
        assert orders.get_by_draft_key(order.draft_key).id == order.id
        assert len(passengers.find(order_id=order.id)) == 2
        assert len(passengers.find(owner_id="u1", departure_date=DEPARTURE)) == 2

    def test_update_and_delete(self, sessions):
        orders = SqlOrderRepository(sessions)
        passengers = SqlPassengerRepository(sessions)
        order = book_directly(orders, passengers, make_tour(), 1)

        order.confirm("admin")
        orders.save(order)
        assert orders.get_by_id(order.id).status == OrderStatus.CONFIRMED

        passengers.delete_by_order(order.id)
        orders.delete(order.id)
        assert orders.get_by_id(order.id) is None
        assert passengers.find(order_id=order.id) == []


class TestSqlSeatLedger:

    def test_conditional_claim(self, sessions):
        ledger = SqlSeatLedger(sessions)
        assert ledger.booked(GOBI) is None
        assert ledger.claim(GOBI, 3, 10, seed_booked=6)
        assert ledger.booked(GOBI) == 9
        assert not ledger.claim(GOBI, 2, 10)
        assert ledger.claim(GOBI, 1, 10)
        assert ledger.booked(GOBI) == 10

    def test_unconditional_claim_and_release(self, sessions):
        ledger = SqlSeatLedger(sessions)
        ledger.claim(GOBI, 2, 2)
        assert ledger.claim(GOBI, 3, None)
        assert ledger.booked(GOBI) == 5
        ledger.release(GOBI, 9)
        assert ledger.booked(GOBI) == 0

    def test_resync_only_touches_idle_rows(self, sessions):
        ledger = SqlSeatLedger(sessions)
        ledger.claim(GOBI, 5, 10)
        now = datetime.now(timezone.utc)
        assert not ledger.resync(GOBI, 3, idle_since=now - timedelta(minutes=1))
        assert ledger.booked(GOBI) == 5
        assert not ledger.resync(GOBI, 7, idle_since=now + timedelta(seconds=1))
        assert ledger.resync(GOBI, 3, idle_since=now + timedelta(seconds=1))
        assert ledger.booked(GOBI) == 3


class TestSqlCommit:

    def test_commit_through_sql_store(self, sessions):
        tour = make_tour(capacity=4)
        tours = SqlTourRepository(sessions)
        tours.save(tour)
        orders = SqlOrderRepository(sessions)
        passengers = SqlPassengerRepository(sessions)
        oracle = CapacityOracle(tours, orders, passengers)
        coordinator = OrderCommitCoordinator(orders, passengers, SqlSeatLedger(sessions), oracle)
        book_directly(orders, passengers, tour, 1)

        first = coordinator.commit(Actor("u1"), ready_manifest(tour, 3), tour, DEPARTURE, "cash")
        second = coordinator.commit(Actor("u2"), ready_manifest(tour, 1, owner_id="u2"),
                                    tour, DEPARTURE, "cash")

        assert first.ok
        assert second.error.kind == CommitErrorKind.CAPACITY_EXCEEDED
        assert oracle.remaining_seats("gobi", DEPARTURE).seats == 0
