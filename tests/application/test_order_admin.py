"""Tests for the order queries and staff actions on committed orders."""

import pytest

from tourdesk.application.cancel_order import CancelOrderHandler
from tourdesk.application.commit_order import OrderCommitCoordinator
from tourdesk.application.confirm_order import ConfirmOrderHandler
from tourdesk.application.record_payment import RecordPaymentHandler
from tourdesk.application.show_departures import ShowDeparturesHandler
from tourdesk.application.show_order import ListOrdersHandler, ShowOrderHandler
from tourdesk.domain.exceptions import (
    EntityNotFoundError,
    PermissionDenied,
    RuleViolation,
    StoreError,
)
from tourdesk.domain.model.actor import Actor, Role
from tourdesk.domain.model.order import OrderStatus
from tourdesk.domain.model.passenger import PassengerStatus
from tourdesk.domain.model.value_objects import DepartureKey, Money
from tourdesk.domain.service.capacity_oracle import CapacityOracle
from tests.builders import DEPARTURE, book_directly, make_tour, ready_manifest
from tests.fakes import (
    FakeOrderRepository,
    FakePassengerRepository,
    FakeSeatLedger,
    FakeTourRepository,
)

TRAVELER = Actor("u1", "bat", Role.USER)
STRANGER = Actor("u2", "dorj", Role.USER)
PROVIDER = Actor("p1", "steppe tours", Role.PROVIDER)
MANAGER = Actor("m1", "saraa", Role.MANAGER)


def _setup(count: int = 2):
    tour = make_tour()
    orders = FakeOrderRepository()
    passengers = FakePassengerRepository()
    order = book_directly(orders, passengers, tour, count, owner_id="u1")
    return tour, orders, passengers, order


class TestShowOrder:

    def test_owner_sees_order_with_passengers(self):
        _, orders, passengers, order = _setup()
        dto = ShowOrderHandler(orders, passengers).handle(TRAVELER, order.id)
        assert dto.id == order.id
        assert dto.status == "pending"
        assert dto.total_price == "$2400.00"
        assert len(dto.passengers) == 2

    def test_other_traveler_gets_not_found(self):
        _, orders, passengers, order = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(orders, passengers).handle(STRANGER, order.id)

    def test_provider_sees_flagged_orders(self):
        _, orders, passengers, order = _setup()
        assert ShowOrderHandler(orders, passengers).handle(PROVIDER, order.id).id == order.id

    def test_provider_does_not_see_hidden_orders(self):
        _, orders, passengers, order = _setup()
        order.show_in_provider = False
        orders.save(order)
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(orders, passengers).handle(PROVIDER, order.id)

    def test_missing_order(self):
        _, orders, passengers, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            ShowOrderHandler(orders, passengers).handle(MANAGER, "nope")


class TestListOrders:

    def test_traveler_lists_own(self):
        tour, orders, passengers, mine = _setup()
        book_directly(orders, passengers, tour, 1, owner_id="u2")
        dtos = ListOrdersHandler(orders, passengers).handle(TRAVELER)
        assert [d.id for d in dtos] == [mine.id]

    def test_staff_list_all(self):
        tour, orders, passengers, _ = _setup()
        book_directly(orders, passengers, tour, 1, owner_id="u2")
        assert len(ListOrdersHandler(orders, passengers).handle(MANAGER)) == 2


class TestConfirmOrder:

    def test_staff_confirm_activates_passengers(self):
        _, orders, passengers, order = _setup()
        ConfirmOrderHandler(orders, passengers).handle(MANAGER, order.id)
        assert orders.get_by_id(order.id).status == OrderStatus.CONFIRMED
        assert {p.status for p in passengers.find(order_id=order.id)} == {PassengerStatus.ACTIVE}

    def test_traveler_cannot_confirm(self):
        _, orders, passengers, order = _setup()
        with pytest.raises(PermissionDenied):
            ConfirmOrderHandler(orders, passengers).handle(TRAVELER, order.id)


class TestCancelOrder:

    def _handler(self, orders, passengers, ledger=None):
        return CancelOrderHandler(orders, passengers, ledger or FakeSeatLedger())

    def test_owner_cancels_pending_order(self):
        tour, orders, passengers, order = _setup()
        ledger = FakeSeatLedger()
        ledger.claim(DepartureKey(tour.id, DEPARTURE), 2, tour.capacity)

        self._handler(orders, passengers, ledger).handle(TRAVELER, order.id)

        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED
        assert {p.status for p in passengers.find(order_id=order.id)} == {PassengerStatus.CANCELLED}
        assert ledger.booked(DepartureKey(tour.id, DEPARTURE)) == 0

    def test_cancelled_seats_return_to_departure(self):
        tour, orders, passengers, order = _setup(count=4)
        oracle = CapacityOracle(FakeTourRepository([tour]), orders, passengers)
        assert oracle.remaining_seats(tour.id, DEPARTURE).seats == 6
        self._handler(orders, passengers).handle(MANAGER, order.id)
        assert oracle.remaining_seats(tour.id, DEPARTURE).seats == 10

    def test_owner_cannot_cancel_confirmed_order(self):
        _, orders, passengers, order = _setup()
        ConfirmOrderHandler(orders, passengers).handle(MANAGER, order.id)
        with pytest.raises(PermissionDenied, match="Only pending orders"):
            self._handler(orders, passengers).handle(TRAVELER, order.id)

    def test_staff_cancel_confirmed_order(self):
        _, orders, passengers, order = _setup()
        ConfirmOrderHandler(orders, passengers).handle(MANAGER, order.id)
        self._handler(orders, passengers).handle(MANAGER, order.id)
        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_stranger_gets_not_found(self):
        _, orders, passengers, order = _setup()
        with pytest.raises(EntityNotFoundError):
            self._handler(orders, passengers).handle(STRANGER, order.id)

    def test_seats_released_when_passenger_write_fails(self):
        tour = make_tour(capacity=2)
        orders, passengers = FakeOrderRepository(), FakePassengerRepository()
        order = book_directly(orders, passengers, tour, 2, owner_id="u1")
        gobi = DepartureKey(tour.id, DEPARTURE)
        ledger = FakeSeatLedger()
        ledger.claim(gobi, 2, tour.capacity)
        passengers.fail_save = True

        with pytest.raises(StoreError):
            self._handler(orders, passengers, ledger).handle(MANAGER, order.id)

        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED
        assert ledger.booked(gobi) == 0

        passengers.fail_save = False
        oracle = CapacityOracle(FakeTourRepository([tour]), orders, passengers)
        coordinator = OrderCommitCoordinator(orders, passengers, ledger, oracle)
        result = coordinator.commit(MANAGER, ready_manifest(tour, 1), tour, DEPARTURE, "cash")
        assert result.ok, result.error
        assert not result.order.capacity_override
        assert ledger.booked(gobi) == 1


class TestRecordPayment:

    def test_payment_reduces_balance(self):
        _, orders, _, order = _setup()
        updated = RecordPaymentHandler(orders).handle(MANAGER, order.id, "400")
        assert updated.balance == Money.of("2000")
        assert orders.get_by_id(order.id).paid_amount == Money.of("400")

    def test_overpayment_rejected(self):
        _, orders, _, order = _setup()
        with pytest.raises(RuleViolation, match="exceeds"):
            RecordPaymentHandler(orders).handle(MANAGER, order.id, "9999")

    def test_traveler_cannot_record(self):
        _, orders, _, order = _setup()
        with pytest.raises(PermissionDenied):
            RecordPaymentHandler(orders).handle(TRAVELER, order.id, "10")


class TestShowDepartures:

    def test_seats_per_departure(self):
        tour, orders, passengers, _ = _setup(count=3)
        tours = FakeTourRepository([tour])
        lines = ShowDeparturesHandler(tours, CapacityOracle(tours, orders, passengers)).handle()
        assert [(d.departure_date, d.seats) for d in lines] == [
            ("2026-07-01", "7"),
            ("2026-08-01", "10"),
        ]

    def test_uncapped_and_unreachable(self):
        tours = FakeTourRepository([make_tour(capacity=None)])
        orders = FakeOrderRepository()
        handler = ShowDeparturesHandler(tours, CapacityOracle(tours, orders, FakePassengerRepository()))
        assert {d.seats for d in handler.handle()} == {"unlimited"}

        tours = FakeTourRepository([make_tour()])
        orders.fail_reads = True
        handler = ShowDeparturesHandler(tours, CapacityOracle(tours, orders, FakePassengerRepository()))
        assert [d.status for d in handler.handle()] == ["oracle_unavailable"] * 2
        assert {d.seats for d in handler.handle()} == {"unknown"}

    def test_upcoming_only(self):
        tour, orders, passengers, _ = _setup()
        tours = FakeTourRepository([tour])
        handler = ShowDeparturesHandler(tours, CapacityOracle(tours, orders, passengers))
        lines = handler.handle("gobi", upcoming_from=DEPARTURE.replace(day=2))
        assert [d.departure_date for d in lines] == ["2026-08-01"]
