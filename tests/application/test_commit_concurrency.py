"""Concurrent commits against the same departure.

Each thread plays a different traveler with their own manifest; the seat
ledger must let exactly as many through as there are seats.
"""

import threading

from tourdesk.application.commit_order import CommitErrorKind, OrderCommitCoordinator
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.service.capacity_oracle import CapacityOracle
from tests.builders import DEPARTURE, make_tour, ready_manifest
from tests.fakes import (
    FakeOrderRepository,
    FakePassengerRepository,
    FakeSeatLedger,
    FakeTourRepository,
)


def _race(capacity: int, travelers: int, per_booking: int = 1):
    tour = make_tour(capacity=capacity)
    orders = FakeOrderRepository()
    passengers = FakePassengerRepository()
    oracle = CapacityOracle(FakeTourRepository([tour]), orders, passengers)
    coordinator = OrderCommitCoordinator(orders, passengers, FakeSeatLedger(), oracle)

    manifests = [
        ready_manifest(tour, per_booking, owner_id=f"u{i}") for i in range(travelers)
    ]
    barrier = threading.Barrier(travelers)
    results = [None] * travelers

    def book(i: int) -> None:
        barrier.wait()
        results[i] = coordinator.commit(
            Actor(f"u{i}"), manifests[i], tour, DEPARTURE, "cash"
        )

    threads = [threading.Thread(target=book, args=(i,)) for i in range(travelers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results, orders, passengers, oracle


class TestConcurrentCommits:

    def test_last_seat_goes_to_exactly_one_traveler(self):
        results, orders, passengers, _ = _race(capacity=1, travelers=8)

        winners = [r for r in results if r.ok]
        losers = [r for r in results if not r.ok]
        assert len(winners) == 1
        assert all(r.error.kind == CommitErrorKind.CAPACITY_EXCEEDED for r in losers)
        assert len(orders.all()) == 1
        assert len(passengers.all()) == 1

    def test_never_more_passengers_than_capacity(self):
        results, orders, passengers, oracle = _race(capacity=5, travelers=6, per_booking=2)

        assert sum(1 for r in results if r.ok) == 2
        assert len(passengers.all()) == 4
        assert oracle.remaining_seats("gobi", DEPARTURE).seats == 1
