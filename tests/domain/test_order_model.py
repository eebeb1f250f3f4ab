"""Unit tests for the Order aggregate."""

import pytest

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.order import Order, OrderStatus
from tourdesk.domain.model.value_objects import Money
from tests.builders import DEPARTURE, make_tour, ready_manifest


def _order(count=2, **kwargs):
    tour = make_tour()
    manifest = ready_manifest(tour, count)
    defaults = dict(
        owner_id="u1",
        tour_id=tour.id,
        tour_title=tour.title,
        departure_date=DEPARTURE,
        payment_method="bank transfer",
        passengers=manifest.passengers,
        created_by="u1",
    )
    defaults.update(kwargs)
    return Order.create(**defaults)


class TestOrderCreation:

    def test_new_order_is_pending(self):
        order = _order()
        assert order.status == OrderStatus.PENDING
        assert order.passenger_count == 2

    def test_total_is_sum_of_passenger_prices(self):
        order = _order(count=3)
        assert order.total_price == Money.of("3600")
        assert order.balance == Money.of("3600")
        assert order.paid_amount == Money.zero()

    def test_lead_passenger_fields_copied(self):
        order = _order()
        assert order.first_name == "Traveler1"
        assert order.last_name == "Erdene"
        assert order.hotel == "Khan Palace"
        assert order.lead_name == "Traveler1 Erdene"

    def test_no_passengers_rejected(self):
        with pytest.raises(RuleViolation, match="at least one passenger"):
            _order(passengers=[])

    def test_blank_payment_rejected(self):
        with pytest.raises(RuleViolation, match="Payment method is required"):
            _order(payment_method="  ")

    def test_departure_key(self):
        assert str(_order().departure) == "gobi@2026-07-01"


class TestOrderTransitions:

    def test_confirm(self):
        order = _order()
        order.confirm("admin")
        assert order.status == OrderStatus.CONFIRMED
        assert order.edited_by == "admin"
        assert order.edited_at is not None

    def test_confirm_twice_rejected(self):
        order = _order()
        order.confirm("admin")
        with pytest.raises(RuleViolation, match="expected pending"):
            order.confirm("admin")

    def test_cancel_releases_capacity(self):
        order = _order()
        assert order.consumes_capacity
        order.cancel("u1")
        assert order.status == OrderStatus.CANCELLED
        assert not order.consumes_capacity

    def test_cancel_twice_rejected(self):
        order = _order()
        order.cancel("u1")
        with pytest.raises(RuleViolation, match="already cancelled"):
            order.cancel("u1")


class TestPayments:

    def test_partial_payment(self):
        order = _order()
        order.record_payment(Money.of("1000"), "admin")
        assert order.paid_amount == Money.of("1000")
        assert order.balance == Money.of("1400")

    def test_overpayment_rejected(self):
        order = _order()
        with pytest.raises(RuleViolation, match="exceeds outstanding balance"):
            order.record_payment(Money.of("5000"), "admin")

    def test_zero_payment_rejected(self):
        with pytest.raises(RuleViolation, match="must be positive"):
            _order().record_payment(Money.zero(), "admin")

    def test_payment_on_cancelled_order_rejected(self):
        order = _order()
        order.cancel("admin")
        with pytest.raises(RuleViolation, match="cancelled order"):
            order.record_payment(Money.of("10"), "admin")
