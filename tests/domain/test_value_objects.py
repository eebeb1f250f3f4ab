"""Unit tests for domain value objects."""

from datetime import date
from decimal import Decimal

import pytest

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.value_objects import DepartureKey, Money


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_int(self):
        assert Money.of(10).amount == Decimal("10")

    def test_of_rejects_garbage(self):
        with pytest.raises(RuleViolation, match="Invalid money amount"):
            Money.of("ten")

    def test_float_amount_rejected(self):
        with pytest.raises(RuleViolation, match="must be a Decimal"):
            Money(10.5)

    def test_negative_amount_rejected(self):
        with pytest.raises(RuleViolation, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_subtraction(self):
        assert Money.of("10") - Money.of("3") == Money.of("7")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(RuleViolation, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(RuleViolation, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_total_of_many(self):
        assert Money.total([Money.of("1200"), Money.of("50"), Money.of("30")]) == Money.of("1280")

    def test_total_of_nothing_is_zero(self):
        assert Money.total([]) == Money.zero()

    def test_str_formatting(self):
        assert str(Money.of("15")) == "$15.00"
        assert str(Money.of("9.5")) == "$9.50"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") > Money.of("5")


# ── DepartureKey ─────────────────────────────────────────────────────────────


class TestDepartureKey:

    def test_equal_by_value(self):
        assert DepartureKey("gobi", date(2026, 7, 1)) == DepartureKey("gobi", date(2026, 7, 1))

    def test_usable_as_dict_key(self):
        seats = {DepartureKey("gobi", date(2026, 7, 1)): 3}
        assert seats[DepartureKey("gobi", date(2026, 7, 1))] == 3

    def test_str(self):
        assert str(DepartureKey("gobi", date(2026, 7, 1))) == "gobi@2026-07-01"
