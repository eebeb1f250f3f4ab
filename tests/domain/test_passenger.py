"""Unit tests for draft and committed passengers."""

import pytest

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.passenger import (
    DraftPassenger,
    PassengerStatus,
    looks_durable,
    make_serial,
)
from tests.builders import DEPARTURE


class TestSerials:

    def test_generated_serial_is_durable(self):
        assert looks_durable(make_serial())

    def test_manifest_position_is_not_durable(self):
        assert not looks_durable(3)
        assert not looks_durable("")
        assert not looks_durable("PASS-12")


class TestDraftPassenger:

    def test_has_no_order(self):
        assert DraftPassenger(owner_id="u1").order_id == ""

    def test_commit_attaches_order(self):
        draft = DraftPassenger(owner_id="u1", first_name="Bat", serial_no=2)
        committed = draft.commit(order_id="o1", tour_id="gobi", departure_date=DEPARTURE)

        assert committed.id == draft.id
        assert committed.order_id == "o1"
        assert committed.first_name == "Bat"
        assert committed.status == PassengerStatus.PENDING
        assert looks_durable(committed.serial_no)

    def test_commit_requires_order_id(self):
        with pytest.raises(RuleViolation, match="order id"):
            DraftPassenger(owner_id="u1").commit(order_id="", tour_id="gobi", departure_date=DEPARTURE)

    def test_commit_copies_services_list(self):
        draft = DraftPassenger(owner_id="u1", additional_services=["Guide"])
        committed = draft.commit(order_id="o1", tour_id="gobi", departure_date=DEPARTURE)
        draft.additional_services.append("Horse ride")
        assert committed.additional_services == ["Guide"]


class TestCommittedPassenger:

    def _committed(self):
        return DraftPassenger(owner_id="u1").commit(
            order_id="o1", tour_id="gobi", departure_date=DEPARTURE
        )

    def test_activate(self):
        p = self._committed()
        p.activate()
        assert p.status == PassengerStatus.ACTIVE

    def test_cancelled_cannot_be_activated(self):
        p = self._committed()
        p.cancel()
        with pytest.raises(RuleViolation, match="cancelled"):
            p.activate()
