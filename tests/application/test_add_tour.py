"""Tests for the AddTour use case."""

from datetime import date

import pytest

from tourdesk.application.add_tour import AddTourHandler
from tourdesk.domain.exceptions import PermissionDenied, RuleViolation
from tourdesk.domain.model.actor import Actor, Role
from tourdesk.domain.model.value_objects import Money
from tests.fakes import FakeTourRepository

ADMIN = Actor("a1", "root", Role.ADMIN)


def _setup() -> tuple[AddTourHandler, FakeTourRepository]:
    repo = FakeTourRepository()
    return AddTourHandler(repo), repo


class TestAddTour:

    def test_adds_tour(self):
        handler, repo = _setup()
        tour = handler.handle(
            ADMIN,
            " Gobi Classic ",
            capacity=10,
            departure_dates=["2026-08-01", "2026-07-01", "2026-07-01"],
            hotels=["Khan Palace", " "],
            services={"Guide": "30"},
            base_price="1200",
        )
        assert tour.title == "Gobi Classic"
        assert tour.departure_dates == [date(2026, 7, 1), date(2026, 8, 1)]
        assert tour.hotels == ["Khan Palace"]
        assert tour.service_price("Guide") == Money.of("30")
        assert repo.get_by_id(tour.id) is tour

    def test_uncapped_tour(self):
        handler, _ = _setup()
        tour = handler.handle(ADMIN, "Altai", capacity=None, departure_dates=["2026-09-01"])
        assert not tour.is_capped

    def test_duplicate_title_rejected(self):
        handler, _ = _setup()
        handler.handle(ADMIN, "Altai", capacity=5, departure_dates=["2026-09-01"])
        with pytest.raises(RuleViolation, match="already exists"):
            handler.handle(ADMIN, "altai", capacity=5, departure_dates=["2026-09-01"])

    def test_needs_a_departure(self):
        handler, _ = _setup()
        with pytest.raises(RuleViolation, match="at least one departure"):
            handler.handle(ADMIN, "Altai", capacity=5, departure_dates=[""])

    def test_bad_date(self):
        handler, _ = _setup()
        with pytest.raises(RuleViolation, match="Invalid departure date"):
            handler.handle(ADMIN, "Altai", capacity=5, departure_dates=["tomorrow"])

    def test_negative_capacity(self):
        handler, _ = _setup()
        with pytest.raises(RuleViolation, match="cannot be negative"):
            handler.handle(ADMIN, "Altai", capacity=-1, departure_dates=["2026-09-01"])

    def test_staff_only(self):
        handler, _ = _setup()
        with pytest.raises(PermissionDenied):
            handler.handle(Actor("u1"), "Altai", capacity=5, departure_dates=["2026-09-01"])
