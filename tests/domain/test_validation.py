"""Unit tests for the booking validation rules."""

from datetime import date

from tourdesk.domain.model.passenger import DraftPassenger
from tourdesk.domain.service.validation import validate_manifest, validate_passenger
from tests.builders import DEPARTURE, make_tour, ready_manifest


def _fields(errors):
    return [e.attribute or e.field for e in errors]


class TestValidatePassenger:

    def _setup(self, **overrides):
        manifest = ready_manifest(make_tour(), 1)
        passenger = manifest.passengers[0]
        for name, value in overrides.items():
            setattr(passenger, name, value)
        return passenger

    def _check(self, passenger, departure=DEPARTURE):
        return validate_passenger(
            passenger, passenger.id, tour=make_tour(), departure_date=departure
        )

    def test_complete_passenger_has_no_errors(self):
        assert self._check(self._setup()) == []

    def test_blank_passenger_reports_every_required_field(self):
        errors = self._check(DraftPassenger(owner_id="u1"))
        assert _fields(errors) == [
            "first_name", "last_name", "email", "phone", "nationality", "gender",
            "passport_number", "passport_expiry", "room_type", "hotel",
        ]

    def test_error_field_identifies_passenger(self):
        passenger = self._setup(first_name="")
        [error] = self._check(passenger)
        assert error.field == f"passenger_{passenger.id}_first_name"
        assert error.passenger_id == passenger.id
        assert error.message == "First name is required"

    def test_malformed_email(self):
        [error] = self._check(self._setup(email="bat.example.com"))
        assert error.message == "Valid email is required"

    def test_passport_valid_eight_months_after_departure_passes(self):
        passenger = self._setup(passport_expiry=date(2027, 3, 1))
        assert self._check(passenger) == []

    def test_passport_valid_four_months_after_departure_fails(self):
        passenger = self._setup(passport_expiry=date(2026, 11, 1))
        [error] = self._check(passenger)
        assert error.attribute == "passport_expiry"
        assert "at least 6 months after departure (until 2027-01-01)" in error.message

    def test_passport_on_boundary_passes(self):
        passenger = self._setup(passport_expiry=date(2027, 1, 1))
        assert self._check(passenger) == []

    def test_missing_passport_expiry(self):
        [error] = self._check(self._setup(passport_expiry=None))
        assert error.message == "Passport expiry date is required"

    def test_hotel_must_belong_to_tour(self):
        [error] = self._check(self._setup(hotel="Ritz"))
        assert error.attribute == "hotel"
        assert "not offered" in error.message

    def test_tour_without_hotels_rejects_any_hotel(self):
        passenger = self._setup()
        [error] = validate_passenger(
            passenger, passenger.id, tour=make_tour(hotels=[]), departure_date=DEPARTURE
        )
        assert error.attribute == "hotel"
        assert error.message == "Hotel 'Khan Palace' is not offered by Gobi Classic"

    def test_missing_hotel(self):
        [error] = self._check(self._setup(hotel=""))
        assert error.message == "Hotel selection is required"

    def test_validation_does_not_mutate(self):
        passenger = self._setup(first_name="")
        before = passenger.profile()
        self._check(passenger)
        assert passenger.profile() == before


class TestValidateManifest:

    def test_valid_booking(self):
        manifest = ready_manifest(make_tour(), 3)
        errors = validate_manifest(
            tour=make_tour(), departure_date=DEPARTURE,
            passengers=manifest.passengers, payment_method="cash",
        )
        assert errors == []

    def test_missing_tour_and_date(self):
        errors = validate_manifest(tour=None, departure_date=None, passengers=[], payment_method="cash")
        assert [e.field for e in errors] == ["tour", "departure", "passengers"]

    def test_departure_not_offered(self):
        manifest = ready_manifest(make_tour(), 1)
        errors = validate_manifest(
            tour=make_tour(), departure_date=date(2026, 7, 2),
            passengers=manifest.passengers, payment_method="cash",
        )
        assert [e.field for e in errors] == ["departure"]

    def test_payment_required_on_commit(self):
        manifest = ready_manifest(make_tour(), 1)
        errors = validate_manifest(
            tour=make_tour(), departure_date=DEPARTURE, passengers=manifest.passengers,
        )
        assert [e.message for e in errors] == ["Please select a payment method"]

    def test_payment_not_required_for_review(self):
        manifest = ready_manifest(make_tour(), 1)
        errors = validate_manifest(
            tour=make_tour(), departure_date=DEPARTURE,
            passengers=manifest.passengers, require_payment=False,
        )
        assert errors == []

    def test_passenger_errors_follow_manifest_errors(self):
        manifest = ready_manifest(make_tour(), 2)
        manifest.passengers[1].email = ""
        errors = validate_manifest(tour=make_tour(), departure_date=DEPARTURE,
                                   passengers=manifest.passengers)
        assert [e.field for e in errors][0] == "payment"
        assert errors[1].passenger_id == manifest.passengers[1].id

    def test_custom_validity_window(self):
        manifest = ready_manifest(make_tour(), 1)
        errors = validate_manifest(
            tour=make_tour(), departure_date=DEPARTURE,
            passengers=manifest.passengers, payment_method="cash",
            min_validity_months=24,
        )
        assert [e.attribute for e in errors] == ["passport_expiry"]
