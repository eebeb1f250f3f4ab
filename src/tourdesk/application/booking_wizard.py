"""Application service: Booking Wizard.

Drives one actor's booking through three linear steps:

    SELECT_TOUR -> MANIFEST_PASSENGERS -> REVIEW_AND_COMMIT

The wizard owns the draft manifest and is the only place seat admission
happens before commit: the capacity oracle is consulted before the
manifest grows and re-run after every manifest mutation so the actor
sees a live "N seats left". These checks are point-in-time answers, not
reservations; the commit coordinator re-checks and claims seats.

Every operation returns a ``StepResult``. Validation and capacity
problems are reported there, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

from tourdesk.application.commit_order import CommitResult, OrderCommitCoordinator
from tourdesk.application.draft_manifest import DraftManifest
from tourdesk.application.ports import ERROR, SUCCESS, DocumentStore, Notifier
from tourdesk.domain.exceptions import (
    EntityNotFoundError,
    RuleViolation,
    StoreError,
    UploadFailed,
)
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.dates import parse_date
from tourdesk.domain.model.order import MAX_PASSENGERS
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.model.value_objects import DepartureKey
from tourdesk.domain.repository.tour_repository import TourRepository
from tourdesk.domain.service.capacity_oracle import CapacityOracle, SeatAvailability
from tourdesk.domain.service.validation import (
    PASSPORT_MIN_VALIDITY_MONTHS,
    ValidationError,
    validate_manifest,
)

logger = logging.getLogger(__name__)


class WizardStep(Enum):
    SELECT_TOUR = 1
    MANIFEST_PASSENGERS = 2
    REVIEW_AND_COMMIT = 3


@dataclass(frozen=True)
class StepResult:
    ok: bool
    step: WizardStep
    errors: list[ValidationError] = field(default_factory=list)
    availability: SeatAvailability | None = None
    message: str = ""
    commit: CommitResult | None = None


class BookingWizard:

    def __init__(
        self,
        actor: Actor,
        tour_repo: TourRepository,
        oracle: CapacityOracle,
        coordinator: OrderCommitCoordinator,
        notifier: Notifier,
        *,
        document_store: DocumentStore | None = None,
        max_passengers: int = MAX_PASSENGERS,
        allow_staff_bypass: bool = True,
        min_validity_months: int = PASSPORT_MIN_VALIDITY_MONTHS,
    ) -> None:
        self.actor = actor
        self._tour_repo = tour_repo
        self._oracle = oracle
        self._coordinator = coordinator
        self._notifier = notifier
        self._may_bypass = actor.role.can_bypass_capacity and allow_staff_bypass
        self._min_validity_months = min_validity_months

        self.manifest = DraftManifest(
            actor.id, max_passengers=max_passengers, document_store=document_store
        )
        self.step = WizardStep.SELECT_TOUR
        self.tour: Tour | None = None
        self.departure_date: date | None = None
        self.payment_method: str | None = None
        self.availability: SeatAvailability | None = None

    @property
    def active_departure(self) -> DepartureKey | None:
        if self.tour is None or self.departure_date is None:
            return None
        return DepartureKey(self.tour.id, self.departure_date)

    # --- Step 1: tour selection -----------------------------------------------

    def select_tour(self, tour_id: str, departure_date: date | str) -> StepResult:
        if self.step != WizardStep.SELECT_TOUR:
            return self._fail("Finish or reset the current booking before choosing another tour")

        try:
            when = parse_date(departure_date)
        except ValueError:
            return self._fail(
                "Invalid departure date",
                [ValidationError("departure", f"'{departure_date}' is not a valid date")],
            )
        if when is None:
            return self._fail(
                "Please select a departure date",
                [ValidationError("departure", "Please select a departure date")],
            )

        try:
            tour = self._tour_repo.get_by_id(tour_id)
        except StoreError as exc:
            logger.error("Tour lookup failed for %s: %s", tour_id, exc)
            return self._fail("Tours could not be loaded, try again")
        if tour is None:
            return self._fail("Tour not found", [ValidationError("tour", "Tour not found")])
        if not tour.offers_departure(when):
            message = f"{tour.title} does not depart on {when.isoformat()}"
            return self._fail(message, [ValidationError("departure", message)])

        availability = self._oracle.remaining_seats(tour.id, when)
        if not availability.reachable:
            return self._fail(availability.message, availability=availability)
        if not availability.available and not availability.unlimited and not self._may_bypass:
            return self._fail(availability.message, availability=availability)

        self.tour = tour
        self.departure_date = when
        self.availability = availability
        self.manifest.use_tour(tour)
        self.step = WizardStep.MANIFEST_PASSENGERS
        return self._ok(availability.message, availability)

    # --- Step 2: manifest -----------------------------------------------------

    def add_passengers(self, count: int = 1) -> StepResult:
        refused = self._admit(count)
        if refused is not None:
            return refused
        try:
            self.manifest.create_many(count)
        except RuleViolation as exc:
            return self._fail(str(exc))
        return self._after_mutation()

    def import_passengers(self, rows: Iterable[Mapping[str, Any]]) -> StepResult:
        rows = list(rows)
        if not rows:
            return self._fail("The import contains no passengers")
        refused = self._admit(len(rows))
        if refused is not None:
            return refused
        try:
            _, errors = self.manifest.import_rows(rows)
        except RuleViolation as exc:
            return self._fail(str(exc))
        result = self._after_mutation()
        return StepResult(
            ok=True,
            step=self.step,
            errors=errors,
            availability=result.availability,
            message=f"Imported {len(rows)} passengers. {result.message}",
        )

    def update_passenger(self, passenger_id: str, field_name: str, value: Any) -> StepResult:
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Passengers can only be edited on the passenger step")
        outcome = self.manifest.update(passenger_id, field_name, value)
        if isinstance(outcome, ValidationError):
            return self._fail(outcome.message, [outcome])
        return self._ok("Passenger updated", self.availability)

    def remove_passenger(self, passenger_id: str) -> StepResult:
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Passengers can only be removed on the passenger step")
        try:
            self.manifest.remove(passenger_id)
        except (RuleViolation, EntityNotFoundError) as exc:
            self._notifier.notify(ERROR, str(exc))
            return self._fail(str(exc))
        return self._after_mutation()

    def clear_passengers(self) -> StepResult:
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Passengers can only be cleared on the passenger step")
        self.manifest.clear()
        return self._after_mutation()

    def attach_document(self, passenger_id: str, filename: str, content: bytes) -> StepResult:
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Documents can only be attached on the passenger step")
        try:
            self.manifest.attach_document(passenger_id, filename, content)
        except EntityNotFoundError as exc:
            return self._fail(str(exc))
        except UploadFailed as exc:
            logger.warning("Upload of %s failed: %s", filename, exc)
            self._notifier.notify(ERROR, f"Upload failed: {exc}")
            return self._fail(
                str(exc),
                [ValidationError(
                    f"passenger_{passenger_id}_passport_upload",
                    str(exc),
                    passenger_id=passenger_id,
                    attribute="passport_upload",
                )],
            )
        self._notifier.notify(SUCCESS, f"{filename} uploaded")
        return self._ok(f"{filename} uploaded", self.availability)

    def review(self) -> StepResult:
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Add passengers before reviewing the booking")
        errors = validate_manifest(
            tour=self.tour,
            departure_date=self.departure_date,
            passengers=self.manifest.passengers,
            require_payment=False,
            min_validity_months=self._min_validity_months,
        )
        if errors:
            return self._fail(f"{len(errors)} problem(s) must be fixed before review", errors)
        self.step = WizardStep.REVIEW_AND_COMMIT
        return self._ok("Review your booking", self.availability)

    # --- Step 3: review and commit --------------------------------------------

    def back(self) -> StepResult:
        if self.step != WizardStep.REVIEW_AND_COMMIT:
            return self._fail("Nothing to go back to")
        self.step = WizardStep.MANIFEST_PASSENGERS
        return self._ok("Back to passengers", self.availability)

    def choose_payment_method(self, method: str) -> StepResult:
        if self.step != WizardStep.REVIEW_AND_COMMIT:
            return self._fail("Payment method is chosen on the review step")
        if not method or not method.strip():
            return self._fail(
                "Please select a payment method",
                [ValidationError("payment", "Please select a payment method")],
            )
        self.payment_method = method.strip()
        return self._ok(f"Payment method: {self.payment_method}", self.availability)

    def commit(self) -> StepResult:
        if self.step != WizardStep.REVIEW_AND_COMMIT:
            return self._fail("Review the booking before confirming it")

        result = self._coordinator.commit(
            self.actor, self.manifest, self.tour, self.departure_date, self.payment_method
        )
        if not result.ok:
            error = result.error
            self._notifier.notify(ERROR, error.message)
            if error.availability is not None:
                self.availability = error.availability
            return StepResult(
                ok=False,
                step=self.step,
                errors=list(error.errors),
                availability=self.availability,
                message=error.message,
                commit=result,
            )

        order = result.order
        message = f"Booking confirmed: order {order.id} for {order.passenger_count} passengers"
        self._notifier.notify(SUCCESS, message)
        self.reset()
        return StepResult(ok=True, step=self.step, message=message, commit=result)

    def reset(self) -> StepResult:
        """Back to tour selection; drafts are discarded locally."""
        self.manifest.clear()
        self.manifest.use_tour(None)
        self.tour = None
        self.departure_date = None
        self.payment_method = None
        self.availability = None
        self.step = WizardStep.SELECT_TOUR
        return self._ok("Booking reset")

    # --- Live seat count ------------------------------------------------------

    def refresh_availability(self) -> SeatAvailability | None:
        """Re-run the oracle for the active departure and tell the actor."""
        departure = self.active_departure
        if departure is None:
            return None
        self.availability = self._oracle.remaining_seats(
            departure.tour_id, departure.departure_date
        )
        self._announce(self.availability)
        return self.availability

    # --- Internal helpers -----------------------------------------------------

    def _admit(self, count: int) -> StepResult | None:
        """Refuse manifest growth that the departure cannot take."""
        if self.step != WizardStep.MANIFEST_PASSENGERS:
            return self._fail("Select a tour and departure before adding passengers")
        if count > self.manifest.room_left:
            return self._fail(
                f"A booking can hold at most {self.manifest.max_passengers} passengers"
            )

        departure = self.active_departure
        availability = self._oracle.remaining_seats(
            departure.tour_id, departure.departure_date
        )
        self.availability = availability
        if not availability.reachable:
            self._notifier.notify(ERROR, availability.message)
            return self._fail(availability.message, availability=availability)
        if self._may_bypass or availability.unlimited:
            return None
        if not availability.available:
            self._notifier.notify(ERROR, availability.message)
            return self._fail(availability.message, availability=availability)
        if len(self.manifest) + count > (availability.seats or 0):
            held = len(self.manifest)
            message = (
                f"Only {availability.message}; the booking already has "
                f"{held} {'passenger' if held == 1 else 'passengers'}"
            )
            self._notifier.notify(ERROR, message)
            return self._fail(message, availability=availability)
        return None

    def _after_mutation(self) -> StepResult:
        availability = self.refresh_availability()
        return self._ok(availability.message if availability else "", availability)

    def _announce(self, availability: SeatAvailability) -> None:
        level = SUCCESS if availability.available else ERROR
        self._notifier.notify(level, availability.message)

    def _ok(self, message: str, availability: SeatAvailability | None = None) -> StepResult:
        return StepResult(ok=True, step=self.step, availability=availability, message=message)

    def _fail(
        self,
        message: str,
        errors: list[ValidationError] | None = None,
        availability: SeatAvailability | None = None,
    ) -> StepResult:
        return StepResult(
            ok=False,
            step=self.step,
            errors=list(errors or []),
            availability=availability or self.availability,
            message=message,
        )
