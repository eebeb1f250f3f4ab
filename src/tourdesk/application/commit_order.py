"""Application service: Order Commit Coordinator.

Turns a draft manifest into one persisted order plus its passengers.
The two writes (order, then passengers) run as a small saga:

  0. idempotency:  a manifest already committed is returned as-is
  1. validate:     ValidationFailed
  2. seat check:   OracleUnavailable or CapacityExceeded
  2b. seat claim:  conditional write on the seat ledger, resynced from the
                   derived count first when it has drifted
  3. write order:  a reused order is rebuilt from the current drafts;
                   on failure release the claim, CommitFailed
  4. write passengers
  5. compensate:   on step 4 failure delete the order and release the
                   claim, PartialCommitFailure
  6. hand off:     drop committed drafts and update the committed view

Every outcome is returned as a ``CommitResult``; store failures never
escape as exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from tourdesk.application.committed_view import CommittedView
from tourdesk.application.draft_manifest import DraftManifest
from tourdesk.domain.exceptions import StoreError
from tourdesk.domain.model.actor import Actor
from tourdesk.domain.model.order import Order
from tourdesk.domain.model.passenger import CommittedPassenger
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.model.value_objects import DepartureKey
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.seat_ledger import SeatLedger
from tourdesk.domain.service.capacity_oracle import (
    CapacityOracle,
    SeatAvailability,
    SeatStatus,
)
from tourdesk.domain.service.validation import (
    PASSPORT_MIN_VALIDITY_MONTHS,
    ValidationError,
    validate_manifest,
)

logger = logging.getLogger(__name__)

# A ledger row claimed within this window may belong to a commit still in flight.
RESYNC_IDLE = timedelta(seconds=60)


class CommitErrorKind(Enum):
    VALIDATION_FAILED = "ValidationFailed"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    ORACLE_UNAVAILABLE = "OracleUnavailable"
    PARTIAL_COMMIT_FAILURE = "PartialCommitFailure"
    COMMIT_FAILED = "CommitFailed"


@dataclass(frozen=True)
class CommitError:
    kind: CommitErrorKind
    message: str
    errors: list[ValidationError] = field(default_factory=list)
    availability: SeatAvailability | None = None
    # Only meaningful for PARTIAL_COMMIT_FAILURE
    compensated: bool | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class CommitResult:
    order: Order | None = None
    passengers: list[CommittedPassenger] = field(default_factory=list)
    error: CommitError | None = None
    replayed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def failed(kind: CommitErrorKind, message: str, **details) -> CommitResult:
        return CommitResult(error=CommitError(kind, message, **details))


class OrderCommitCoordinator:

    def __init__(
        self,
        order_repo: OrderRepository,
        passenger_repo: PassengerRepository,
        seat_ledger: SeatLedger,
        oracle: CapacityOracle,
        *,
        committed_view: CommittedView | None = None,
        allow_staff_bypass: bool = True,
        min_validity_months: int = PASSPORT_MIN_VALIDITY_MONTHS,
        resync_idle: timedelta = RESYNC_IDLE,
    ) -> None:
        self._order_repo = order_repo
        self._passenger_repo = passenger_repo
        self._seat_ledger = seat_ledger
        self._oracle = oracle
        self._committed_view = committed_view
        self._allow_staff_bypass = allow_staff_bypass
        self._min_validity_months = min_validity_months
        self._resync_idle = resync_idle

    def commit(
        self,
        actor: Actor,
        manifest: DraftManifest,
        tour: Tour | None,
        departure_date: date | None,
        payment_method: str | None,
    ) -> CommitResult:
        drafts = manifest.passengers
        draft_key = manifest.manifest_id

        # Step 0: idempotency
        try:
            orphan = self._order_repo.get_by_draft_key(draft_key)
            if orphan is not None:
                already = self._passenger_repo.find(order_id=orphan.id)
                if already:
                    logger.info(
                        "Manifest %s was already committed as order %s",
                        draft_key, orphan.id,
                    )
                    self._hand_off(manifest, orphan, already)
                    return CommitResult(order=orphan, passengers=already, replayed=True)
                logger.info("Reusing orphan order %s for manifest %s", orphan.id, draft_key)
        except StoreError as exc:
            logger.error("Idempotency lookup failed for manifest %s: %s", draft_key, exc)
            return CommitResult.failed(
                CommitErrorKind.COMMIT_FAILED, "Could not reach the booking store"
            )

        # Step 1: validation
        errors = validate_manifest(
            tour=tour,
            departure_date=departure_date,
            passengers=drafts,
            payment_method=payment_method,
            require_payment=True,
            min_validity_months=self._min_validity_months,
        )
        if errors:
            logger.info("Commit of manifest %s rejected: %d validation errors", draft_key, len(errors))
            return CommitResult.failed(
                CommitErrorKind.VALIDATION_FAILED,
                f"{len(errors)} problem(s) must be fixed before booking",
                errors=errors,
            )

        # Step 2: fresh seat check
        availability = self._oracle.remaining_seats(tour.id, departure_date)
        if not availability.reachable:
            return CommitResult.failed(
                CommitErrorKind.ORACLE_UNAVAILABLE,
                availability.message,
                availability=availability,
            )
        if availability.status == SeatStatus.UNKNOWN_TOUR:
            return CommitResult.failed(
                CommitErrorKind.VALIDATION_FAILED,
                "Tour not found",
                errors=[ValidationError("tour", "Tour not found")],
                availability=availability,
            )

        count = len(drafts)
        may_bypass = actor.role.can_bypass_capacity and self._allow_staff_bypass
        if not availability.admits(count) and not may_bypass:
            return self._capacity_exceeded(count, availability)

        # Step 2b: claim seats
        departure = DepartureKey(tour.id, departure_date)
        claimed, override = 0, False
        if tour.is_capped:
            try:
                if self._seat_ledger.claim(
                    departure, count, tour.capacity, seed_booked=availability.booked
                ) or self._resync_and_claim(departure, tour.capacity, count):
                    claimed = count
                elif may_bypass:
                    self._seat_ledger.claim(
                        departure, count, None, seed_booked=availability.booked
                    )
                    claimed, override = count, True
                    logger.warning(
                        "Capacity bypass: %s (%s) booked %d passengers on %s past its %d seats",
                        actor.display_name, actor.role.value, count, departure,
                        tour.capacity,
                    )
                else:
                    logger.info("Seat claim lost on %s for %d passengers", departure, count)
                    fresh = self._oracle.remaining_seats(tour.id, departure_date)
                    if not fresh.reachable:
                        return CommitResult.failed(
                            CommitErrorKind.ORACLE_UNAVAILABLE, fresh.message, availability=fresh
                        )
                    if fresh.admits(count):
                        # The oracle has not seen the winning booking's passengers yet.
                        return CommitResult.failed(
                            CommitErrorKind.CAPACITY_EXCEEDED,
                            "Another booking is taking seats on this departure; try again",
                            availability=fresh,
                        )
                    return self._capacity_exceeded(count, fresh)
            except StoreError as exc:
                logger.error("Seat claim failed on %s: %s", departure, exc)
                return CommitResult.failed(
                    CommitErrorKind.COMMIT_FAILED, "Could not reserve seats, nothing was booked"
                )

        # Step 3: write the order
        if orphan is not None and orphan.departure != departure:
            try:
                self._order_repo.delete(orphan.id)
            except StoreError as exc:
                logger.error("Could not discard stale order %s: %s", orphan.id, exc)
                self._release(departure, claimed)
                return CommitResult.failed(
                    CommitErrorKind.COMMIT_FAILED, "Could not save the order, nothing was booked"
                )
            logger.info("Discarded order %s left on %s", orphan.id, orphan.departure)
            orphan = None

        # A reused order is rebuilt from the drafts as they are now.
        order = Order.create(
            owner_id=manifest.owner_id,
            tour_id=tour.id,
            tour_title=tour.title,
            departure_date=departure_date,
            payment_method=payment_method or "",
            passengers=drafts,
            created_by=actor.id,
            draft_key=draft_key,
            capacity_override=override,
            show_in_provider=tour.show_in_provider,
            order_id=orphan.id if orphan is not None else None,
        )
        try:
            self._order_repo.save(order)
        except StoreError as exc:
            logger.error("Order write failed for manifest %s: %s", draft_key, exc)
            self._release(departure, claimed)
            return CommitResult.failed(
                CommitErrorKind.COMMIT_FAILED, "Could not save the order, nothing was booked"
            )
        logger.info("Order %s written for %s (%d passengers)", order.id, departure, count)

        # Step 4: write the passengers
        committed = [
            draft.commit(order_id=order.id, tour_id=tour.id, departure_date=departure_date)
            for draft in drafts
        ]
        try:
            self._passenger_repo.save_all(committed)
        except StoreError as exc:
            logger.error("Passenger write failed for order %s: %s", order.id, exc)
            compensated = self._compensate(order, departure, claimed)
            message = (
                "Passengers could not be saved; the order was rolled back"
                if compensated
                else "Passengers could not be saved and the order could not be rolled back; "
                "retry to finish the booking"
            )
            return CommitResult.failed(
                CommitErrorKind.PARTIAL_COMMIT_FAILURE, message, compensated=compensated
            )

        # Step 6: hand off
        self._hand_off(manifest, order, committed)
        logger.info("Manifest %s committed as order %s", draft_key, order.id)
        return CommitResult(order=order, passengers=committed)

    # --- Internal helpers -----------------------------------------------------

    def _resync_and_claim(self, departure: DepartureKey, capacity: int, count: int) -> bool:
        """Pull a drifted ledger row back to the derived count, then claim again.

        Only rows with no recent claim are touched; see ``SeatLedger.resync``.
        """
        fresh = self._oracle.remaining_seats(departure.tour_id, departure.departure_date)
        if not fresh.admits(count):
            return False
        idle_since = datetime.now(timezone.utc) - self._resync_idle
        if not self._seat_ledger.resync(departure, fresh.booked, idle_since=idle_since):
            return False
        logger.warning("Seat ledger for %s resynced to %d booked", departure, fresh.booked)
        return self._seat_ledger.claim(departure, count, capacity, seed_booked=fresh.booked)

    def _compensate(self, order: Order, departure: DepartureKey, claimed: int) -> bool:
        """Delete the order; True when nothing of it is left in the store.

        The claimed seats are released either way. A failed release leaves
        the ledger above the derived count until the next resync.
        """
        try:
            self._passenger_repo.delete_by_order(order.id)
            self._order_repo.delete(order.id)
        except StoreError as exc:
            logger.error("Compensation failed, order %s is left without passengers: %s", order.id, exc)
            self._release(departure, claimed)
            return False
        logger.info("Compensated: order %s deleted", order.id)
        self._release(departure, claimed)
        return True

    def _release(self, departure: DepartureKey, seats: int) -> None:
        if not seats:
            return
        try:
            self._seat_ledger.release(departure, seats)
        except StoreError as exc:
            logger.error("Could not release %d seats on %s: %s", seats, departure, exc)

    def _hand_off(
        self, manifest: DraftManifest, order: Order, passengers: list[CommittedPassenger]
    ) -> None:
        manifest.discard(p.id for p in passengers)
        if self._committed_view is not None:
            self._committed_view.record(order, passengers)

    @staticmethod
    def _capacity_exceeded(requested: int, availability: SeatAvailability) -> CommitResult:
        if availability.seats:
            message = f"Only {availability.message}, cannot book {requested} passengers"
        else:
            message = "Tour is full"
        return CommitResult.failed(
            CommitErrorKind.CAPACITY_EXCEEDED, message, availability=availability
        )
