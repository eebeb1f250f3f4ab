"""Draft Manifest: the passengers one actor is assembling before commit.

The manifest is purely local. Nothing in it is persisted or counted
against capacity until the commit coordinator turns it into an order.
Seat admission is the wizard's job; the manifest only enforces its own
hard ceiling (``max_passengers``).
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Callable, Iterable, Iterator, Mapping

from tourdesk.domain.exceptions import EntityNotFoundError, RuleViolation, UploadFailed
from tourdesk.domain.model.dates import calculate_age, parse_date
from tourdesk.domain.model.order import MAX_PASSENGERS
from tourdesk.domain.model.passenger import PROFILE_FIELDS, DraftPassenger
from tourdesk.domain.model.tour import Tour
from tourdesk.domain.model.value_objects import Money
from tourdesk.domain.service.validation import ValidationError
from tourdesk.application.ports import DocumentStore

DERIVED_FIELDS = frozenset({"name", "age", "price"})
DATE_FIELDS = frozenset({"date_of_birth", "passport_expiry"})
# passport_upload is only set through attach_document()
EDITABLE_FIELDS = frozenset(PROFILE_FIELDS) - DERIVED_FIELDS - {"passport_upload"}
INHERITED_FIELDS = ("nationality", "hotel", "emergency_phone")


class DraftManifest:

    def __init__(
        self,
        owner_id: str,
        *,
        tour: Tour | None = None,
        max_passengers: int = MAX_PASSENGERS,
        document_store: DocumentStore | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.owner_id = owner_id
        self.max_passengers = max_passengers
        self._tour = tour
        self._document_store = document_store
        self._today = today
        self._passengers: list[DraftPassenger] = []
        self._manifest_id = self._new_manifest_id()

    # --- Inspection -----------------------------------------------------------

    @property
    def manifest_id(self) -> str:
        """Identity of this draft; reused as the commit's idempotency key."""
        return self._manifest_id

    @property
    def tour(self) -> Tour | None:
        return self._tour

    @property
    def passengers(self) -> list[DraftPassenger]:
        return list(self._passengers)

    @property
    def room_left(self) -> int:
        return self.max_passengers - len(self._passengers)

    def __len__(self) -> int:
        return len(self._passengers)

    def __iter__(self) -> Iterator[DraftPassenger]:
        return iter(list(self._passengers))

    def get(self, passenger_id: str) -> DraftPassenger:
        for passenger in self._passengers:
            if passenger.id == passenger_id:
                return passenger
        raise EntityNotFoundError(f"Passenger {passenger_id} is not in the manifest")

    # --- Mutation -------------------------------------------------------------

    def use_tour(self, tour: Tour | None) -> None:
        """Bind the manifest to a tour and re-price existing passengers."""
        self._tour = tour
        for passenger in self._passengers:
            self._reprice(passenger)

    def create(self) -> DraftPassenger:
        """Append one blank passenger, inheriting defaults from the previous one."""
        self._ensure_room(1)
        return self._append()

    def create_many(self, count: int) -> list[DraftPassenger]:
        if count < 1:
            raise RuleViolation("Number of passengers to add must be at least 1")
        self._ensure_room(count)
        return [self._append() for _ in range(count)]

    def update(self, passenger_id: str, field: str, value: Any) -> DraftPassenger | ValidationError:
        """Set one profile field; derived fields are recomputed.

        Problems (unknown passenger, unknown or derived field, bad date)
        come back as a ValidationError and leave the record untouched.
        """
        try:
            passenger = self.get(passenger_id)
        except EntityNotFoundError as exc:
            return ValidationError("passengers", str(exc), passenger_id=passenger_id)

        def reject(message: str) -> ValidationError:
            return ValidationError(
                f"passenger_{passenger_id}_{field}",
                message,
                passenger_id=passenger_id,
                attribute=field,
            )

        if field in DERIVED_FIELDS:
            return reject(f"'{field}' is calculated and cannot be set directly")
        if field not in EDITABLE_FIELDS:
            return reject(f"Unknown passenger field '{field}'")

        if field in DATE_FIELDS:
            try:
                value = parse_date(value)
            except ValueError:
                return reject(f"'{value}' is not a valid date (expected YYYY-MM-DD)")
        elif field == "additional_services":
            value = _service_list(value)
        elif value is None:
            value = ""
        else:
            value = str(value).strip()

        setattr(passenger, field, value)

        if field == "date_of_birth":
            passenger.age = (
                calculate_age(value, self._today()) if value is not None else None
            )
        elif field in ("first_name", "last_name"):
            passenger.name = f"{passenger.first_name} {passenger.last_name}".strip()
        elif field == "additional_services":
            self._reprice(passenger)
        return passenger

    def remove(self, passenger_id: str) -> None:
        """Drop a passenger and renumber the rest 1..N.

        The last remaining passenger cannot be removed; use ``clear()``.
        """
        passenger = self.get(passenger_id)
        if len(self._passengers) <= 1:
            raise RuleViolation("Cannot remove the last passenger from the booking")
        self._passengers.remove(passenger)
        self._renumber()

    def clear(self) -> None:
        """Discard every draft and start a fresh manifest identity."""
        self._passengers.clear()
        self._manifest_id = self._new_manifest_id()

    def discard(self, passenger_ids: Iterable[str]) -> None:
        """Drop passengers that have been committed elsewhere."""
        gone = set(passenger_ids)
        self._passengers = [p for p in self._passengers if p.id not in gone]
        self._renumber()
        if not self._passengers:
            self._manifest_id = self._new_manifest_id()

    def import_rows(
        self, rows: Iterable[Mapping[str, Any]]
    ) -> tuple[list[DraftPassenger], list[ValidationError]]:
        """Bulk-add passengers from mapping rows (e.g. parsed CSV).

        The whole batch is rejected when it would overflow the manifest.
        Fields that cannot be applied are reported and skipped; the
        passenger itself is still added.
        """
        rows = list(rows)
        if not rows:
            return [], []
        self._ensure_room(len(rows))

        added: list[DraftPassenger] = []
        errors: list[ValidationError] = []
        for row in rows:
            passenger = self._append()
            added.append(passenger)
            for key, value in row.items():
                field = _normalise_header(key)
                if field in DERIVED_FIELDS or value in (None, ""):
                    continue
                outcome = self.update(passenger.id, field, value)
                if isinstance(outcome, ValidationError):
                    errors.append(outcome)
        return added, errors

    def attach_document(self, passenger_id: str, filename: str, content: bytes) -> DraftPassenger:
        """Upload a passport copy and link it to the passenger.

        Raises UploadFailed when the store rejects it; the passenger's
        ``passport_upload`` stays unset and no other field changes.
        """
        passenger = self.get(passenger_id)
        if self._document_store is None:
            raise UploadFailed("No document store is configured")
        try:
            path = self._document_store.upload(filename, content)
        except OSError as exc:
            raise UploadFailed(f"Could not store {filename}: {exc}") from exc
        passenger.passport_upload = path
        return passenger

    # --- Internal helpers -----------------------------------------------------

    def _ensure_room(self, count: int) -> None:
        if len(self._passengers) + count > self.max_passengers:
            raise RuleViolation(
                f"A booking can hold at most {self.max_passengers} passengers "
                f"({len(self._passengers)} already added)"
            )

    def _append(self) -> DraftPassenger:
        previous = self._passengers[-1] if self._passengers else None
        index = len(self._passengers)
        passenger = DraftPassenger(
            owner_id=self.owner_id,
            serial_no=index + 1,
            price=self._base_price(),
        )
        if previous is not None:
            for name in INHERITED_FIELDS:
                setattr(passenger, name, getattr(previous, name))
            if index % 2 == 1 and previous.room_type.lower() == "double":
                passenger.room_type = previous.room_type
        self._passengers.append(passenger)
        return passenger

    def _renumber(self) -> None:
        for position, passenger in enumerate(self._passengers, start=1):
            passenger.serial_no = position

    def _reprice(self, passenger: DraftPassenger) -> None:
        if self._tour is None:
            passenger.price = self._base_price()
        else:
            passenger.price = self._tour.price_with_services(passenger.additional_services)

    def _base_price(self) -> Money:
        return self._tour.base_price if self._tour is not None else Money.zero()

    @staticmethod
    def _new_manifest_id() -> str:
        return str(uuid.uuid4())


def _service_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part).strip() for part in value if str(part).strip()]


_HEADER_ALIASES = {
    "passport_expire": "passport_expiry",
    "roomtype": "room_type",
    "room": "room_type",
    "dob": "date_of_birth",
    "services": "additional_services",
}


def _normalise_header(header: str) -> str:
    key = str(header).strip().lower().replace(" ", "_").replace("-", "_")
    return _HEADER_ALIASES.get(key, key)
