"""JSON-file-backed implementation of PassengerRepository."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from tourdesk.domain.model.passenger import CommittedPassenger, PassengerStatus
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.infrastructure.persistence.codec import (
    date_from_raw,
    date_to_raw,
    money_from_raw,
    money_to_raw,
)
from tourdesk.infrastructure.persistence.json_file import JsonFile


class JsonPassengerRepository(PassengerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- PassengerRepository interface ----------------------------------------

    def get_by_id(self, passenger_id: str) -> CommittedPassenger | None:
        for raw in self._file.load():
            if raw["id"] == passenger_id:
                return self._to_domain(raw)
        return None

    def find(
        self,
        *,
        order_id: str | None = None,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[CommittedPassenger]:
        wanted_date = date_to_raw(departure_date)
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if (order_id is None or raw["order_id"] == order_id)
            and (owner_id is None or raw["owner_id"] == owner_id)
            and (tour_id is None or raw["tour_id"] == tour_id)
            and (wanted_date is None or raw["departure_date"] == wanted_date)
        ]

    def save(self, passenger: CommittedPassenger) -> None:
        self.save_all([passenger])

    def save_all(self, passengers: list[CommittedPassenger]) -> None:
        if not passengers:
            return
        incoming = {p.id: self._to_raw(p) for p in passengers}
        with self._file.locked():
            rows = [raw for raw in self._file.load() if raw["id"] not in incoming]
            rows.extend(incoming.values())
            self._file.persist(rows)

    def delete_by_order(self, order_id: str) -> None:
        with self._file.locked():
            rows = self._file.load()
            kept = [raw for raw in rows if raw["order_id"] != order_id]
            if len(kept) != len(rows):
                self._file.persist(kept)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(p: CommittedPassenger) -> dict:
        return {
            "id": p.id,
            "order_id": p.order_id,
            "owner_id": p.owner_id,
            "tour_id": p.tour_id,
            "departure_date": p.departure_date.isoformat(),
            "serial_no": p.serial_no,
            "status": p.status.value,
            "created_at": p.created_at.isoformat(),
            "first_name": p.first_name,
            "last_name": p.last_name,
            "name": p.name,
            "date_of_birth": date_to_raw(p.date_of_birth),
            "age": p.age,
            "gender": p.gender,
            "passport_number": p.passport_number,
            "passport_expiry": date_to_raw(p.passport_expiry),
            "nationality": p.nationality,
            "room_type": p.room_type,
            "hotel": p.hotel,
            "additional_services": list(p.additional_services),
            "price": money_to_raw(p.price),
            "email": p.email,
            "phone": p.phone,
            "emergency_phone": p.emergency_phone,
            "allergy": p.allergy,
            "notes": p.notes,
            "passport_upload": p.passport_upload,
        }

    @staticmethod
    def _to_domain(raw: dict) -> CommittedPassenger:
        return CommittedPassenger(
            id=raw["id"],
            order_id=raw["order_id"],
            owner_id=raw["owner_id"],
            tour_id=raw["tour_id"],
            departure_date=date.fromisoformat(raw["departure_date"]),
            serial_no=raw["serial_no"],
            status=PassengerStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            first_name=raw.get("first_name", ""),
            last_name=raw.get("last_name", ""),
            name=raw.get("name", ""),
            date_of_birth=date_from_raw(raw.get("date_of_birth")),
            age=raw.get("age"),
            gender=raw.get("gender", ""),
            passport_number=raw.get("passport_number", ""),
            passport_expiry=date_from_raw(raw.get("passport_expiry")),
            nationality=raw.get("nationality", ""),
            room_type=raw.get("room_type", ""),
            hotel=raw.get("hotel", ""),
            additional_services=list(raw.get("additional_services", [])),
            price=money_from_raw(raw.get("price")),
            email=raw.get("email", ""),
            phone=raw.get("phone", ""),
            emergency_phone=raw.get("emergency_phone", ""),
            allergy=raw.get("allergy", ""),
            notes=raw.get("notes", ""),
            passport_upload=raw.get("passport_upload"),
        )
