"""JSON-file-backed implementation of TourRepository."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from tourdesk.domain.model.tour import Tour, TourService
from tourdesk.domain.repository.tour_repository import TourRepository
from tourdesk.infrastructure.persistence.codec import money_from_raw, money_to_raw
from tourdesk.infrastructure.persistence.json_file import JsonFile


class JsonTourRepository(TourRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- TourRepository interface ---------------------------------------------

    def get_by_id(self, tour_id: str) -> Tour | None:
        for raw in self._file.load():
            if raw["id"] == tour_id:
                return self._to_domain(raw)
        return None

    def get_by_title(self, title: str) -> Tour | None:
        wanted = title.strip().lower()
        for raw in self._file.load():
            if raw["title"].lower() == wanted:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Tour]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, tour: Tour) -> None:
        with self._file.locked():
            tours = [raw for raw in self._file.load() if raw["id"] != tour.id]
            tours.append(self._to_raw(tour))
            self._file.persist(tours)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(tour: Tour) -> dict:
        return {
            "id": tour.id,
            "title": tour.title,
            "capacity": tour.capacity,
            "departure_dates": [d.isoformat() for d in sorted(tour.departure_dates)],
            "hotels": list(tour.hotels),
            "services": [
                {"name": s.name, "price": money_to_raw(s.price)} for s in tour.services
            ],
            "base_price": money_to_raw(tour.base_price),
            "show_in_provider": tour.show_in_provider,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Tour:
        return Tour(
            id=raw["id"],
            title=raw["title"],
            capacity=raw.get("capacity"),
            departure_dates=[date.fromisoformat(d) for d in raw.get("departure_dates", [])],
            hotels=list(raw.get("hotels", [])),
            services=[
                TourService(name=s["name"], price=money_from_raw(s["price"]))
                for s in raw.get("services", [])
            ],
            base_price=money_from_raw(raw.get("base_price")),
            show_in_provider=raw.get("show_in_provider", True),
        )
