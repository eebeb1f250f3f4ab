"""JSON-file-backed seat ledger.

The conditional claim is a read-modify-write done under the file's lock,
which makes it atomic between threads of one process only. Deployments
with several processes need the SQL ledger.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from tourdesk.domain.model.value_objects import DepartureKey
from tourdesk.domain.repository.seat_ledger import SeatLedger
from tourdesk.infrastructure.persistence.json_file import JsonFile


class JsonSeatLedger(SeatLedger):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def booked(self, departure: DepartureKey) -> int | None:
        row = self._find(self._file.load(), departure)
        return row["booked"] if row is not None else None

    def claim(
        self,
        departure: DepartureKey,
        seats: int,
        capacity: int | None,
        *,
        seed_booked: int = 0,
    ) -> bool:
        with self._file.locked():
            rows = self._file.load()
            row = self._find(rows, departure)
            if row is None:
                row = {
                    "tour_id": departure.tour_id,
                    "departure_date": departure.departure_date.isoformat(),
                    "booked": seed_booked,
                }
                rows.append(row)
            if capacity is not None and row["booked"] + seats > capacity:
                return False
            row["booked"] += seats
            row["claimed_at"] = datetime.now(timezone.utc).isoformat()
            self._file.persist(rows)
            return True

    def release(self, departure: DepartureKey, seats: int) -> None:
        with self._file.locked():
            rows = self._file.load()
            row = self._find(rows, departure)
            if row is None:
                return
            row["booked"] = max(0, row["booked"] - seats)
            self._file.persist(rows)

    def resync(self, departure: DepartureKey, booked: int, *, idle_since: datetime) -> bool:
        with self._file.locked():
            rows = self._file.load()
            row = self._find(rows, departure)
            if row is None or row["booked"] <= booked:
                return False
            claimed_at = row.get("claimed_at")
            if claimed_at and datetime.fromisoformat(claimed_at) > idle_since:
                return False
            row["booked"] = booked
            self._file.persist(rows)
            return True

    @staticmethod
    def _find(rows: list[dict], departure: DepartureKey) -> dict | None:
        wanted = departure.departure_date.isoformat()
        for row in rows:
            if row["tour_id"] == departure.tour_id and row["departure_date"] == wanted:
                return row
        return None
