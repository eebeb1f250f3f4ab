"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from tourdesk.domain.model.order import Order, OrderStatus
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.infrastructure.persistence.codec import (
    date_from_raw,
    date_to_raw,
    datetime_from_raw,
    money_from_raw,
    money_to_raw,
)
from tourdesk.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_draft_key(self, draft_key: str) -> Order | None:
        for raw in self._file.load():
            if raw.get("draft_key") == draft_key:
                return self._to_domain(raw)
        return None

    def find(
        self,
        *,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[Order]:
        wanted_date = date_to_raw(departure_date)
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if (owner_id is None or raw["owner_id"] == owner_id)
            and (tour_id is None or raw["tour_id"] == tour_id)
            and (wanted_date is None or raw["departure_date"] == wanted_date)
        ]

    def save(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            self._file.persist(orders)

    def delete(self, order_id: str) -> None:
        with self._file.locked():
            orders = self._file.load()
            kept = [raw for raw in orders if raw["id"] != order_id]
            if len(kept) != len(orders):
                self._file.persist(kept)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "owner_id": order.owner_id,
            "tour_id": order.tour_id,
            "tour_title": order.tour_title,
            "departure_date": order.departure_date.isoformat(),
            "payment_method": order.payment_method,
            "total_price": money_to_raw(order.total_price),
            "paid_amount": money_to_raw(order.paid_amount),
            "balance": money_to_raw(order.balance),
            "passenger_count": order.passenger_count,
            "status": order.status.value,
            "first_name": order.first_name,
            "last_name": order.last_name,
            "email": order.email,
            "phone": order.phone,
            "hotel": order.hotel,
            "passport_number": order.passport_number,
            "passport_expiry": date_to_raw(order.passport_expiry),
            "passport_copy": order.passport_copy,
            "show_in_provider": order.show_in_provider,
            "draft_key": order.draft_key,
            "capacity_override": order.capacity_override,
            "created_by": order.created_by,
            "created_at": order.created_at.isoformat(),
            "edited_by": order.edited_by,
            "edited_at": order.edited_at.isoformat() if order.edited_at else None,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        return Order(
            id=raw["id"],
            owner_id=raw["owner_id"],
            tour_id=raw["tour_id"],
            tour_title=raw.get("tour_title", ""),
            departure_date=date.fromisoformat(raw["departure_date"]),
            payment_method=raw.get("payment_method", ""),
            total_price=money_from_raw(raw.get("total_price")),
            paid_amount=money_from_raw(raw.get("paid_amount")),
            balance=money_from_raw(raw.get("balance")),
            passenger_count=raw.get("passenger_count", 0),
            status=OrderStatus(raw["status"]),
            first_name=raw.get("first_name", ""),
            last_name=raw.get("last_name", ""),
            email=raw.get("email", ""),
            phone=raw.get("phone", ""),
            hotel=raw.get("hotel", ""),
            passport_number=raw.get("passport_number", ""),
            passport_expiry=date_from_raw(raw.get("passport_expiry")),
            passport_copy=raw.get("passport_copy"),
            show_in_provider=raw.get("show_in_provider", True),
            draft_key=raw.get("draft_key"),
            capacity_override=raw.get("capacity_override", False),
            created_by=raw.get("created_by", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            edited_by=raw.get("edited_by"),
            edited_at=datetime_from_raw(raw.get("edited_at")),
        )
