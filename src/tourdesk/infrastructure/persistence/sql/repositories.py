"""SQLAlchemy-backed repositories for tours, orders and passengers."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from tourdesk.domain.model.order import Order, OrderStatus
from tourdesk.domain.model.passenger import CommittedPassenger, PassengerStatus
from tourdesk.domain.model.tour import Tour, TourService
from tourdesk.domain.model.value_objects import Money
from tourdesk.domain.repository.order_repository import OrderRepository
from tourdesk.domain.repository.passenger_repository import PassengerRepository
from tourdesk.domain.repository.tour_repository import TourRepository
from tourdesk.infrastructure.persistence.sql.models import OrderRow, PassengerRow, TourRow
from tourdesk.infrastructure.persistence.sql.session import unit_of_work


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops the offset; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlTourRepository(TourRepository):

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get_by_id(self, tour_id: str) -> Tour | None:
        with unit_of_work(self._sessions) as session:
            row = session.get(TourRow, tour_id)
            return self._to_domain(row) if row is not None else None

    def get_by_title(self, title: str) -> Tour | None:
        wanted = title.strip().lower()
        return next((t for t in self.list_all() if t.title.lower() == wanted), None)

    def list_all(self) -> list[Tour]:
        with unit_of_work(self._sessions) as session:
            rows = session.scalars(select(TourRow).order_by(TourRow.title)).all()
            return [self._to_domain(row) for row in rows]

    def save(self, tour: Tour) -> None:
        with unit_of_work(self._sessions) as session:
            session.merge(self._to_row(tour))

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(tour: Tour) -> TourRow:
        return TourRow(
            id=tour.id,
            title=tour.title,
            capacity=tour.capacity,
            departure_dates=[d.isoformat() for d in sorted(tour.departure_dates)],
            hotels=list(tour.hotels),
            services=[{"name": s.name, "price": str(s.price.amount)} for s in tour.services],
            base_price=tour.base_price.amount,
            currency=tour.base_price.currency,
            show_in_provider=tour.show_in_provider,
        )

    @staticmethod
    def _to_domain(row: TourRow) -> Tour:
        return Tour(
            id=row.id,
            title=row.title,
            capacity=row.capacity,
            departure_dates=[date.fromisoformat(d) for d in row.departure_dates or []],
            hotels=list(row.hotels or []),
            services=[
                TourService(name=s["name"], price=Money.of(s["price"]))
                for s in row.services or []
            ],
            base_price=Money(row.base_price, row.currency),
            show_in_provider=row.show_in_provider,
        )


class SqlOrderRepository(OrderRepository):

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get_by_id(self, order_id: str) -> Order | None:
        with unit_of_work(self._sessions) as session:
            row = session.get(OrderRow, order_id)
            return self._to_domain(row) if row is not None else None

    def get_by_draft_key(self, draft_key: str) -> Order | None:
        with unit_of_work(self._sessions) as session:
            row = session.scalars(
                select(OrderRow).where(OrderRow.draft_key == draft_key)
            ).first()
            return self._to_domain(row) if row is not None else None

    def find(
        self,
        *,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[Order]:
        stmt = select(OrderRow)
        if owner_id is not None:
            stmt = stmt.where(OrderRow.owner_id == owner_id)
        if tour_id is not None:
            stmt = stmt.where(OrderRow.tour_id == tour_id)
        if departure_date is not None:
            stmt = stmt.where(OrderRow.departure_date == departure_date)
        with unit_of_work(self._sessions) as session:
            return [self._to_domain(row) for row in session.scalars(stmt).all()]

    def save(self, order: Order) -> None:
        with unit_of_work(self._sessions) as session:
            session.merge(self._to_row(order))

    def delete(self, order_id: str) -> None:
        with unit_of_work(self._sessions) as session:
            session.execute(delete(OrderRow).where(OrderRow.id == order_id))

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            id=order.id,
            owner_id=order.owner_id,
            tour_id=order.tour_id,
            tour_title=order.tour_title,
            departure_date=order.departure_date,
            payment_method=order.payment_method,
            currency=order.total_price.currency,
            total_price=order.total_price.amount,
            paid_amount=order.paid_amount.amount,
            balance=order.balance.amount,
            passenger_count=order.passenger_count,
            status=order.status.value,
            first_name=order.first_name,
            last_name=order.last_name,
            email=order.email,
            phone=order.phone,
            hotel=order.hotel,
            passport_number=order.passport_number,
            passport_expiry=order.passport_expiry,
            passport_copy=order.passport_copy,
            show_in_provider=order.show_in_provider,
            draft_key=order.draft_key,
            capacity_override=order.capacity_override,
            created_by=order.created_by,
            created_at=order.created_at,
            edited_by=order.edited_by,
            edited_at=order.edited_at,
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        return Order(
            id=row.id,
            owner_id=row.owner_id,
            tour_id=row.tour_id,
            tour_title=row.tour_title,
            departure_date=row.departure_date,
            payment_method=row.payment_method,
            total_price=Money(row.total_price, row.currency),
            paid_amount=Money(row.paid_amount, row.currency),
            balance=Money(row.balance, row.currency),
            passenger_count=row.passenger_count,
            status=OrderStatus(row.status),
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
            phone=row.phone,
            hotel=row.hotel,
            passport_number=row.passport_number,
            passport_expiry=row.passport_expiry,
            passport_copy=row.passport_copy,
            show_in_provider=row.show_in_provider,
            draft_key=row.draft_key,
            capacity_override=row.capacity_override,
            created_by=row.created_by,
            created_at=_aware(row.created_at),
            edited_by=row.edited_by,
            edited_at=_aware(row.edited_at),
        )


class SqlPassengerRepository(PassengerRepository):

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get_by_id(self, passenger_id: str) -> CommittedPassenger | None:
        with unit_of_work(self._sessions) as session:
            row = session.get(PassengerRow, passenger_id)
            return self._to_domain(row) if row is not None else None

    def find(
        self,
        *,
        order_id: str | None = None,
        owner_id: str | None = None,
        tour_id: str | None = None,
        departure_date: date | None = None,
    ) -> list[CommittedPassenger]:
        stmt = select(PassengerRow)
        if order_id is not None:
            stmt = stmt.where(PassengerRow.order_id == order_id)
        if owner_id is not None:
            stmt = stmt.where(PassengerRow.owner_id == owner_id)
        if tour_id is not None:
            stmt = stmt.where(PassengerRow.tour_id == tour_id)
        if departure_date is not None:
            stmt = stmt.where(PassengerRow.departure_date == departure_date)
        with unit_of_work(self._sessions) as session:
            return [self._to_domain(row) for row in session.scalars(stmt).all()]

    def save(self, passenger: CommittedPassenger) -> None:
        self.save_all([passenger])

    def save_all(self, passengers: list[CommittedPassenger]) -> None:
        if not passengers:
            return
        with unit_of_work(self._sessions) as session:
            for passenger in passengers:
                session.merge(self._to_row(passenger))

    def delete_by_order(self, order_id: str) -> None:
        with unit_of_work(self._sessions) as session:
            session.execute(delete(PassengerRow).where(PassengerRow.order_id == order_id))

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(p: CommittedPassenger) -> PassengerRow:
        return PassengerRow(
            id=p.id,
            order_id=p.order_id,
            owner_id=p.owner_id,
            tour_id=p.tour_id,
            departure_date=p.departure_date,
            serial_no=p.serial_no,
            status=p.status.value,
            created_at=p.created_at,
            first_name=p.first_name,
            last_name=p.last_name,
            name=p.name,
            date_of_birth=p.date_of_birth,
            age=p.age,
            gender=p.gender,
            passport_number=p.passport_number,
            passport_expiry=p.passport_expiry,
            nationality=p.nationality,
            room_type=p.room_type,
            hotel=p.hotel,
            additional_services=list(p.additional_services),
            price=p.price.amount,
            currency=p.price.currency,
            email=p.email,
            phone=p.phone,
            emergency_phone=p.emergency_phone,
            allergy=p.allergy,
            notes=p.notes,
            passport_upload=p.passport_upload,
        )

    @staticmethod
    def _to_domain(row: PassengerRow) -> CommittedPassenger:
        return CommittedPassenger(
            id=row.id,
            order_id=row.order_id,
            owner_id=row.owner_id,
            tour_id=row.tour_id,
            departure_date=row.departure_date,
            serial_no=row.serial_no,
            status=PassengerStatus(row.status),
            created_at=_aware(row.created_at),
            first_name=row.first_name,
            last_name=row.last_name,
            name=row.name,
            date_of_birth=row.date_of_birth,
            age=row.age,
            gender=row.gender,
            passport_number=row.passport_number,
            passport_expiry=row.passport_expiry,
            nationality=row.nationality,
            room_type=row.room_type,
            hotel=row.hotel,
            additional_services=list(row.additional_services or []),
            price=Money(row.price, row.currency),
            email=row.email,
            phone=row.phone,
            emergency_phone=row.emergency_phone,
            allergy=row.allergy,
            notes=row.notes,
            passport_upload=row.passport_upload,
        )
