"""SQL seat ledger: one row per departure, claimed with a conditional UPDATE.

``UPDATE departure_seats SET booked = booked + :n
  WHERE tour_id = :t AND departure_date = :d AND booked + :n <= :capacity``

The database applies the condition and the increment as one statement,
so concurrent claims for the last seat cannot both match, across threads
and processes alike.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import case, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tourdesk.domain.exceptions import StoreError
from tourdesk.domain.model.value_objects import DepartureKey
from tourdesk.domain.repository.seat_ledger import SeatLedger
from tourdesk.infrastructure.persistence.sql.models import DepartureSeatRow
from tourdesk.infrastructure.persistence.sql.session import unit_of_work

logger = logging.getLogger(__name__)


class SqlSeatLedger(SeatLedger):

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def booked(self, departure: DepartureKey) -> int | None:
        with unit_of_work(self._sessions) as session:
            row = session.get(
                DepartureSeatRow, (departure.tour_id, departure.departure_date)
            )
            return row.booked if row is not None else None

    def claim(
        self,
        departure: DepartureKey,
        seats: int,
        capacity: int | None,
        *,
        seed_booked: int = 0,
    ) -> bool:
        self._seed(departure, seed_booked)

        stmt = (
            update(DepartureSeatRow)
            .where(
                DepartureSeatRow.tour_id == departure.tour_id,
                DepartureSeatRow.departure_date == departure.departure_date,
            )
            .values(
                booked=DepartureSeatRow.booked + seats,
                claimed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if capacity is not None:
            stmt = stmt.where(DepartureSeatRow.booked + seats <= capacity)

        with unit_of_work(self._sessions) as session:
            result = session.execute(stmt)
            return result.rowcount == 1

    def release(self, departure: DepartureKey, seats: int) -> None:
        stmt = (
            update(DepartureSeatRow)
            .where(
                DepartureSeatRow.tour_id == departure.tour_id,
                DepartureSeatRow.departure_date == departure.departure_date,
            )
            .values(
                booked=case(
                    (DepartureSeatRow.booked >= seats, DepartureSeatRow.booked - seats),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        with unit_of_work(self._sessions) as session:
            session.execute(stmt)

    def resync(self, departure: DepartureKey, booked: int, *, idle_since: datetime) -> bool:
        stmt = (
            update(DepartureSeatRow)
            .where(
                DepartureSeatRow.tour_id == departure.tour_id,
                DepartureSeatRow.departure_date == departure.departure_date,
                DepartureSeatRow.booked > booked,
                or_(
                    DepartureSeatRow.claimed_at.is_(None),
                    DepartureSeatRow.claimed_at <= idle_since,
                ),
            )
            .values(booked=booked)
            .execution_options(synchronize_session=False)
        )
        with unit_of_work(self._sessions) as session:
            return session.execute(stmt).rowcount == 1

    def _seed(self, departure: DepartureKey, booked: int) -> None:
        """Create the departure's row if it does not exist yet."""
        key = (departure.tour_id, departure.departure_date)
        try:
            with self._sessions.begin() as session:
                exists = session.scalars(
                    select(DepartureSeatRow.booked).where(
                        DepartureSeatRow.tour_id == departure.tour_id,
                        DepartureSeatRow.departure_date == departure.departure_date,
                    )
                ).first()
                if exists is None:
                    session.add(
                        DepartureSeatRow(
                            tour_id=key[0], departure_date=key[1], booked=booked
                        )
                    )
        except IntegrityError:
            # Another claim created the row first; its seed stands.
            logger.debug("Seat row for %s already seeded", departure)
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc}") from exc
