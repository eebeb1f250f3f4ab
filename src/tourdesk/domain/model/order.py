"""Order aggregate: the unit of capacity consumption.

An order and the passengers attached to it are committed as a whole or not
at all. Seats are consumed by every order that is not cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from tourdesk.domain.exceptions import RuleViolation
from tourdesk.domain.model.passenger import DraftPassenger, new_id
from tourdesk.domain.model.value_objects import DepartureKey, Money


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_PASSENGERS = 20


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for bookings.

    New orders come from ``Order.create()``, which checks the booking
    rules. Repositories call the constructor directly when loading.
    """

    id: str
    owner_id: str
    tour_id: str
    departure_date: date
    payment_method: str
    total_price: Money = field(default_factory=Money.zero)
    paid_amount: Money = field(default_factory=Money.zero)
    balance: Money = field(default_factory=Money.zero)
    passenger_count: int = 0
    status: OrderStatus = OrderStatus.PENDING

    # Lead passenger contact/travel fields
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    hotel: str = ""
    passport_number: str = ""
    passport_expiry: date | None = None
    passport_copy: str | None = None

    tour_title: str = ""
    show_in_provider: bool = True
    draft_key: str | None = None
    capacity_override: bool = False

    created_by: str = ""
    created_at: datetime = field(default_factory=_now)
    edited_by: str | None = None
    edited_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        *,
        owner_id: str,
        tour_id: str,
        tour_title: str,
        departure_date: date,
        payment_method: str,
        passengers: list[DraftPassenger],
        created_by: str,
        draft_key: str | None = None,
        capacity_override: bool = False,
        show_in_provider: bool = True,
        order_id: str | None = None,
    ) -> Order:
        """Create a pending order from a manifest, enforcing all invariants.

        ``order_id`` rebuilds an order that was left without passengers by
        an earlier failed commit; by default a fresh id is issued.
        """
        if not passengers:
            raise RuleViolation("Order must contain at least one passenger")
        if not payment_method or not payment_method.strip():
            raise RuleViolation("Payment method is required")

        lead = passengers[0]
        total = Money.total(p.price for p in passengers)
        return Order(
            id=order_id or new_id(),
            owner_id=owner_id,
            tour_id=tour_id,
            tour_title=tour_title,
            departure_date=departure_date,
            payment_method=payment_method.strip(),
            total_price=total,
            paid_amount=Money.zero(total.currency),
            balance=total,
            passenger_count=len(passengers),
            status=OrderStatus.PENDING,
            first_name=lead.first_name,
            last_name=lead.last_name,
            email=lead.email,
            phone=lead.phone,
            hotel=lead.hotel,
            passport_number=lead.passport_number,
            passport_expiry=lead.passport_expiry,
            passport_copy=lead.passport_upload,
            show_in_provider=show_in_provider,
            draft_key=draft_key,
            capacity_override=capacity_override,
            created_by=created_by,
        )

    # --- State transitions ----------------------------------------------------

    def confirm(self, edited_by: str) -> None:
        """Transition PENDING -> CONFIRMED."""
        if self.status != OrderStatus.PENDING:
            raise RuleViolation(
                f"Cannot confirm order: current status is {self.status.value}, "
                f"expected pending"
            )
        self.status = OrderStatus.CONFIRMED
        self._touch(edited_by)

    def cancel(self, edited_by: str) -> None:
        """Transition PENDING|CONFIRMED -> CANCELLED.

        The seats this order held must be released by the caller.
        """
        if self.status == OrderStatus.CANCELLED:
            raise RuleViolation("Order is already cancelled")
        self.status = OrderStatus.CANCELLED
        self._touch(edited_by)

    def record_payment(self, amount: Money, edited_by: str) -> None:
        """Add a received payment; the balance can never go below zero."""
        if self.is_terminal:
            raise RuleViolation("Cannot record a payment on a cancelled order")
        if amount.amount <= 0:
            raise RuleViolation("Payment amount must be positive")
        if amount > self.balance:
            raise RuleViolation(
                f"Payment {amount} exceeds outstanding balance {self.balance}"
            )
        self.paid_amount = self.paid_amount + amount
        self.balance = self.balance - amount
        self._touch(edited_by)

    # --- Computed properties --------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    @property
    def consumes_capacity(self) -> bool:
        return self.status != OrderStatus.CANCELLED

    @property
    def departure(self) -> DepartureKey:
        return DepartureKey(self.tour_id, self.departure_date)

    @property
    def lead_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    # --- Internal helpers -----------------------------------------------------

    def _touch(self, edited_by: str) -> None:
        self.edited_by = edited_by
        self.edited_at = _now()
