"""Field converters shared by the JSON repositories."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from tourdesk.domain.model.value_objects import Money


def money_to_raw(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def money_from_raw(raw: dict | None) -> Money:
    if not raw:
        return Money.zero()
    return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))


def date_to_raw(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def date_from_raw(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def datetime_from_raw(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
