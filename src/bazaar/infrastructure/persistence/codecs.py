"""Conversions between domain values and their JSON document form.

Money is stored as a decimal string plus currency, timestamps as ISO-8601
strings, option sets as ordered ``[axis, value]`` pairs.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from bazaar.domain.model.inventory import StockHistoryEntry, StockLevel, StockMovement
from bazaar.domain.model.value_objects import DEFAULT_CURRENCY, Money, OptionSet


def money_to_raw(money: Money) -> str:
    return str(money.amount)


def money_from_raw(raw: str | None, currency: str = DEFAULT_CURRENCY) -> Money:
    return Money(Decimal(raw if raw is not None else "0"), currency)


def optional_money_to_raw(money: Money | None) -> str | None:
    return money_to_raw(money) if money is not None else None


def optional_money_from_raw(raw: str | None, currency: str) -> Money | None:
    return money_from_raw(raw, currency) if raw is not None else None


def dt_to_raw(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def dt_from_raw(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def options_to_raw(options: OptionSet) -> list[list[str]]:
    return [[axis, value] for axis, value in options]


def options_from_raw(raw: list[list[str]] | None) -> OptionSet:
    return OptionSet(tuple((axis, value) for axis, value in raw or []))


def stock_to_raw(stock: StockLevel) -> dict[str, Any]:
    return {
        "quantity": stock.quantity,
        "reserved_stock": stock.reserved_stock,
        "sold": stock.sold,
        "low_stock_threshold": stock.low_stock_threshold,
        "history": [
            {
                "type": entry.type.value,
                "quantity": entry.quantity,
                "order_id": entry.order_id,
                "notes": entry.notes,
                "changed_by": entry.changed_by,
                "changed_at": entry.changed_at.isoformat(),
            }
            for entry in stock.history
        ],
    }


def stock_from_raw(raw: dict[str, Any]) -> StockLevel:
    return StockLevel(
        quantity=raw.get("quantity", 0),
        reserved_stock=raw.get("reserved_stock", 0),
        sold=raw.get("sold", 0),
        low_stock_threshold=raw.get("low_stock_threshold", 10),
        history=[
            StockHistoryEntry(
                type=StockMovement(h["type"]),
                quantity=h["quantity"],
                order_id=h.get("order_id"),
                notes=h.get("notes"),
                changed_by=h.get("changed_by"),
                changed_at=datetime.fromisoformat(h["changed_at"]),
            )
            for h in raw.get("history", [])
        ],
    )
