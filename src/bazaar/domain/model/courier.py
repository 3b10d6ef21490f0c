"""Courier (delivery) profile."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from bazaar.domain.model.value_objects import Money


@dataclass
class Courier:
    """A delivery-role user's profile and lifetime counters."""

    user_id: str
    name: str
    total_deliveries: int = 0
    earnings: Money = Money(Decimal("0"))

    def record_delivery(self, fee: Money) -> None:
        self.total_deliveries += 1
        self.earnings = self.earnings + fee
