"""Stock levels and their audit trail.

Every stock-bearing entity (a product, or one of its variations) owns a
StockLevel.  A StockLevel knows the quantity on hand, how much of it is
held by open orders, how much has been sold, and keeps an append-only
history of every change.  No mutation here happens without a history
entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from bazaar.domain.exceptions import (
    InsufficientReservedStockError,
    InsufficientStockError,
    OutOfStockError,
    ValidationError,
)


class StockMovement(Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    RETURN = "return"
    ADJUSTMENT = "adjustment"
    RESERVED = "reserved"
    RELEASED = "released"


@dataclass(frozen=True)
class StockHistoryEntry:
    """One immutable line of the stock audit trail.

    ``quantity`` is the size of the movement.  For ADJUSTMENT entries it is
    a signed delta; for every other type the type carries the direction.
    """

    type: StockMovement
    quantity: int
    order_id: str | None = None
    notes: str | None = None
    changed_by: str | None = None
    changed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class StockTarget:
    """Addresses one stock-bearing entity: a product or one of its variations."""

    product_id: str
    variation_id: str | None = None

    def __str__(self) -> str:
        if self.variation_id:
            return f"product {self.product_id} / variation {self.variation_id}"
        return f"product {self.product_id}"


@dataclass
class StockLevel:
    """Stock ledger for one product or variation.

    Invariants:
    - ``0 <= reserved_stock <= quantity``
    - ``available_stock`` is always >= 0
    """

    quantity: int = 0
    reserved_stock: int = 0
    sold: int = 0
    low_stock_threshold: int = 10
    history: list[StockHistoryEntry] = field(default_factory=list)
    label: str = ""

    @property
    def available_stock(self) -> int:
        return max(0, self.quantity - self.reserved_stock)

    @property
    def is_low_stock(self) -> bool:
        return self.available_stock <= self.low_stock_threshold

    @property
    def in_stock(self) -> bool:
        return self.quantity > self.reserved_stock

    # --- Reservations ---------------------------------------------------------

    def reserve(
        self,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        notes: str = "Stock reserved for order",
    ) -> None:
        """Hold stock for an order.

        Raises InsufficientStockError if not enough is available.
        """
        self._require_positive(quantity, "Reservation")
        self.require_available(quantity)
        self.reserved_stock += quantity
        self._record(StockMovement.RESERVED, quantity, order_id, notes, changed_by)

    def release(
        self,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        notes: str = "Reserved stock released",
    ) -> int:
        """Give back reserved stock.

        Clamps at the current reservation instead of failing, because this
        runs from compensating paths that must not fail themselves.
        Returns the amount actually released.
        """
        self._require_positive(quantity, "Release")
        released = min(quantity, self.reserved_stock)
        self.reserved_stock -= released
        self._record(StockMovement.RELEASED, released, order_id, notes, changed_by)
        return released

    def consume(
        self,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        notes: str = "Stock consumed for order fulfillment",
    ) -> None:
        """Turn a reservation into a sale.

        Both ``quantity`` and ``reserved_stock`` drop by the same amount.
        """
        self._require_positive(quantity, "Consume")
        if self.reserved_stock < quantity:
            raise InsufficientReservedStockError(
                f"Cannot consume {quantity} of {self.label or 'item'} "
                f"-- only {self.reserved_stock} currently reserved",
                reserved=self.reserved_stock,
                requested=quantity,
            )
        self.quantity -= quantity
        self.reserved_stock -= quantity
        self.sold += quantity
        self._record(StockMovement.SALE, quantity, order_id, notes, changed_by)

    # --- Direct movements -----------------------------------------------------

    def sell(
        self,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        notes: str = "Stock sold on paid order",
    ) -> None:
        """Sell unreserved stock immediately (already-paid orders)."""
        self._require_positive(quantity, "Sale")
        self.require_available(quantity)
        self.quantity -= quantity
        self.sold += quantity
        self._record(StockMovement.SALE, quantity, order_id, notes, changed_by)

    def restock(
        self,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        notes: str = "Sold stock returned to inventory",
    ) -> None:
        """Undo a sale: the units come back on hand."""
        self._require_positive(quantity, "Return")
        self.quantity += quantity
        self.sold = max(0, self.sold - quantity)
        self._record(StockMovement.RETURN, quantity, order_id, notes, changed_by)

    def add(self, quantity: int, reason: str | None = None, changed_by: str | None = None) -> None:
        """Receive new stock."""
        self._require_positive(quantity, "Stock addition")
        self.quantity += quantity
        self._record(StockMovement.PURCHASE, quantity, None, reason, changed_by)

    def subtract(self, quantity: int, reason: str | None = None, changed_by: str | None = None) -> None:
        """Write off unreserved stock."""
        self._require_positive(quantity, "Stock subtraction")
        if quantity > self.available_stock:
            raise InsufficientStockError(
                f"Insufficient stock to subtract from {self.label or 'item'}. "
                f"Available: {self.available_stock}, Requested: {quantity}",
                available=self.available_stock,
                requested=quantity,
            )
        self.quantity -= quantity
        self._record(StockMovement.ADJUSTMENT, -quantity, None, reason, changed_by)

    def adjust_absolute(
        self,
        new_quantity: int,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> int:
        """Administrative correction: set the quantity on hand directly.

        Returns the signed delta that was recorded.
        """
        if new_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        if new_quantity < self.reserved_stock:
            raise ValidationError(
                f"Cannot set {self.label or 'item'} stock to {new_quantity} "
                f"-- {self.reserved_stock} units are reserved by open orders"
            )
        delta = new_quantity - self.quantity
        self.quantity = new_quantity
        self._record(StockMovement.ADJUSTMENT, delta, None, reason, changed_by)
        return delta

    def set_low_stock_threshold(self, threshold: int) -> None:
        if threshold < 0:
            raise ValidationError("Threshold must be a non-negative number")
        self.low_stock_threshold = threshold

    # --- Queries --------------------------------------------------------------

    def require_available(self, quantity: int) -> None:
        """Raise unless ``quantity`` units could be reserved right now."""
        available = self.available_stock
        if quantity <= available:
            return
        name = self.label or "item"
        if available == 0:
            raise OutOfStockError(
                f"{name} is out of stock", available=0, requested=quantity
            )
        raise InsufficientStockError(
            f"Insufficient stock for {name}: only {available} items available "
            f"in stock, requested {quantity}",
            available=available,
            requested=quantity,
        )

    def history_newest_first(self) -> list[StockHistoryEntry]:
        return list(reversed(self.history))

    # --- Internal helpers -----------------------------------------------------

    def _record(
        self,
        movement: StockMovement,
        quantity: int,
        order_id: str | None,
        notes: str | None,
        changed_by: str | None,
    ) -> None:
        self.history.append(
            StockHistoryEntry(
                type=movement,
                quantity=quantity,
                order_id=order_id,
                notes=notes,
                changed_by=changed_by,
            )
        )

    @staticmethod
    def _require_positive(quantity: int, what: str) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"{what} quantity must be an integer")
        if quantity <= 0:
            raise ValidationError(f"{what} quantity must be positive")
