"""Order aggregate -- the core of the domain.

An Order is created from a cart snapshot and owns its line items.  Each
line item remembers the seller who fulfils it and what has happened to its
stock, so seller-scoped transitions can move a subset of the items while
the rest of the order stays where it is.

Two state machines live here:

* ``status``: pending -> Approved -> shipping -> delivered/completed,
  with cancelled reachable from any non-terminal state and
  returned/damaged reachable from shipping.
* ``delivery_status``: unassigned -> assigned -> picked_up -> in_transit
  -> delivered, driven by couriers and allowed to run ahead of or behind
  ``status``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable

from bazaar.domain.exceptions import InvalidTransitionError, ValidationError
from bazaar.domain.model.inventory import StockTarget
from bazaar.domain.model.value_objects import Money, OptionSet, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    APPROVED = "Approved"
    SHIPPING = "shipping"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    DAMAGED = "damaged"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_fulfilled(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.COMPLETED)

    @staticmethod
    def parse(value: str) -> OrderStatus:
        for status in OrderStatus:
            if status.value.lower() == (value or "").strip().lower():
                return status
        raise ValidationError(f"Invalid order status: {value!r}")


TERMINAL_STATUSES = frozenset(
    {
        OrderStatus.COMPLETED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.RETURNED,
        OrderStatus.DAMAGED,
    }
)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.APPROVED, OrderStatus.CANCELLED}),
    OrderStatus.APPROVED: frozenset({OrderStatus.SHIPPING, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPING: frozenset(
        {
            OrderStatus.DELIVERED,
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
            OrderStatus.RETURNED,
            OrderStatus.DAMAGED,
        }
    ),
}


class DeliveryStatus(Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return list(DeliveryStatus).index(self)

    @staticmethod
    def parse(value: str) -> DeliveryStatus:
        try:
            return DeliveryStatus((value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid delivery status: {value!r}") from None


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash on delivery"
    ONLINE_PAYMENT = "online payment"
    PAYMOB = "Paymob"

    @staticmethod
    def parse(value: str) -> PaymentMethod:
        for method in PaymentMethod:
            if method.value.lower() == (value or "").strip().lower():
                return method
        raise ValidationError(f"Invalid payment method: {value!r}")


class LineStockState(Enum):
    """What the ledger currently holds for one order line."""

    RESERVED = "reserved"        # held, not yet sold (cash on delivery)
    CONSUMED = "consumed"        # sold
    RELEASED = "released"        # reservation given back
    RESTOCKED = "restocked"      # sale undone, units back on hand
    BACKORDERED = "backordered"  # paid, but no stock could be taken


@dataclass
class OrderLineItem:
    """Snapshot of one cart line at order-creation time.

    ``seller_id`` is copied from the product on purpose: product ownership
    may change later and the order must keep the seller at time of sale.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    price: Money  # locked at order-creation time
    seller_id: str | None = None
    variation_id: str | None = None
    variation_options: OptionSet = field(default_factory=OptionSet)
    status: OrderStatus = OrderStatus.PENDING
    stock_state: LineStockState = LineStockState.RESERVED

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value

    @property
    def target(self) -> StockTarget:
        return StockTarget(self.product_id, self.variation_id)

    @property
    def display_name(self) -> str:
        if self.variation_options:
            return f"{self.product_name} ({self.variation_options.label()})"
        return self.product_name


MAX_DELIVERY_NOTES = 500

ItemFilter = Callable[[OrderLineItem], bool]


def all_items(item: OrderLineItem) -> bool:
    return True


def open_items(item: OrderLineItem) -> bool:
    return not item.status.is_terminal


def seller_items(seller_id: str) -> ItemFilter:
    def _belongs_to_seller(item: OrderLineItem) -> bool:
        return item.seller_id == seller_id

    return _belongs_to_seller


@dataclass
class Order:
    """Aggregate root for customer orders."""

    id: str
    customer_id: str
    items: list[OrderLineItem]
    cart_price: Money
    taxes: Money
    shipping: Money
    total_order_price: Money
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    is_paid: bool = False
    paid_at: datetime | None = None
    status: OrderStatus = OrderStatus.PENDING
    delivery_guy_id: str | None = None
    delivery_status: DeliveryStatus = DeliveryStatus.UNASSIGNED
    assigned_at: datetime | None = None
    picked_up_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    delivery_notes: str | None = None
    shipping_address: dict[str, str] = field(default_factory=dict)
    payment_reference: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Item selection -------------------------------------------------------

    def select_items(self, item_filter: ItemFilter = all_items) -> list[OrderLineItem]:
        return [item for item in self.items if item_filter(item)]

    def sellers(self) -> set[str]:
        return {item.seller_id for item in self.items if item.seller_id}

    # --- Status machine -------------------------------------------------------

    @staticmethod
    def can_transition(current: OrderStatus, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS.get(current, frozenset())

    def plan_transition(
        self, items: Iterable[OrderLineItem], new_status: OrderStatus
    ) -> list[OrderLineItem]:
        """Validate moving ``items`` to ``new_status``; return those that move.

        Items already in ``new_status`` are skipped.  Any other disallowed
        move rejects the whole request before anything changes.
        """
        moving: list[OrderLineItem] = []
        for item in items:
            if item.status == new_status:
                continue
            if not self.can_transition(item.status, new_status):
                raise InvalidTransitionError(
                    f"Cannot move {item.display_name} in order #{self.id} "
                    f"from {item.status.value} to {new_status.value}"
                )
            moving.append(item)
        return moving

    def mark_items(self, items: Iterable[OrderLineItem], new_status: OrderStatus) -> None:
        """Record the new status on ``items`` and refresh the order status."""
        for item in items:
            item.status = new_status
        now = datetime.now(timezone.utc)
        if new_status.is_fulfilled and self.delivered_at is None:
            self.delivered_at = now
        if new_status == OrderStatus.CANCELLED and self.cancelled_at is None:
            self.cancelled_at = now
        self.status = self._summarize_status(new_status)
        self.touch()

    def _summarize_status(self, latest: OrderStatus) -> OrderStatus:
        statuses = {item.status for item in self.items}
        if len(statuses) == 1:
            return statuses.pop()
        if all(status.is_terminal for status in statuses):
            if any(status.is_fulfilled for status in statuses):
                return OrderStatus.COMPLETED
            return latest
        # Items still in flight: the order is as far along as its slowest item.
        rank = [OrderStatus.PENDING, OrderStatus.APPROVED, OrderStatus.SHIPPING]
        open_statuses = [s for s in statuses if not s.is_terminal]
        return min(open_statuses, key=rank.index)

    # --- Payment --------------------------------------------------------------

    def set_paid(self, is_paid: bool) -> None:
        self.is_paid = is_paid
        self.paid_at = datetime.now(timezone.utc) if is_paid else None
        self.touch()

    def set_payment_method(self, method: PaymentMethod) -> None:
        self.payment_method = method
        self.touch()

    # --- Delivery machine -----------------------------------------------------

    def assign_courier(self, courier_id: str) -> None:
        if self.status.is_terminal:
            raise InvalidTransitionError(
                f"Cannot assign a courier to order #{self.id} in {self.status.value} status"
            )
        if self.delivery_status not in (DeliveryStatus.UNASSIGNED, DeliveryStatus.ASSIGNED):
            raise InvalidTransitionError(
                f"Order #{self.id} is already {self.delivery_status.value}"
            )
        self.delivery_guy_id = courier_id
        self.delivery_status = DeliveryStatus.ASSIGNED
        self.assigned_at = datetime.now(timezone.utc)
        self.touch()

    def advance_delivery(self, new_status: DeliveryStatus, notes: str | None = None) -> None:
        """Move the delivery sub-state forward; steps may be skipped."""
        if notes is not None and len(notes) > MAX_DELIVERY_NOTES:
            raise ValidationError("Delivery notes too long")
        if self.delivery_status == DeliveryStatus.UNASSIGNED:
            raise InvalidTransitionError(f"Order #{self.id} has no courier assigned")
        if new_status.rank <= self.delivery_status.rank:
            raise InvalidTransitionError(
                f"Delivery status cannot go from {self.delivery_status.value} "
                f"to {new_status.value}"
            )
        now = datetime.now(timezone.utc)
        if new_status == DeliveryStatus.PICKED_UP:
            self.picked_up_at = now
        elif new_status == DeliveryStatus.DELIVERED:
            self.delivered_at = now
        self.delivery_status = new_status
        if notes is not None:
            self.delivery_notes = notes
        self.touch()

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
