"""Cart aggregate -- one active cart per user.

Line items capture the unit price at the moment they are added; later
catalog price changes never reach an existing line.  Totals are always
recomputed from the lines, never patched incrementally.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.inventory import StockTarget
from bazaar.domain.model.value_objects import Money, OptionSet, Quantity

COUPON_CODE_LENGTH = 8


def normalize_coupon_code(code: str) -> str:
    normalized = (code or "").strip().upper()
    if len(normalized) != COUPON_CODE_LENGTH:
        raise ValidationError(f"Coupon code must be {COUPON_CODE_LENGTH} characters")
    return normalized


@dataclass(frozen=True)
class Coupon:
    code: str
    discount: Decimal
    expires_at: datetime

    def is_valid_at(self, moment: datetime) -> bool:
        return self.expires_at > moment


@dataclass(frozen=True)
class AppliedCoupon:
    code: str
    discount: Decimal


@dataclass
class CartLineItem:
    product_id: str
    product_name: str
    quantity: Quantity
    price: Money  # captured at add-time
    variation_id: str | None = None
    variation_options: OptionSet = field(default_factory=OptionSet)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value

    @property
    def target(self) -> StockTarget:
        return StockTarget(self.product_id, self.variation_id)

    def same_target(self, product_id: str, variation_id: str | None) -> bool:
        return self.product_id == product_id and self.variation_id == variation_id


@dataclass
class Cart:
    id: str
    user_id: str
    items: list[CartLineItem] = field(default_factory=list)
    currency: str = "EGP"
    total_price: Money | None = None
    total_price_after_discount: Money | None = None
    coupon: AppliedCoupon | None = None
    payment_reference: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.total_price is None:
            self.recalculate()

    # --- Line items -----------------------------------------------------------

    def find_line(self, product_id: str, variation_id: str | None) -> CartLineItem | None:
        for item in self.items:
            if item.same_target(product_id, variation_id):
                return item
        return None

    def get_line(self, line_id: str) -> CartLineItem:
        for item in self.items:
            if item.id == line_id:
                return item
        raise EntityNotFoundError("Product not found in cart")

    def add_line(self, line: CartLineItem) -> CartLineItem:
        """Add a new line, or merge into the line for the same target."""
        existing = self.find_line(line.product_id, line.variation_id)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + line.quantity.value)
            self._lines_changed()
            return existing
        self.items.append(line)
        self._lines_changed()
        return line

    def set_quantity(self, line_id: str, quantity: int) -> CartLineItem:
        line = self.get_line(line_id)
        line.quantity = Quantity(quantity)
        self._lines_changed()
        return line

    def retarget_line(
        self, line_id: str, variation_id: str, variation_options: OptionSet, price: Money
    ) -> CartLineItem:
        line = self.get_line(line_id)
        line.variation_id = variation_id
        line.variation_options = variation_options
        line.price = price
        self._lines_changed()
        return line

    def remove_line(self, line_id: str) -> None:
        line = self.get_line(line_id)
        self.items.remove(line)
        self._lines_changed()

    def clear(self) -> None:
        self.items.clear()
        self._lines_changed()

    # --- Coupons --------------------------------------------------------------

    def apply_coupon(self, coupon: Coupon) -> None:
        """Apply ``coupon``, replacing any coupon applied before.

        Any later change to the lines drops the coupon again; the shopper
        re-applies it to the new total.
        """
        self.coupon = AppliedCoupon(code=coupon.code, discount=coupon.discount)
        self.recalculate()

    # --- Totals ---------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def payable_total(self) -> Money:
        """What checkout charges for the goods: discounted total if any."""
        if self.total_price_after_discount is not None:
            return self.total_price_after_discount
        return self.total_price  # type: ignore[return-value]

    def recalculate(self) -> None:
        raw = Money.zero(self.currency)
        for item in self.items:
            raw = raw + item.line_total
        self.total_price = raw.round_up_to_increment()
        if self.coupon is not None:
            self.total_price_after_discount = (
                self.total_price.discounted(self.coupon.discount).round_up_to_increment()
            )
        else:
            self.total_price_after_discount = None
        self.updated_at = datetime.now(timezone.utc)

    def _lines_changed(self) -> None:
        self.coupon = None
        self.recalculate()
