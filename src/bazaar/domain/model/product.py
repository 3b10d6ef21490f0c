"""Product aggregate.

Products live independently of carts and orders.  A product either holds
stock itself or, once it has variations, through each of its variations.
Variations are part of the product document: they are created, looked up
and deactivated only through the Product.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from bazaar.domain.exceptions import (
    DuplicateVariationError,
    ValidationError,
    VariationNotFoundError,
)
from bazaar.domain.model.inventory import StockLevel, StockTarget
from bazaar.domain.model.value_objects import Money, OptionSet

MAX_PRICE = Decimal("250000")
DEFAULT_VARIATION_LOW_STOCK_THRESHOLD = 5


def price_after_discount(price: Money, discount_percentage: Decimal) -> Money:
    """``ceil(price * (1 - discount / 100))``"""
    return price.discounted(discount_percentage).round_up()


def check_pricing(price: Money, discount_percentage: Decimal) -> None:
    if price.amount > MAX_PRICE:
        raise ValidationError(f"Price cannot exceed {MAX_PRICE}")
    if not Decimal(0) <= Decimal(discount_percentage) <= Decimal(100):
        raise ValidationError("Discount percentage must be between 0 and 100")


@dataclass(frozen=True)
class PriceHistoryEntry:
    price: Money
    discount_percentage: Decimal
    price_after_discount: Money
    changed_by: str | None = None
    reason: str | None = None
    changed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Variation:
    """A stock-bearing option combination of one product."""

    id: str
    options: OptionSet
    sku: str
    price: Money
    stock: StockLevel
    discount_percentage: Decimal = Decimal(0)
    is_active: bool = True

    @property
    def price_after_discount(self) -> Money:
        return price_after_discount(self.price, self.discount_percentage)

    def update_pricing(self, price: Money | None = None, discount_percentage: Decimal | None = None) -> None:
        new_price = price if price is not None else self.price
        new_discount = (
            Decimal(discount_percentage) if discount_percentage is not None else self.discount_percentage
        )
        check_pricing(new_price, new_discount)
        self.price = new_price
        self.discount_percentage = new_discount


@dataclass
class Product:
    """A product in the catalog.

    This is an aggregate root -- it is the entry point for any operation
    involving the product or one of its variations.
    """

    id: str
    name: str
    price: Money
    stock: StockLevel
    seller_id: str | None = None
    sku: str | None = None
    discount_percentage: Decimal = Decimal(0)
    axes: list[str] = field(default_factory=list)
    variations: list[Variation] = field(default_factory=list)
    price_history: list[PriceHistoryEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.stock.label = self.name
        for variation in self.variations:
            variation.stock.label = self._variation_label(variation.options)

    # --- Pricing --------------------------------------------------------------

    @property
    def price_after_discount(self) -> Money:
        return price_after_discount(self.price, self.discount_percentage)

    def update_price(
        self,
        new_price: Money,
        discount_percentage: Decimal | None = None,
        changed_by: str | None = None,
        reason: str | None = None,
    ) -> bool:
        """Change the product price, recording the change in price history.

        This does NOT affect carts or orders: both capture a price snapshot.
        Returns False if nothing changed.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        discount = Decimal(discount_percentage) if discount_percentage is not None else Decimal(0)
        check_pricing(new_price, discount)
        if new_price == self.price and discount == self.discount_percentage:
            return False
        self.price_history.append(
            PriceHistoryEntry(
                price=new_price,
                discount_percentage=discount,
                price_after_discount=price_after_discount(new_price, discount),
                changed_by=changed_by,
                reason=reason,
            )
        )
        self.price = new_price
        self.discount_percentage = discount
        return True

    # --- Variations -----------------------------------------------------------

    @property
    def has_variations(self) -> bool:
        return bool(self.variations)

    def get_variation(self, variation_id: str) -> Variation:
        for variation in self.variations:
            if variation.id == variation_id:
                return variation
        raise VariationNotFoundError(f"Variation '{variation_id}' not found on {self.name}")

    def find_variation(self, options: OptionSet) -> Variation | None:
        """Exact match on every supplied axis, values compared case-insensitively.

        A partial option set only matches if exactly one variation fits it;
        several fits mean the selection is incomplete.
        """
        if not options:
            return None
        exact = [v for v in self.variations if v.options == options]
        if exact:
            return exact[0]
        partial = [v for v in self.variations if v.options.matches(options)]
        if len(partial) == 1:
            return partial[0]
        return None

    def add_variation(
        self,
        options: OptionSet,
        sku: str | None = None,
        price: Money | None = None,
        discount_percentage: Decimal | None = None,
        quantity: int = 0,
        low_stock_threshold: int = DEFAULT_VARIATION_LOW_STOCK_THRESHOLD,
        changed_by: str | None = None,
    ) -> Variation:
        """Create a new variation; the full option set must be new to this product."""
        if not options:
            raise ValidationError("A variation needs at least one option")
        if any(v.options == options for v in self.variations):
            raise DuplicateVariationError(
                f"Variation {options.label()} already exists on {self.name}"
            )
        variation_sku = (sku or self.default_variation_sku(options)).upper()
        if any(v.sku == variation_sku for v in self.variations):
            raise DuplicateVariationError(f"SKU {variation_sku} already used on {self.name}")
        if quantity < 0:
            raise ValidationError("Variation quantity cannot be negative")

        stock = StockLevel(low_stock_threshold=low_stock_threshold)
        variation = Variation(
            id=uuid.uuid4().hex,
            options=options,
            sku=variation_sku,
            price=price if price is not None else self.price,
            stock=stock,
            discount_percentage=(
                Decimal(discount_percentage)
                if discount_percentage is not None
                else self.discount_percentage
            ),
        )
        check_pricing(variation.price, variation.discount_percentage)
        stock.label = self._variation_label(options)
        if quantity:
            stock.add(quantity, reason="Initial variation stock", changed_by=changed_by)
        self.variations.append(variation)
        for axis in options.axes:
            if axis.casefold() not in (a.casefold() for a in self.axes):
                self.axes.append(axis)
        return variation

    def default_variation_sku(self, options: OptionSet) -> str:
        base = self.sku or self.id
        values = "-".join("-".join(value.split()) for _, value in options)
        return f"{base}-{values}".upper()

    # --- Stock ----------------------------------------------------------------

    def stock_for(self, target: StockTarget) -> StockLevel:
        if target.variation_id:
            return self.get_variation(target.variation_id).stock
        return self.stock

    def target(self, variation: Variation | None = None) -> StockTarget:
        return StockTarget(self.id, variation.id if variation else None)

    def _variation_label(self, options: OptionSet) -> str:
        return f"{self.name} ({options.label()})"
