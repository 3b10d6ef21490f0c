"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterator, Mapping

from bazaar.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "EGP"

# Cart and order subtotals are rounded up to this many currency units.
PRICE_INCREMENT = 5


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    # --- Percentages and rounding ---------------------------------------------

    def percent(self, rate: Decimal) -> Money:
        """Return ``rate`` percent of this amount (unrounded)."""
        return Money(self.amount * Decimal(rate) / Decimal(100), self.currency)

    def discounted(self, percentage: Decimal) -> Money:
        """Return the amount after taking ``percentage`` off (unrounded)."""
        factor = Decimal(1) - Decimal(percentage) / Decimal(100)
        return Money(self.amount * factor, self.currency)

    def round_up(self, step: int = 1) -> Money:
        """Round up to the next multiple of ``step`` whole units."""
        units = (self.amount / step).to_integral_value(rounding=ROUND_CEILING)
        return Money(units * step, self.currency)

    def round_up_to_increment(self) -> Money:
        """``ceil(x / 5) * 5`` -- the cart/order subtotal rounding rule."""
        return self.round_up(PRICE_INCREMENT)

    def round_whole(self) -> Money:
        """Round half-up to whole currency units."""
        return Money(self.amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP), self.currency)

    def round_cents(self) -> Money:
        return Money(self.amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), self.currency)

    @property
    def minor_units(self) -> int:
        """Amount in cents, as payment gateways expect it."""
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)

    @staticmethod
    def from_minor_units(cents: int | str, currency: str = DEFAULT_CURRENCY) -> Money:
        try:
            return Money(Decimal(str(cents)) / Decimal(100), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid amount in cents: {cents!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


def _normalize(text: str) -> str:
    return str(text).strip().casefold()


@dataclass(frozen=True)
class OptionSet:
    """Named variation options, e.g. ``{"Color": "Black", "Storage": "128GB"}``.

    Axis order is kept for display, but equality and hashing ignore both the
    order of the axes and the case of names and values.  The legacy
    ``color``/``size`` pair is just a two-axis OptionSet.
    """

    items: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for axis, value in self.items:
            if not str(axis).strip() or not str(value).strip():
                raise ValidationError("Variation option names and values cannot be empty")
            key = _normalize(axis)
            if key in seen:
                raise ValidationError(f"Variation option '{axis}' given more than once")
            seen.add(key)

    @staticmethod
    def of(options: Mapping[str, str] | None) -> OptionSet:
        if not options:
            return OptionSet()
        return OptionSet(tuple((str(k).strip(), str(v).strip()) for k, v in options.items()))

    @property
    def axes(self) -> tuple[str, ...]:
        return tuple(axis for axis, _ in self.items)

    def get(self, axis: str) -> str | None:
        wanted = _normalize(axis)
        for name, value in self.items:
            if _normalize(name) == wanted:
                return value
        return None

    def matches(self, partial: OptionSet) -> bool:
        """True if every axis in ``partial`` has an equal value here."""
        for axis, value in partial.items:
            mine = self.get(axis)
            if mine is None or _normalize(mine) != _normalize(value):
                return False
        return True

    def to_dict(self) -> dict[str, str]:
        return dict(self.items)

    def label(self) -> str:
        return " - ".join(value for _, value in self.items)

    def _key(self) -> frozenset[tuple[str, str]]:
        return frozenset((_normalize(k), _normalize(v)) for k, v in self.items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptionSet):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def __str__(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.items)
