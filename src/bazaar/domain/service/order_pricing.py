"""Domain service: order price computation.

Tax and shipping rates arrive as a CheckoutSettings value fetched once per
request by the caller; nothing here reads global configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.order import Order
from bazaar.domain.model.value_objects import Money


@dataclass(frozen=True)
class CheckoutSettings:
    tax_rate: Decimal  # percent
    shipping_fee: Money

    def __post_init__(self) -> None:
        if self.tax_rate < 0:
            raise ValidationError("Tax rate cannot be negative")


@dataclass(frozen=True)
class OrderTotals:
    cart_price: Money
    taxes: Money
    shipping: Money
    total_order_price: Money


def cash_order_totals(cart_price: Money, settings: CheckoutSettings) -> OrderTotals:
    """Cash on delivery: taxes kept to the cent."""
    taxes = cart_price.percent(settings.tax_rate).round_cents()
    return _totals(cart_price, taxes, settings)


def online_order_totals(cart_price: Money, settings: CheckoutSettings) -> OrderTotals:
    """Online payment: taxes rounded to whole units, as charged by the gateway."""
    taxes = cart_price.percent(settings.tax_rate).round_whole()
    return _totals(cart_price, taxes, settings)


def _totals(cart_price: Money, taxes: Money, settings: CheckoutSettings) -> OrderTotals:
    return OrderTotals(
        cart_price=cart_price,
        taxes=taxes,
        shipping=settings.shipping_fee,
        total_order_price=cart_price + taxes + settings.shipping_fee,
    )


@dataclass(frozen=True)
class SellerShare:
    seller_cart_price: Money
    seller_taxes: Money
    seller_total: Money


def seller_share(order: Order, seller_id: str) -> SellerShare:
    """The part of an order a seller is accountable for.

    Taxes are pro-rated by the seller's share of the order's cart price.
    """
    currency = order.cart_price.currency
    subtotal = Money.zero(currency)
    for item in order.items:
        if item.seller_id == seller_id:
            subtotal = subtotal + item.line_total
    if order.cart_price.amount > 0:
        ratio = order.taxes.amount / order.cart_price.amount
        taxes = Money(subtotal.amount * ratio, currency).round_cents()
    else:
        taxes = Money.zero(currency)
    return SellerShare(
        seller_cart_price=subtotal,
        seller_taxes=taxes,
        seller_total=subtotal + taxes,
    )
