"""Data Transfer Objects -- plain containers that cross layer boundaries.

DTOs carry data between the CLI / webhook boundary and the application
layer without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bazaar.domain.model.cart import Cart
from bazaar.domain.model.order import Order
from bazaar.domain.model.value_objects import OptionSet
from bazaar.domain.service.order_transitions import ItemFailure

DATE_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the shopper asked to put in the cart.

    ``color``/``size`` is the older two-axis form of ``variation_options``.
    """

    product_id: str
    quantity: int = 1
    variation_options: dict[str, str] | None = None
    variation_id: str | None = None
    color: str | None = None
    size: str | None = None

    def options(self) -> OptionSet:
        options = dict(self.variation_options or {})
        if self.color:
            options.setdefault("color", self.color)
        if self.size:
            options.setdefault("size", self.size)
        return OptionSet.of(options)


@dataclass(frozen=True)
class CartLineDTO:
    id: str
    product_id: str
    product_name: str
    variation_id: str | None
    options: dict[str, str]
    quantity: int
    price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    id: str
    user_id: str
    items: list[CartLineDTO]
    total_price: str
    total_price_after_discount: str | None
    coupon_code: str | None
    payment_reference: str | None


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    options: dict[str, str]
    quantity: int
    price: str
    line_total: str
    seller_id: str | None
    status: str
    stock_state: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    customer_id: str
    status: str
    delivery_status: str
    payment_method: str
    is_paid: bool
    items: list[OrderLineItemDTO]
    cart_price: str
    taxes: str
    shipping: str
    total: str
    created_at: str
    delivery_guy_id: str | None = None


@dataclass(frozen=True)
class SellerOrderDTO:
    """An order cut down to one seller's items, with that seller's totals."""

    order: OrderDTO
    seller_cart_price: str
    seller_taxes: str
    seller_total: str


@dataclass(frozen=True)
class TransitionDTO:
    order: OrderDTO
    moved_items: int
    failures: list[ItemFailure] = field(default_factory=list)


# --- Mapping ------------------------------------------------------------------


def cart_to_dto(cart: Cart) -> CartDTO:
    return CartDTO(
        id=cart.id,
        user_id=cart.user_id,
        items=[
            CartLineDTO(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                variation_id=item.variation_id,
                options=item.variation_options.to_dict(),
                quantity=item.quantity.value,
                price=str(item.price),
                line_total=str(item.line_total),
            )
            for item in cart.items
        ],
        total_price=str(cart.total_price),
        total_price_after_discount=(
            str(cart.total_price_after_discount)
            if cart.total_price_after_discount is not None
            else None
        ),
        coupon_code=cart.coupon.code if cart.coupon else None,
        payment_reference=cart.payment_reference,
    )


def order_to_dto(order: Order, seller_id: str | None = None) -> OrderDTO:
    items = order.items if seller_id is None else [i for i in order.items if i.seller_id == seller_id]
    return OrderDTO(
        id=order.id,
        customer_id=order.customer_id,
        status=order.status.value,
        delivery_status=order.delivery_status.value,
        payment_method=order.payment_method.value,
        is_paid=order.is_paid,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                options=item.variation_options.to_dict(),
                quantity=item.quantity.value,
                price=str(item.price),
                line_total=str(item.line_total),
                seller_id=item.seller_id,
                status=item.status.value,
                stock_state=item.stock_state.value,
            )
            for item in items
        ],
        cart_price=str(order.cart_price),
        taxes=str(order.taxes),
        shipping=str(order.shipping),
        total=str(order.total_order_price),
        created_at=order.created_at.strftime(DATE_FORMAT),
        delivery_guy_id=order.delivery_guy_id,
    )
