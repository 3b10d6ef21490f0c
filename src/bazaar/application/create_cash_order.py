"""Application service: Create Cash Order use case.

Turns a cart into a cash-on-delivery order.  This is the only place that
coordinates the three aggregates involved (Cart -> Products -> Order).

Stock for every line is reserved before the order exists.  If any line
cannot be reserved, the reservations already made are released again and
nothing is persisted; the cart is left untouched so the shopper can adjust
it and retry.
"""

from __future__ import annotations

import logging

from bazaar.application.dto import OrderDTO, order_to_dto
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.cart import Cart
from bazaar.domain.model.order import LineStockState, Order, OrderLineItem, PaymentMethod
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.order_pricing import CheckoutSettings, cash_order_totals
from bazaar.domain.service.stock_ledger import StockLedger, StockRequest

logger = logging.getLogger(__name__)


def order_lines_from_cart(
    cart: Cart, product_repo: ProductRepository, stock_state: LineStockState
) -> list[OrderLineItem]:
    """Snapshot the cart lines, stamping each with its product's seller."""
    lines: list[OrderLineItem] = []
    for item in cart.items:
        product = product_repo.get_by_id(item.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{item.product_name}' is no longer available")
        lines.append(
            OrderLineItem(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                price=item.price,
                seller_id=product.seller_id,
                variation_id=item.variation_id,
                variation_options=item.variation_options,
                stock_state=stock_state,
            )
        )
    return lines


class CreateCashOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        settings: CheckoutSettings,
    ) -> None:
        self._order_repo = order_repo
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._settings = settings

    def handle(
        self,
        user_id: str,
        cart_id: str,
        shipping_address: dict[str, str] | None = None,
    ) -> OrderDTO:
        """Place a cash-on-delivery order for the user's cart.

        Raises InsufficientStockError naming the first line that cannot be
        reserved; in that case no reservation survives and no order exists.
        """
        cart = self._cart_repo.get_by_id(cart_id)
        if cart is None or cart.user_id != user_id:
            raise EntityNotFoundError(f"There is no cart with id {cart_id}")
        if cart.is_empty:
            raise ValidationError("Cart is empty")

        lines = order_lines_from_cart(cart, self._product_repo, LineStockState.RESERVED)
        totals = cash_order_totals(cart.payable_total, self._settings)
        order_id = self._order_repo.next_id()

        ledger = StockLedger(self._product_repo)
        requests = [StockRequest(line.target, line.quantity.value, line.display_name) for line in lines]
        ledger.reserve_all(requests, order_id=order_id)

        order = Order(
            id=order_id,
            customer_id=user_id,
            items=lines,
            cart_price=totals.cart_price,
            taxes=totals.taxes,
            shipping=totals.shipping,
            total_order_price=totals.total_order_price,
            payment_method=PaymentMethod.CASH_ON_DELIVERY,
            shipping_address=dict(shipping_address or {}),
        )
        try:
            self._order_repo.save(order)
        except Exception:
            logger.error("Saving order #%s failed; releasing its reservations", order_id)
            for request in reversed(requests):
                ledger.release(request.target, request.quantity, order_id=order_id)
            raise

        self._cart_repo.delete(cart.id)
        logger.info(
            "Order #%s placed by user %s: %d line(s), total %s",
            order.id, user_id, len(lines), order.total_order_price,
        )
        return order_to_dto(order)
