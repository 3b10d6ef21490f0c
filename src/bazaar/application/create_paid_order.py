"""Application service: Create Paid Order use case.

Used once the payment provider has confirmed the money.  Stock is sold
outright instead of reserved.  A line whose stock has run out since checkout
cannot be refused any more (the customer has paid), so it is recorded as
backordered and logged for follow-up.

The order total is the amount the provider actually charged when the event
reports one; tax and shipping are recorded from the current settings.  If
the order cannot be saved, every sale made for it is returned to inventory
so a redelivered event starts from the same stock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bazaar.application.create_cash_order import order_lines_from_cart
from bazaar.domain.exceptions import EntityNotFoundError, InsufficientStockError
from bazaar.domain.model.cart import Cart
from bazaar.domain.model.order import (
    LineStockState,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
)
from bazaar.domain.model.value_objects import Money
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.order_pricing import CheckoutSettings, online_order_totals
from bazaar.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class CreatePaidOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        settings: CheckoutSettings,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._settings = settings

    def handle(
        self,
        cart: Cart,
        customer_id: str,
        payment_reference: str,
        shipping_address: dict[str, str] | None = None,
        amount_paid: Money | None = None,
    ) -> Order:
        lines = order_lines_from_cart(cart, self._product_repo, LineStockState.CONSUMED)
        totals = online_order_totals(cart.payable_total, self._settings)
        total_order_price = totals.total_order_price
        if amount_paid is not None:
            total_order_price = Money(amount_paid.amount, total_order_price.currency)
        if total_order_price != totals.total_order_price:
            logger.warning(
                "Payment %s charged %s but the cart now prices at %s; recording the charged amount",
                payment_reference, total_order_price, totals.total_order_price,
            )
        order_id = self._order_repo.next_id()

        ledger = StockLedger(self._product_repo)
        sold: list[OrderLineItem] = []
        for line in lines:
            try:
                ledger.sell(line.target, line.quantity.value, order_id=order_id)
                sold.append(line)
            except (InsufficientStockError, EntityNotFoundError) as exc:
                line.stock_state = LineStockState.BACKORDERED
                logger.error(
                    "Paid order #%s: could not take %d x %s from stock (%s); backordered",
                    order_id, line.quantity.value, line.display_name, exc,
                )

        order = Order(
            id=order_id,
            customer_id=customer_id,
            items=lines,
            cart_price=totals.cart_price,
            taxes=totals.taxes,
            shipping=totals.shipping,
            total_order_price=total_order_price,
            payment_method=PaymentMethod.PAYMOB,
            is_paid=True,
            paid_at=datetime.now(timezone.utc),
            status=OrderStatus.PENDING,
            shipping_address=dict(shipping_address or {}),
            payment_reference=payment_reference,
        )
        try:
            self._order_repo.save(order)
        except Exception:
            logger.error("Saving paid order #%s failed; returning its stock", order_id)
            for line in reversed(sold):
                ledger.restock(line.target, line.quantity.value, order_id=order_id)
            raise
        logger.info(
            "Paid order #%s created for user %s (reference %s, total %s)",
            order.id, customer_id, payment_reference, order.total_order_price,
        )
        return order
