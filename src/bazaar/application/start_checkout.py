"""Application service: Start Online Checkout use case.

Registers the amount due with the payment provider and stores the
provider's reference on the cart.  The provider's webhook later echoes the
reference back, which is how the cart is found again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bazaar.application.lookups import load_product
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.user_repository import UserRepository
from bazaar.domain.service.order_pricing import CheckoutSettings, online_order_totals
from bazaar.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSessionDTO:
    cart_id: str
    payment_reference: str
    payment_url: str
    cart_price: str
    taxes: str
    shipping: str
    total: str


class StartCheckoutHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        user_repo: UserRepository,
        gateway: PaymentGateway,
        settings: CheckoutSettings,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._user_repo = user_repo
        self._gateway = gateway
        self._settings = settings

    def handle(self, user_id: str, cart_id: str) -> CheckoutSessionDTO:
        cart = self._cart_repo.get_by_id(cart_id)
        if cart is None or cart.user_id != user_id:
            raise EntityNotFoundError(f"There is no cart with id {cart_id}")
        if cart.is_empty:
            raise ValidationError("Cart is empty")
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError(f"User {user_id} not found")

        # Refuse before taking money for something that is already gone.
        for item in cart.items:
            product = load_product(self._product_repo, item.product_id)
            product.stock_for(item.target).require_available(item.quantity.value)

        totals = online_order_totals(cart.payable_total, self._settings)
        session = self._gateway.open_session(totals.total_order_price, user.email)

        cart.payment_reference = session.reference
        self._cart_repo.save(cart)
        logger.info(
            "Checkout for cart %s opened: reference %s, amount %s",
            cart.id, session.reference, totals.total_order_price,
        )
        return CheckoutSessionDTO(
            cart_id=cart.id,
            payment_reference=session.reference,
            payment_url=session.payment_url,
            cart_price=str(totals.cart_price),
            taxes=str(totals.taxes),
            shipping=str(totals.shipping),
            total=str(totals.total_order_price),
        )
