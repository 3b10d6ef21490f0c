"""Application service: Add To Cart use case.

The cart never reserves stock; it only refuses quantities that could not be
reserved right now.  Reservation happens when the order is placed.
"""

from __future__ import annotations

import logging

from bazaar.application.dto import CartDTO, CartItemSpec, cart_to_dto
from bazaar.application.lookups import load_product
from bazaar.domain.model.cart import Cart, CartLineItem
from bazaar.domain.model.product import Product, Variation
from bazaar.domain.model.value_objects import Money, Quantity
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.variation_resolver import resolve_variation

logger = logging.getLogger(__name__)


def current_price(product: Product, variation: Variation | None) -> Money:
    """The price a new cart line captures: after discount, variation first."""
    if variation is not None:
        return variation.price_after_discount
    return product.price_after_discount


class AddToCartHandler:

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def handle(self, user_id: str, spec: CartItemSpec) -> CartDTO:
        """Add ``spec`` to the user's cart, creating the cart if needed.

        Steps:
        1. Resolve the product and, if it has variations, the variation.
        2. Check that the cart's total for that target stays within the
           available stock.
        3. Merge into the existing line for the same target, or add a line
           capturing the current price.
        """
        quantity = Quantity(spec.quantity)
        product = load_product(self._product_repo, spec.product_id)
        variation = resolve_variation(product, spec.variation_id, spec.options())
        stock = variation.stock if variation else product.stock

        cart = self._cart_repo.get_by_user(user_id)
        if cart is None:
            cart = Cart(id=self._cart_repo.next_id(), user_id=user_id, currency=product.price.currency)

        variation_id = variation.id if variation else None
        existing = cart.find_line(product.id, variation_id)
        already = existing.quantity.value if existing else 0
        stock.require_available(already + quantity.value)

        cart.add_line(
            CartLineItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price=current_price(product, variation),  # <-- price snapshot
                variation_id=variation_id,
                variation_options=variation.options if variation else spec.options(),
            )
        )
        self._cart_repo.save(cart)
        logger.info(
            "Cart %s: added %d x %s%s",
            cart.id, quantity.value, product.name,
            f" ({variation.options.label()})" if variation else "",
        )
        return cart_to_dto(cart)
