"""Application services: changing an existing cart.

Every mutation ends with the cart recomputing its totals (including any
applied coupon) before it is saved.
"""

from __future__ import annotations

import logging
from typing import Mapping

from bazaar.application.add_to_cart import current_price
from bazaar.application.dto import CartDTO, cart_to_dto
from bazaar.application.lookups import load_product, load_user_cart
from bazaar.domain.exceptions import DuplicateRelationshipError, ValidationError
from bazaar.domain.model.value_objects import OptionSet, Quantity
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.variation_resolver import resolve_variation

logger = logging.getLogger(__name__)


class UpdateCartItemHandler:

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def handle(self, user_id: str, line_id: str, quantity: int) -> CartDTO:
        """Set a line's quantity, re-checking it against current stock."""
        new_quantity = Quantity(quantity)
        cart = load_user_cart(self._cart_repo, user_id)
        line = cart.get_line(line_id)

        product = load_product(self._product_repo, line.product_id)
        product.stock_for(line.target).require_available(new_quantity.value)

        cart.set_quantity(line_id, new_quantity.value)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)


class ChangeCartVariationHandler:

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def handle(
        self,
        user_id: str,
        line_id: str,
        options: Mapping[str, str] | None = None,
        variation_id: str | None = None,
    ) -> CartDTO:
        """Point a line at another variation of the same product.

        The line keeps its quantity; the price is recaptured from the new
        variation.  If the new variation already has its own line the
        request is refused rather than creating a duplicate line.
        """
        cart = load_user_cart(self._cart_repo, user_id)
        line = cart.get_line(line_id)
        product = load_product(self._product_repo, line.product_id)

        variation = resolve_variation(product, variation_id, OptionSet.of(options))
        if variation is None:
            raise ValidationError(f"{product.name} has no variations to choose from")

        other = cart.find_line(product.id, variation.id)
        if other is not None and other.id != line.id:
            raise DuplicateRelationshipError(
                f"{product.name} ({variation.options.label()}) is already in your cart; "
                f"update its quantity instead"
            )
        variation.stock.require_available(line.quantity.value)

        cart.retarget_line(line.id, variation.id, variation.options, current_price(product, variation))
        self._cart_repo.save(cart)
        logger.info("Cart %s: line %s now %s", cart.id, line.id, variation.options.label())
        return cart_to_dto(cart)


class RemoveCartItemHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str, line_id: str) -> CartDTO:
        cart = load_user_cart(self._cart_repo, user_id)
        cart.remove_line(line_id)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> None:
        cart = load_user_cart(self._cart_repo, user_id)
        self._cart_repo.delete(cart.id)
        logger.info("Cart %s of user %s cleared", cart.id, user_id)
