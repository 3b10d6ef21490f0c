"""Lookups shared by the use-case handlers.

Absent entities and entities owned by somebody else raise the same
EntityNotFoundError, so callers cannot probe for other users' documents.
"""

from __future__ import annotations

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.cart import Cart
from bazaar.domain.model.order import Order
from bazaar.domain.model.product import Product
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository


def check_owner(product: Product, seller_id: str | None) -> Product:
    if seller_id is not None and product.seller_id != seller_id:
        raise EntityNotFoundError(f"Product '{product.id}' not found")
    return product


def load_product(
    product_repo: ProductRepository, product_id: str, seller_id: str | None = None
) -> Product:
    product = product_repo.get_by_id(product_id)
    if product is None:
        raise EntityNotFoundError(f"Product '{product_id}' not found")
    return check_owner(product, seller_id)


def load_order(order_repo: OrderRepository, order_id: str) -> Order:
    order = order_repo.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


def load_user_cart(cart_repo: CartRepository, user_id: str) -> Cart:
    cart = cart_repo.get_by_user(user_id)
    if cart is None:
        raise EntityNotFoundError(f"There is no cart for user {user_id}")
    return cart
