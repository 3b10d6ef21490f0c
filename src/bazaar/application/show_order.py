"""Application services: order queries (read-only)."""

from __future__ import annotations

from bazaar.application.dto import OrderDTO, SellerOrderDTO, order_to_dto
from bazaar.application.lookups import load_order
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.order import Order
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.service.order_pricing import seller_share


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str, customer_id: str | None = None) -> OrderDTO:
        """Show an order; with ``customer_id``, only if that customer owns it."""
        order = load_order(self._order_repo, order_id)
        if customer_id is not None and order.customer_id != customer_id:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)


def _seller_view(order: Order, seller_id: str) -> SellerOrderDTO:
    share = seller_share(order, seller_id)
    return SellerOrderDTO(
        order=order_to_dto(order, seller_id),
        seller_cart_price=str(share.seller_cart_price),
        seller_taxes=str(share.seller_taxes),
        seller_total=str(share.seller_total),
    )


class ShowSellerOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, seller_id: str, order_id: str) -> SellerOrderDTO:
        order = load_order(self._order_repo, order_id)
        if seller_id not in order.sellers():
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return _seller_view(order, seller_id)


class ListSellerOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, seller_id: str) -> list[SellerOrderDTO]:
        return [_seller_view(order, seller_id) for order in self._order_repo.list_by_seller(seller_id)]
