"""Application services: order updates by admins and sellers.

Both handlers go through ``_update_order``; they differ only in the item
filter.  A seller only ever moves (and affects the stock of) their own lines
of a multi-seller order.

The whole update runs inside one atomic order-document update, so an admin
and a seller changing the same order cannot overwrite each other's writes.
"""

from __future__ import annotations

from bazaar.application.dto import TransitionDTO, order_to_dto
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.order import (
    ItemFilter,
    Order,
    OrderStatus,
    PaymentMethod,
    all_items,
    seller_items,
)
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.order_transitions import apply_order_transition
from bazaar.domain.service.stock_ledger import StockLedger


def _update_order(
    order_repo: OrderRepository,
    ledger: StockLedger,
    order_id: str,
    item_filter: ItemFilter,
    status: str | None,
    is_paid: bool | None,
    payment_method: str | None,
    changed_by: str | None,
    seller_id: str | None = None,
) -> TransitionDTO:
    if status is None and is_paid is None and payment_method is None:
        raise ValidationError("Nothing to update: give a status, isPaid or paymentMethod")
    new_status = OrderStatus.parse(status) if status is not None else None
    new_method = PaymentMethod.parse(payment_method) if payment_method is not None else None

    def _mutate(order: Order) -> TransitionDTO:
        if not order.select_items(item_filter):
            # Not one of this seller's orders.
            raise EntityNotFoundError(f"Order #{order_id} not found")
        moved = 0
        failures = []
        if new_status is not None:
            result = apply_order_transition(order, new_status, ledger, item_filter, changed_by)
            moved = len(result.moved)
            failures = result.failures
        if is_paid is not None:
            order.set_paid(is_paid)
        if new_method is not None:
            order.set_payment_method(new_method)
        return TransitionDTO(order=order_to_dto(order, seller_id), moved_items=moved, failures=failures)

    return order_repo.update(order_id, _mutate)


class UpdateOrderStatusHandler:
    """Admin update: every line of the order."""

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(
        self,
        order_id: str,
        status: str | None = None,
        is_paid: bool | None = None,
        payment_method: str | None = None,
        changed_by: str | None = None,
    ) -> TransitionDTO:
        return _update_order(
            self._order_repo,
            StockLedger(self._product_repo),
            order_id,
            all_items,
            status,
            is_paid,
            payment_method,
            changed_by,
        )


class UpdateSellerOrderHandler:
    """Seller update: only the seller's own lines."""

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(
        self,
        seller_id: str,
        order_id: str,
        status: str | None = None,
        is_paid: bool | None = None,
        payment_method: str | None = None,
    ) -> TransitionDTO:
        return _update_order(
            self._order_repo,
            StockLedger(self._product_repo),
            order_id,
            seller_items(seller_id),
            status,
            is_paid,
            payment_method,
            changed_by=seller_id,
            seller_id=seller_id,
        )
