"""Application services: courier assignment and delivery progress.

The delivery sub-state moves forward only.  Reaching ``picked_up`` (or any
later step) puts an approved order into ``shipping``; reaching ``delivered``
delivers the order, which consumes its reserved stock, and credits the
courier with the per-delivery fee.
"""

from __future__ import annotations

import logging

from bazaar.application.dto import OrderDTO, order_to_dto
from bazaar.domain.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from bazaar.domain.model.courier import Courier
from bazaar.domain.model.order import DeliveryStatus, Order, OrderStatus, open_items
from bazaar.domain.model.user import Role, User
from bazaar.domain.model.value_objects import Money
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.user_repository import CourierRepository, UserRepository
from bazaar.domain.service.order_transitions import apply_order_transition
from bazaar.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def _require_courier(user_repo: UserRepository, user_id: str) -> User:
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundError(f"User {user_id} not found")
    if user.role != Role.DELIVERY:
        raise ForbiddenError(f"User {user_id} is not a delivery courier")
    return user


class AssignCourierHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        user_repo: UserRepository,
        courier_repo: CourierRepository,
    ) -> None:
        self._order_repo = order_repo
        self._user_repo = user_repo
        self._courier_repo = courier_repo

    def handle(self, order_id: str, courier_id: str) -> OrderDTO:
        user = _require_courier(self._user_repo, courier_id)
        if self._courier_repo.get_by_user_id(courier_id) is None:
            self._courier_repo.save(Courier(user_id=user.id, name=user.name))

        def _assign(order: Order) -> OrderDTO:
            order.assign_courier(courier_id)
            return order_to_dto(order)

        dto = self._order_repo.update(order_id, _assign)
        logger.info("Order #%s assigned to courier %s", order_id, courier_id)
        return dto


class UpdateDeliveryStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        user_repo: UserRepository,
        courier_repo: CourierRepository,
        delivery_fee: Money,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._user_repo = user_repo
        self._courier_repo = courier_repo
        self._delivery_fee = delivery_fee

    def handle(
        self,
        courier_id: str,
        order_id: str,
        status: str,
        notes: str | None = None,
    ) -> OrderDTO:
        _require_courier(self._user_repo, courier_id)
        new_status = DeliveryStatus.parse(status)
        if new_status in (DeliveryStatus.UNASSIGNED, DeliveryStatus.ASSIGNED):
            raise ValidationError("Couriers can only report picked_up, in_transit or delivered")
        ledger = StockLedger(self._product_repo)

        def _advance(order: Order) -> OrderDTO:
            if order.delivery_guy_id != courier_id:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            if order.status not in (OrderStatus.APPROVED, OrderStatus.SHIPPING):
                raise InvalidTransitionError(
                    f"Order #{order_id} is {order.status.value}; only approved orders go out for delivery"
                )
            order.advance_delivery(new_status, notes)
            if order.status == OrderStatus.APPROVED:
                apply_order_transition(
                    order, OrderStatus.SHIPPING, ledger, open_items, changed_by=courier_id
                )
            if new_status == DeliveryStatus.DELIVERED and order.status != OrderStatus.DELIVERED:
                apply_order_transition(
                    order, OrderStatus.DELIVERED, ledger, open_items, changed_by=courier_id
                )
            return order_to_dto(order)

        dto = self._order_repo.update(order_id, _advance)
        logger.info("Order #%s delivery status now %s", order_id, new_status.value)

        if new_status == DeliveryStatus.DELIVERED:
            self._credit_courier(courier_id, order_id)
        return dto

    def _credit_courier(self, courier_id: str, order_id: str) -> None:
        try:
            self._courier_repo.update(
                courier_id, lambda courier: courier.record_delivery(self._delivery_fee)
            )
        except EntityNotFoundError:
            logger.error(
                "Order #%s delivered but courier %s has no profile to credit", order_id, courier_id
            )
