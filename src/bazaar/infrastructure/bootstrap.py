"""Composition root -- wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Configuration is read
from the environment on each call, so one process can be pointed at a
different data directory (as the CLI tests do).
"""

from __future__ import annotations

from bazaar.application.create_paid_order import CreatePaidOrderHandler
from bazaar.application.payment_webhook import PaymentWebhookHandler
from bazaar.infrastructure.config import AppConfig
from bazaar.infrastructure.payment.local_gateway import LocalPaymentGateway
from bazaar.infrastructure.persistence.json_cart_repository import JsonCartRepository
from bazaar.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from bazaar.infrastructure.persistence.json_order_repository import JsonOrderRepository
from bazaar.infrastructure.persistence.json_product_repository import JsonProductRepository
from bazaar.infrastructure.persistence.json_user_repository import (
    JsonCourierRepository,
    JsonUserRepository,
)


def config() -> AppConfig:
    return AppConfig.from_env()


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(config().data_dir / "products.json")


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(config().data_dir / "carts.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(config().data_dir / "orders.json")


def coupon_repository() -> JsonCouponRepository:
    return JsonCouponRepository(config().data_dir / "coupons.json")


def user_repository() -> JsonUserRepository:
    return JsonUserRepository(config().data_dir / "users.json")


def courier_repository() -> JsonCourierRepository:
    return JsonCourierRepository(config().data_dir / "couriers.json")


def payment_gateway() -> LocalPaymentGateway:
    return LocalPaymentGateway(config().checkout_url)


def payment_webhook_handler() -> PaymentWebhookHandler:
    return PaymentWebhookHandler(
        cart_repo=cart_repository(),
        order_repo=order_repository(),
        user_repo=user_repository(),
        create_paid_order=CreatePaidOrderHandler(
            order_repo=order_repository(),
            product_repo=product_repository(),
            settings=config().checkout_settings(),
        ),
    )
