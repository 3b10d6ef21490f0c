"""Application service: payment-provider webhook.

The provider delivers events at least once and may deliver the same event
concurrently.  The cart is the single-use key: it is taken (found and
deleted in one step) before the order is built, so at most one delivery
ever gets to convert it.  A delivery that finds no cart but an order with
the same reference is a duplicate of an event already handled.

Response codes follow what the provider expects:

* 200 for events this service does not act on, and for duplicates;
* 500 when a relevant event could not be processed, so it is redelivered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from bazaar.application.create_paid_order import CreatePaidOrderHandler
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.value_objects import Money
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)

TRANSACTION_EVENT = "TRANSACTION"
SHIPPING_FIELDS = ("street", "city", "country", "postal_code", "phone_number")


def _section(parent: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = parent.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"Payment event field {key!r} must be an object")
    return value


@dataclass(frozen=True)
class WebhookAck:
    status_code: int
    message: str
    order_id: str | None = None


@dataclass(frozen=True)
class PaymentEvent:
    reference: str
    success: bool
    email: str | None
    shipping_address: dict[str, str]
    amount: Money | None = None

    @staticmethod
    def parse(payload: Mapping[str, Any]) -> PaymentEvent:
        obj = _section(payload, "obj")
        order = _section(obj, "order")
        reference = order.get("id")
        if reference in (None, ""):
            raise ValidationError("Payment event carries no order reference")
        shipping = _section(order, "shipping_data")
        amount_cents = obj.get("amount_cents")
        return PaymentEvent(
            reference=str(reference),
            success=obj.get("success") is True,
            email=shipping.get("email"),
            shipping_address={
                key: str(shipping[key]) for key in SHIPPING_FIELDS if shipping.get(key)
            },
            amount=Money.from_minor_units(amount_cents) if amount_cents is not None else None,
        )


class PaymentWebhookHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        user_repo: UserRepository,
        create_paid_order: CreatePaidOrderHandler,
    ) -> None:
        self._cart_repo = cart_repo
        self._order_repo = order_repo
        self._user_repo = user_repo
        self._create_paid_order = create_paid_order

    def handle(self, payload: Mapping[str, Any]) -> WebhookAck:
        event_type = payload.get("type")
        if event_type != TRANSACTION_EVENT:
            logger.warning("Ignoring webhook event of type %r", event_type)
            return WebhookAck(200, f"Event {event_type!r} ignored")

        try:
            event = PaymentEvent.parse(payload)
        except ValidationError as exc:
            logger.error("Malformed payment event: %s (payload=%r)", exc, payload)
            return WebhookAck(500, str(exc))

        if not event.success:
            logger.warning("Payment %s was not successful; nothing to do", event.reference)
            return WebhookAck(200, "Payment not successful")

        cart = self._cart_repo.take_by_payment_reference(event.reference)
        if cart is None:
            existing = self._order_repo.get_by_payment_reference(event.reference)
            if existing is not None:
                logger.info(
                    "Payment %s already turned into order #%s; duplicate delivery",
                    event.reference, existing.id,
                )
                return WebhookAck(200, "Already processed", order_id=existing.id)
            logger.error("No cart for payment reference %s (payload=%r)", event.reference, payload)
            return WebhookAck(500, f"No cart for payment reference {event.reference}")

        try:
            user = self._user_repo.get_by_email(event.email or "")
            if user is None:
                raise EntityNotFoundError(f"No user with email {event.email!r}")
            order = self._create_paid_order.handle(
                cart,
                customer_id=user.id,
                payment_reference=event.reference,
                shipping_address=event.shipping_address,
                amount_paid=event.amount,
            )
        except Exception:
            logger.exception(
                "Processing payment %s failed; restoring cart %s (payload=%r)",
                event.reference, cart.id, payload,
            )
            try:
                self._cart_repo.save(cart)
            except Exception:
                logger.exception(
                    "Restoring cart %s for payment %s failed; it needs manual follow-up",
                    cart.id, event.reference,
                )
            return WebhookAck(500, "Payment could not be processed")

        return WebhookAck(200, f"Order #{order.id} created", order_id=order.id)
