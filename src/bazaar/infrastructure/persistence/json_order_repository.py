"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.order import (
    DeliveryStatus,
    LineStockState,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
)
from bazaar.domain.model.value_objects import Quantity
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.infrastructure.persistence.codecs import (
    dt_from_raw,
    dt_to_raw,
    money_from_raw,
    money_to_raw,
    options_from_raw,
    options_to_raw,
)
from bazaar.infrastructure.persistence.json_document_store import JsonDocumentStore

T = TypeVar("T")


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        return self._store.next_id()

    def get_by_id(self, order_id: str) -> Order | None:
        raw = self._store.get(order_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_payment_reference(self, reference: str) -> Order | None:
        raw = self._store.find(lambda doc: doc.get("payment_reference") == reference)
        return self._to_domain(raw) if raw is not None else None

    def list_by_seller(self, seller_id: str) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._store.all()
            if any(item.get("seller_id") == seller_id for item in raw["items"])
        ]

    def save(self, order: Order) -> None:
        self._store.upsert(self._to_raw(order))

    def update(self, order_id: str, mutate: Callable[[Order], T]) -> T:
        with self._store.transaction() as docs:
            for i, raw in enumerate(docs):
                if raw["id"] == order_id:
                    order = self._to_domain(raw)
                    result = mutate(order)
                    docs[i] = self._to_raw(order)
                    return result
            raise EntityNotFoundError(f"Order #{order_id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "currency": order.total_order_price.currency,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "price": money_to_raw(item.price),
                    "seller_id": item.seller_id,
                    "variation_id": item.variation_id,
                    "variation_options": options_to_raw(item.variation_options),
                    "status": item.status.value,
                    "stock_state": item.stock_state.value,
                }
                for item in order.items
            ],
            "cart_price": money_to_raw(order.cart_price),
            "taxes": money_to_raw(order.taxes),
            "shipping": money_to_raw(order.shipping),
            "total_order_price": money_to_raw(order.total_order_price),
            "payment_method": order.payment_method.value,
            "is_paid": order.is_paid,
            "paid_at": dt_to_raw(order.paid_at),
            "status": order.status.value,
            "delivery_guy_id": order.delivery_guy_id,
            "delivery_status": order.delivery_status.value,
            "assigned_at": dt_to_raw(order.assigned_at),
            "picked_up_at": dt_to_raw(order.picked_up_at),
            "delivered_at": dt_to_raw(order.delivered_at),
            "cancelled_at": dt_to_raw(order.cancelled_at),
            "delivery_notes": order.delivery_notes,
            "shipping_address": dict(order.shipping_address),
            "payment_reference": order.payment_reference,
            "created_at": dt_to_raw(order.created_at),
            "updated_at": dt_to_raw(order.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "EGP")
        return Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            items=[
                OrderLineItem(
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    quantity=Quantity(i["quantity"]),
                    price=money_from_raw(i["price"], currency),
                    seller_id=i.get("seller_id"),
                    variation_id=i.get("variation_id"),
                    variation_options=options_from_raw(i.get("variation_options")),
                    status=OrderStatus(i["status"]),
                    stock_state=LineStockState(i["stock_state"]),
                )
                for i in raw["items"]
            ],
            cart_price=money_from_raw(raw["cart_price"], currency),
            taxes=money_from_raw(raw["taxes"], currency),
            shipping=money_from_raw(raw["shipping"], currency),
            total_order_price=money_from_raw(raw["total_order_price"], currency),
            payment_method=PaymentMethod(raw["payment_method"]),
            is_paid=raw.get("is_paid", False),
            paid_at=dt_from_raw(raw.get("paid_at")),
            status=OrderStatus(raw["status"]),
            delivery_guy_id=raw.get("delivery_guy_id"),
            delivery_status=DeliveryStatus(raw.get("delivery_status", "unassigned")),
            assigned_at=dt_from_raw(raw.get("assigned_at")),
            picked_up_at=dt_from_raw(raw.get("picked_up_at")),
            delivered_at=dt_from_raw(raw.get("delivered_at")),
            cancelled_at=dt_from_raw(raw.get("cancelled_at")),
            delivery_notes=raw.get("delivery_notes"),
            shipping_address=dict(raw.get("shipping_address") or {}),
            payment_reference=raw.get("payment_reference"),
            created_at=dt_from_raw(raw["created_at"]),
            updated_at=dt_from_raw(raw["updated_at"]),
        )
