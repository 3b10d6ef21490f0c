"""JSON-file-backed implementation of CartRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from bazaar.domain.exceptions import DuplicateRelationshipError
from bazaar.domain.model.cart import AppliedCoupon, Cart, CartLineItem
from bazaar.domain.model.value_objects import Quantity
from bazaar.domain.repository.cart_repository import CartRepository
from bazaar.infrastructure.persistence.codecs import (
    dt_from_raw,
    dt_to_raw,
    money_from_raw,
    money_to_raw,
    optional_money_from_raw,
    optional_money_to_raw,
    options_from_raw,
    options_to_raw,
)
from bazaar.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    # --- CartRepository interface ---------------------------------------------

    def next_id(self) -> str:
        return self._store.next_id()

    def get_by_id(self, cart_id: str) -> Cart | None:
        raw = self._store.get(cart_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_user(self, user_id: str) -> Cart | None:
        raw = self._store.find(lambda doc: doc["user_id"] == user_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_payment_reference(self, reference: str) -> Cart | None:
        raw = self._store.find(lambda doc: doc.get("payment_reference") == reference)
        return self._to_domain(raw) if raw is not None else None

    def save(self, cart: Cart) -> None:
        raw = self._to_raw(cart)
        with self._store.transaction() as docs:
            for i, existing in enumerate(docs):
                if existing["id"] == cart.id:
                    docs[i] = raw
                    return
                if existing["user_id"] == cart.user_id:
                    raise DuplicateRelationshipError(f"User {cart.user_id} already has a cart")
            docs.append(raw)

    def delete(self, cart_id: str) -> bool:
        return self._store.remove(cart_id)

    def take_by_payment_reference(self, reference: str) -> Cart | None:
        with self._store.transaction() as docs:
            for i, raw in enumerate(docs):
                if raw.get("payment_reference") == reference:
                    del docs[i]
                    return self._to_domain(raw)
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(cart: Cart) -> dict:
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "currency": cart.currency,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "price": money_to_raw(item.price),
                    "variation_id": item.variation_id,
                    "variation_options": options_to_raw(item.variation_options),
                }
                for item in cart.items
            ],
            "total_price": optional_money_to_raw(cart.total_price),
            "total_price_after_discount": optional_money_to_raw(cart.total_price_after_discount),
            "coupon": (
                {"code": cart.coupon.code, "discount": str(cart.coupon.discount)}
                if cart.coupon
                else None
            ),
            "payment_reference": cart.payment_reference,
            "created_at": dt_to_raw(cart.created_at),
            "updated_at": dt_to_raw(cart.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Cart:
        currency = raw.get("currency", "EGP")
        coupon = raw.get("coupon")
        return Cart(
            id=raw["id"],
            user_id=raw["user_id"],
            currency=currency,
            items=[
                CartLineItem(
                    id=i["id"],
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    quantity=Quantity(i["quantity"]),
                    price=money_from_raw(i["price"], currency),
                    variation_id=i.get("variation_id"),
                    variation_options=options_from_raw(i.get("variation_options")),
                )
                for i in raw.get("items", [])
            ],
            total_price=optional_money_from_raw(raw.get("total_price"), currency),
            total_price_after_discount=optional_money_from_raw(
                raw.get("total_price_after_discount"), currency
            ),
            coupon=(
                AppliedCoupon(code=coupon["code"], discount=Decimal(coupon["discount"]))
                if coupon
                else None
            ),
            payment_reference=raw.get("payment_reference"),
            created_at=dt_from_raw(raw["created_at"]),
            updated_at=dt_from_raw(raw["updated_at"]),
        )
