"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Callable, TypeVar

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import PriceHistoryEntry, Product, Variation
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.infrastructure.persistence.codecs import (
    dt_from_raw,
    money_from_raw,
    money_to_raw,
    options_from_raw,
    options_to_raw,
    stock_from_raw,
    stock_to_raw,
)
from bazaar.infrastructure.persistence.json_document_store import JsonDocumentStore

T = TypeVar("T")


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> str:
        return self._store.next_id()

    def get_by_id(self, product_id: str) -> Product | None:
        raw = self._store.get(product_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_name(self, name: str) -> Product | None:
        raw = self._store.find(lambda doc: doc["name"].lower() == name.lower())
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._store.all()]

    def list_by_seller(self, seller_id: str) -> list[Product]:
        return [
            self._to_domain(raw) for raw in self._store.all() if raw.get("seller_id") == seller_id
        ]

    def save(self, product: Product) -> None:
        self._store.upsert(self._to_raw(product))

    def update(self, product_id: str, mutate: Callable[[Product], T]) -> T:
        with self._store.transaction() as docs:
            for i, raw in enumerate(docs):
                if raw["id"] == product_id:
                    product = self._to_domain(raw)
                    result = mutate(product)
                    docs[i] = self._to_raw(product)
                    return result
            raise EntityNotFoundError(f"Product '{product_id}' not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": money_to_raw(product.price),
            "currency": product.price.currency,
            "discount_percentage": str(product.discount_percentage),
            "seller_id": product.seller_id,
            "sku": product.sku,
            "stock": stock_to_raw(product.stock),
            "axes": list(product.axes),
            "variations": [
                {
                    "id": v.id,
                    "options": options_to_raw(v.options),
                    "sku": v.sku,
                    "price": money_to_raw(v.price),
                    "discount_percentage": str(v.discount_percentage),
                    "is_active": v.is_active,
                    "stock": stock_to_raw(v.stock),
                }
                for v in product.variations
            ],
            "price_history": [
                {
                    "price": money_to_raw(entry.price),
                    "discount_percentage": str(entry.discount_percentage),
                    "price_after_discount": money_to_raw(entry.price_after_discount),
                    "changed_by": entry.changed_by,
                    "reason": entry.reason,
                    "changed_at": entry.changed_at.isoformat(),
                }
                for entry in product.price_history
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        currency = raw.get("currency", "EGP")
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=money_from_raw(raw["price"], currency),
            stock=stock_from_raw(raw.get("stock", {})),
            seller_id=raw.get("seller_id"),
            sku=raw.get("sku"),
            discount_percentage=Decimal(raw.get("discount_percentage", "0")),
            axes=list(raw.get("axes", [])),
            variations=[
                Variation(
                    id=v["id"],
                    options=options_from_raw(v["options"]),
                    sku=v["sku"],
                    price=money_from_raw(v["price"], currency),
                    stock=stock_from_raw(v.get("stock", {})),
                    discount_percentage=Decimal(v.get("discount_percentage", "0")),
                    is_active=v.get("is_active", True),
                )
                for v in raw.get("variations", [])
            ],
            price_history=[
                PriceHistoryEntry(
                    price=money_from_raw(h["price"], currency),
                    discount_percentage=Decimal(h["discount_percentage"]),
                    price_after_discount=money_from_raw(h["price_after_discount"], currency),
                    changed_by=h.get("changed_by"),
                    reason=h.get("reason"),
                    changed_at=dt_from_raw(h["changed_at"]),
                )
                for h in raw.get("price_history", [])
            ],
        )
