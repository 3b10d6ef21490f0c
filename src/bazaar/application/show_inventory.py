"""Application services: inventory queries (read-only).

A product with variations holds its stock in the variations, so every
listing here walks "stock-bearing entities": the product itself when it has
no variations, otherwise each of its variations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, Iterator, TypeVar

from bazaar.application.lookups import load_product
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.inventory import StockHistoryEntry, StockLevel, StockTarget
from bazaar.domain.model.product import PriceHistoryEntry, Product, Variation
from bazaar.domain.model.value_objects import Money
from bazaar.domain.repository.product_repository import ProductRepository

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    variation_id: str | None
    options: dict[str, str]
    sku: str | None
    quantity: int
    reserved: int
    available: int
    sold: int
    low_stock_threshold: int
    is_low_stock: bool
    is_active: bool = True


@dataclass(frozen=True)
class InventoryDashboardDTO:
    total_products: int
    total_stock: int
    reserved_stock: int
    available_stock: int
    low_stock_count: int
    out_of_stock_count: int
    total_value: str
    reserved_value: str
    available_value: str


@dataclass(frozen=True)
class LowStockDTO:
    products: list[InventoryLineDTO]
    variations: list[InventoryLineDTO]


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def paginate(entries: list[T], page: int, limit: int) -> Page[T]:
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be positive")
    start = (page - 1) * limit
    return Page(items=entries[start:start + limit], page=page, limit=limit, total=len(entries))


@dataclass
class _Holding:
    product: Product
    stock: StockLevel
    price: Money
    line: InventoryLineDTO


def _holdings(products: list[Product]) -> Iterator[_Holding]:
    for product in products:
        if not product.has_variations:
            yield _Holding(product, product.stock, product.price, _line(product, None))
            continue
        for variation in product.variations:
            yield _Holding(product, variation.stock, variation.price, _line(product, variation))


def _line(product: Product, variation: Variation | None) -> InventoryLineDTO:
    stock = variation.stock if variation else product.stock
    return InventoryLineDTO(
        product_id=product.id,
        product_name=product.name,
        variation_id=variation.id if variation else None,
        options=variation.options.to_dict() if variation else {},
        sku=variation.sku if variation else product.sku,
        quantity=stock.quantity,
        reserved=stock.reserved_stock,
        available=stock.available_stock,
        sold=stock.sold,
        low_stock_threshold=stock.low_stock_threshold,
        is_low_stock=stock.is_low_stock,
        is_active=variation.is_active if variation else True,
    )


class ShowInventoryHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, seller_id: str | None = None) -> list[InventoryLineDTO]:
        products = (
            self._product_repo.list_by_seller(seller_id)
            if seller_id is not None
            else self._product_repo.list_all()
        )
        return [holding.line for holding in _holdings(products)]


class InventoryDashboardHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, seller_id: str) -> InventoryDashboardDTO:
        products = self._product_repo.list_by_seller(seller_id)
        total = reserved = available = low = out = 0
        total_value = reserved_value = available_value = Decimal(0)
        currency = None
        for holding in _holdings(products):
            stock = holding.stock
            currency = currency or holding.price.currency
            total += stock.quantity
            reserved += stock.reserved_stock
            available += stock.available_stock
            if stock.available_stock == 0:
                out += 1
            elif stock.is_low_stock:
                low += 1
            total_value += holding.price.amount * stock.quantity
            reserved_value += holding.price.amount * stock.reserved_stock
            available_value += holding.price.amount * stock.available_stock

        def _fmt(amount: Decimal) -> str:
            return str(Money(amount, currency)) if currency else str(Money.zero())

        return InventoryDashboardDTO(
            total_products=len(products),
            total_stock=total,
            reserved_stock=reserved,
            available_stock=available,
            low_stock_count=low,
            out_of_stock_count=out,
            total_value=_fmt(total_value),
            reserved_value=_fmt(reserved_value),
            available_value=_fmt(available_value),
        )


class LowStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, seller_id: str) -> LowStockDTO:
        low = [
            holding.line
            for holding in _holdings(self._product_repo.list_by_seller(seller_id))
            if holding.stock.is_low_stock
        ]
        low.sort(key=lambda line: line.available)
        return LowStockDTO(
            products=[line for line in low if line.variation_id is None],
            variations=[line for line in low if line.variation_id is not None],
        )


class StockHistoryHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        variation_id: str | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        seller_id: str | None = None,
    ) -> Page[StockHistoryEntry]:
        """Newest entries first."""
        product = load_product(self._product_repo, product_id, seller_id)
        stock = product.stock_for(StockTarget(product_id, variation_id))
        return paginate(stock.history_newest_first(), page, limit)


class PriceHistoryHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        seller_id: str | None = None,
    ) -> Page[PriceHistoryEntry]:
        """Newest entries first."""
        product = load_product(self._product_repo, product_id, seller_id)
        entries = list(reversed(product.price_history))
        return paginate(entries, page, limit)
