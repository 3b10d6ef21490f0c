"""Application service: Add Product use case."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.inventory import StockLevel
from bazaar.domain.model.product import Product, check_pricing
from bazaar.domain.model.value_objects import DEFAULT_CURRENCY, Money
from bazaar.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


def parse_percentage(value: str | int | Decimal | None) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid discount percentage: {value!r}") from exc


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository, currency: str = DEFAULT_CURRENCY) -> None:
        self._product_repo = product_repo
        self._currency = currency

    def handle(
        self,
        name: str,
        price: str,
        quantity: int = 0,
        discount_percentage: str | None = None,
        seller_id: str | None = None,
        sku: str | None = None,
        low_stock_threshold: int = 10,
    ) -> Product:
        """Add a new product to the catalog, optionally with opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        money = Money.of(price, self._currency)
        if money.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        discount = parse_percentage(discount_percentage)
        check_pricing(money, discount)
        if quantity < 0:
            raise ValidationError("Product quantity cannot be negative")

        stock = StockLevel()
        stock.set_low_stock_threshold(low_stock_threshold)
        product = Product(
            id=self._product_repo.next_id(),
            name=name.strip(),
            price=money,
            stock=stock,
            seller_id=seller_id,
            sku=sku.strip().upper() if sku else None,
            discount_percentage=discount,
        )
        if quantity:
            product.stock.add(quantity, reason="Initial stock", changed_by=seller_id)

        self._product_repo.save(product)
        logger.info("Added product %s '%s' (seller=%s)", product.id, product.name, seller_id)
        return product
