"""Application services: variation management.

Sellers create variations one at a time, in bulk from colour and size
lists, or by generating every combination of several option axes.  All
changes to a product's variations are one atomic product-document update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from bazaar.application.add_product import parse_percentage
from bazaar.application.lookups import check_owner, load_product
from bazaar.domain.exceptions import ValidationError, VariationNotFoundError
from bazaar.domain.model.product import (
    DEFAULT_VARIATION_LOW_STOCK_THRESHOLD,
    Product,
    Variation,
)
from bazaar.domain.model.value_objects import Money, OptionSet
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.variation_resolver import (
    AvailableOptions,
    GeneratedCombinations,
    available_options_given,
    generate_combinations,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariationStockDTO:
    variation_id: str
    options: dict[str, str]
    sku: str
    available_stock: int
    requested_quantity: int
    in_stock: bool
    is_active: bool
    price: str


def _money(value: str | None, product: Product) -> Money | None:
    if value is None or value == "":
        return None
    return Money.of(value, product.price.currency)


class AddVariationHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        options: Mapping[str, str],
        sku: str | None = None,
        price: str | None = None,
        discount_percentage: str | None = None,
        quantity: int = 0,
        low_stock_threshold: int = DEFAULT_VARIATION_LOW_STOCK_THRESHOLD,
        seller_id: str | None = None,
    ) -> Variation:
        option_set = OptionSet.of(options)
        discount = parse_percentage(discount_percentage) if discount_percentage else None

        def _add(product: Product) -> Variation:
            check_owner(product, seller_id)
            return product.add_variation(
                option_set,
                sku=sku,
                price=_money(price, product),
                discount_percentage=discount,
                quantity=quantity,
                low_stock_threshold=low_stock_threshold,
                changed_by=seller_id,
            )

        variation = self._product_repo.update(product_id, _add)
        logger.info("Added variation %s (%s) to product %s", variation.id, option_set, product_id)
        return variation


class BulkAddVariationsHandler:
    """Colour x size grid: the two-axis case of combination generation."""

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        colors: Sequence[str],
        sizes: Sequence[str],
        price: str | None = None,
        quantity: int = 0,
        seller_id: str | None = None,
    ) -> GeneratedCombinations:
        value_lists: dict[str, Sequence[str]] = {}
        if colors:
            value_lists["color"] = colors
        if sizes:
            value_lists["size"] = sizes
        if not value_lists:
            raise ValidationError("Provide at least one color or size")
        return GenerateCombinationsHandler(self._product_repo).handle(
            product_id,
            value_lists,
            default_price=price,
            default_quantity=quantity,
            seller_id=seller_id,
        )


class GenerateCombinationsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        value_lists: Mapping[str, Sequence[str]],
        default_price: str | None = None,
        default_quantity: int = 0,
        price_overrides: Mapping[str, str] | None = None,
        discount_percentage: str | None = None,
        seller_id: str | None = None,
    ) -> GeneratedCombinations:
        if default_quantity < 0:
            raise ValidationError("Default quantity cannot be negative")
        discount = parse_percentage(discount_percentage) if discount_percentage else None

        def _generate(product: Product) -> GeneratedCombinations:
            check_owner(product, seller_id)
            overrides = {
                value: Money.of(amount, product.price.currency)
                for value, amount in (price_overrides or {}).items()
            }
            return generate_combinations(
                product,
                value_lists,
                default_price=_money(default_price, product) or product.price,
                default_quantity=default_quantity,
                price_overrides=overrides,
                discount_percentage=discount,
                changed_by=seller_id,
            )

        result = self._product_repo.update(product_id, _generate)
        logger.info(
            "Generated variations for product %s: %d added, %d skipped",
            product_id, len(result.added), len(result.skipped),
        )
        return result


class UpdateVariationHandler:
    """Edit one variation.

    A new quantity goes through the ledger's absolute adjustment so it is
    recorded in the stock history.  Deactivation is soft: the variation stays
    on the product for the orders that reference it.
    """

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        variation_id: str,
        price: str | None = None,
        discount_percentage: str | None = None,
        quantity: int | None = None,
        low_stock_threshold: int | None = None,
        is_active: bool | None = None,
        seller_id: str | None = None,
    ) -> Variation:
        discount: Decimal | None = (
            parse_percentage(discount_percentage) if discount_percentage is not None else None
        )

        def _update(product: Product) -> Variation:
            check_owner(product, seller_id)
            variation = product.get_variation(variation_id)
            variation.update_pricing(_money(price, product), discount)
            if quantity is not None:
                variation.stock.adjust_absolute(
                    quantity, reason="Variation updated", changed_by=seller_id
                )
            if low_stock_threshold is not None:
                variation.stock.set_low_stock_threshold(low_stock_threshold)
            if is_active is not None:
                variation.is_active = is_active
            return variation

        variation = self._product_repo.update(product_id, _update)
        logger.info("Updated variation %s of product %s", variation_id, product_id)
        return variation


class CheckVariationStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        options: Mapping[str, str] | None = None,
        variation_id: str | None = None,
        quantity: int = 1,
    ) -> VariationStockDTO:
        product = load_product(self._product_repo, product_id)
        if variation_id:
            variation = product.get_variation(variation_id)
        else:
            option_set = OptionSet.of(options)
            if not option_set:
                raise ValidationError("Provide variation options or a variation id")
            found = product.find_variation(option_set)
            if found is None:
                raise VariationNotFoundError(
                    f"Variation {option_set.label()} not found on {product.name}"
                )
            variation = found
        available = variation.stock.available_stock
        return VariationStockDTO(
            variation_id=variation.id,
            options=variation.options.to_dict(),
            sku=variation.sku,
            available_stock=available,
            requested_quantity=quantity,
            in_stock=variation.is_active and available >= quantity,
            is_active=variation.is_active,
            price=str(variation.price_after_discount),
        )


class AvailableOptionsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, selected: Mapping[str, str] | None = None) -> AvailableOptions:
        product = load_product(self._product_repo, product_id)
        return available_options_given(product, OptionSet.of(selected))
