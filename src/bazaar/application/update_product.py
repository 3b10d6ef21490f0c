"""Application service: Update Product Price use case.

Changes the catalog price only.  Carts and orders keep the price captured
when their lines were created.
"""

from __future__ import annotations

import logging

from bazaar.application.add_product import parse_percentage
from bazaar.application.lookups import check_owner
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Money
from bazaar.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class UpdateProductPriceHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        new_price: str,
        discount_percentage: str | None = None,
        seller_id: str | None = None,
        reason: str | None = None,
    ) -> bool:
        """Returns False when neither the price nor the discount changed."""
        discount = parse_percentage(discount_percentage)

        def _update(product: Product) -> bool:
            check_owner(product, seller_id)
            return product.update_price(
                Money.of(new_price, product.price.currency),
                discount_percentage=discount,
                changed_by=seller_id,
                reason=reason,
            )

        changed = self._product_repo.update(product_id, _update)
        if changed:
            logger.info("Price of product %s set to %s (-%s%%)", product_id, new_price, discount)
        return changed
