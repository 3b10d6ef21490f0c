"""Application services: seller stock corrections.

Every change goes through the StockLedger and leaves a stock-history entry.
"""

from __future__ import annotations

from bazaar.application.lookups import load_product
from bazaar.domain.model.inventory import StockTarget
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.stock_ledger import StockLedger, StockSnapshot


class AdjustStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        quantity: int,
        direction: str,
        variation_id: str | None = None,
        reason: str | None = None,
        seller_id: str | None = None,
    ) -> StockSnapshot:
        """Add or subtract ``quantity`` units.

        Subtracting more than is available raises InsufficientStockError.
        """
        load_product(self._product_repo, product_id, seller_id)
        ledger = StockLedger(self._product_repo)
        return ledger.adjust(
            StockTarget(product_id, variation_id),
            quantity,
            direction,
            reason=reason,
            changed_by=seller_id,
        )


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        quantity: int,
        variation_id: str | None = None,
        reason: str | None = None,
        seller_id: str | None = None,
    ) -> StockSnapshot:
        """Set the quantity on hand to an absolute value."""
        load_product(self._product_repo, product_id, seller_id)
        ledger = StockLedger(self._product_repo)
        return ledger.adjust_absolute(
            StockTarget(product_id, variation_id),
            quantity,
            reason=reason or "Manual stock correction",
            changed_by=seller_id,
        )


class SetLowStockThresholdHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        threshold: int,
        variation_id: str | None = None,
        seller_id: str | None = None,
    ) -> StockSnapshot:
        load_product(self._product_repo, product_id, seller_id)
        ledger = StockLedger(self._product_repo)
        return ledger.set_low_stock_threshold(StockTarget(product_id, variation_id), threshold)
