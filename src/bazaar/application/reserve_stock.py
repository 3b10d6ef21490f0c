"""Application services: direct reserve / release, for external integrations.

Unlike the compensating releases inside checkout and cancellation, a direct
release that asks for more than is reserved is refused.
"""

from __future__ import annotations

from bazaar.application.lookups import load_product
from bazaar.domain.model.inventory import StockTarget
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.stock_ledger import StockLedger, StockSnapshot


class ReserveStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        quantity: int,
        variation_id: str | None = None,
        order_id: str | None = None,
    ) -> StockSnapshot:
        load_product(self._product_repo, product_id)
        ledger = StockLedger(self._product_repo)
        return ledger.reserve(StockTarget(product_id, variation_id), quantity, order_id=order_id)


class ReleaseStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        quantity: int,
        variation_id: str | None = None,
        order_id: str | None = None,
    ) -> StockSnapshot:
        load_product(self._product_repo, product_id)
        ledger = StockLedger(self._product_repo)
        return ledger.release(
            StockTarget(product_id, variation_id), quantity, order_id=order_id, strict=True
        )
