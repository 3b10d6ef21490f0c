"""Domain service: Stock Ledger.

The single entry point for every stock mutation.  Each operation is one
atomic update of one product document (``ProductRepository.update``): the
precondition check, the counter change and the history entry are applied
together or not at all.  There is no load-then-save window in which a
concurrent request could slip in.

Operations spanning several documents (reserving every line of an order)
have no transaction to lean on; ``reserve_all`` compensates instead by
releasing what it already reserved when a later line fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from bazaar.domain.exceptions import (
    EntityNotFoundError,
    InsufficientReservedStockError,
    InsufficientStockError,
    OverReleaseError,
    ValidationError,
)
from bazaar.domain.model.inventory import StockLevel, StockTarget
from bazaar.domain.model.product import Product
from bazaar.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockSnapshot:
    """Read-only view of one stock level after an operation."""

    target: StockTarget
    label: str
    quantity: int
    reserved_stock: int
    available_stock: int
    sold: int
    low_stock_threshold: int
    is_low_stock: bool

    @staticmethod
    def of(target: StockTarget, stock: StockLevel) -> StockSnapshot:
        return StockSnapshot(
            target=target,
            label=stock.label,
            quantity=stock.quantity,
            reserved_stock=stock.reserved_stock,
            available_stock=stock.available_stock,
            sold=stock.sold,
            low_stock_threshold=stock.low_stock_threshold,
            is_low_stock=stock.is_low_stock,
        )


@dataclass(frozen=True)
class StockRequest:
    """One line of a multi-line stock operation."""

    target: StockTarget
    quantity: int
    label: str = ""


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    # --- Single-target operations ---------------------------------------------

    def reserve(
        self,
        target: StockTarget,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        snapshot = self._apply(
            target, lambda stock: stock.reserve(quantity, order_id=order_id, changed_by=changed_by)
        )
        logger.info("Reserved %d of %s (order=%s)", quantity, target, order_id)
        return snapshot

    def release(
        self,
        target: StockTarget,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
        strict: bool = False,
    ) -> StockSnapshot:
        """Release reserved stock.

        By default over-release is clamped to what is reserved.  With
        ``strict=True`` (direct API calls) it is rejected with
        OverReleaseError instead.
        """

        def _release(stock: StockLevel) -> None:
            if strict and quantity > stock.reserved_stock:
                raise OverReleaseError(
                    f"Cannot release more than reserved for {stock.label}. "
                    f"Reserved: {stock.reserved_stock}, Requested: {quantity}"
                )
            released = stock.release(quantity, order_id=order_id, changed_by=changed_by)
            if released < quantity:
                logger.warning(
                    "Release of %d on %s clamped to %d (order=%s)",
                    quantity, target, released, order_id,
                )

        snapshot = self._apply(target, _release)
        logger.info("Released up to %d of %s (order=%s)", quantity, target, order_id)
        return snapshot

    def consume(
        self,
        target: StockTarget,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        try:
            snapshot = self._apply(
                target,
                lambda stock: stock.consume(quantity, order_id=order_id, changed_by=changed_by),
            )
        except InsufficientReservedStockError as exc:
            logger.error(
                "Ledger invariant violated on %s: consume %d with only %d reserved (order=%s)",
                target, exc.requested, exc.reserved, order_id,
            )
            raise
        logger.info("Consumed %d of %s (order=%s)", quantity, target, order_id)
        return snapshot

    def sell(
        self,
        target: StockTarget,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        """Take unreserved stock straight to sold (already-paid orders)."""
        snapshot = self._apply(
            target, lambda stock: stock.sell(quantity, order_id=order_id, changed_by=changed_by)
        )
        logger.info("Sold %d of %s (order=%s)", quantity, target, order_id)
        return snapshot

    def restock(
        self,
        target: StockTarget,
        quantity: int,
        order_id: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        """Return previously sold units to inventory."""
        snapshot = self._apply(
            target, lambda stock: stock.restock(quantity, order_id=order_id, changed_by=changed_by)
        )
        logger.info("Returned %d of %s to inventory (order=%s)", quantity, target, order_id)
        return snapshot

    def adjust(
        self,
        target: StockTarget,
        quantity: int,
        direction: str,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        """Seller stock correction: ``direction`` is "add" or "subtract"."""
        if direction == "add":
            operation: Callable[[StockLevel], object] = lambda stock: stock.add(
                quantity, reason=reason, changed_by=changed_by
            )
        elif direction == "subtract":
            operation = lambda stock: stock.subtract(quantity, reason=reason, changed_by=changed_by)
        else:
            raise ValidationError("Type must be 'add' or 'subtract'")
        snapshot = self._apply(target, operation)
        logger.info("Adjusted %s: %s %d", target, direction, quantity)
        return snapshot

    def adjust_absolute(
        self,
        target: StockTarget,
        new_quantity: int,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> StockSnapshot:
        snapshot = self._apply(
            target,
            lambda stock: stock.adjust_absolute(new_quantity, reason=reason, changed_by=changed_by),
        )
        logger.info("Set stock of %s to %d", target, new_quantity)
        return snapshot

    def set_low_stock_threshold(self, target: StockTarget, threshold: int) -> StockSnapshot:
        return self._apply(target, lambda stock: stock.set_low_stock_threshold(threshold))

    def snapshot(self, target: StockTarget) -> StockSnapshot:
        return self._apply(target, lambda stock: None, write=False)

    # --- Multi-target operations ----------------------------------------------

    def reserve_all(self, requests: Iterable[StockRequest], order_id: str | None = None) -> None:
        """Reserve every request, or none of them.

        Lines are reserved one at a time.  On the first failure, every
        reservation already made by this call is released again and the
        original error is re-raised.
        """
        done: list[StockRequest] = []
        try:
            for request in requests:
                try:
                    self.reserve(request.target, request.quantity, order_id=order_id)
                except InsufficientStockError as exc:
                    name = request.label or str(request.target)
                    raise type(exc)(
                        f"Insufficient stock for {name}: only {exc.available} items "
                        f"available in stock, requested {exc.requested}",
                        available=exc.available,
                        requested=exc.requested,
                    ) from exc
                done.append(request)
        except Exception:
            self._compensate(done, order_id)
            raise

    def _compensate(self, done: list[StockRequest], order_id: str | None) -> None:
        for request in reversed(done):
            try:
                self.release(request.target, request.quantity, order_id=order_id)
            except Exception:
                logger.exception(
                    "Could not roll back reservation of %d on %s (order=%s)",
                    request.quantity, request.target, order_id,
                )

    # --- Internal helpers -----------------------------------------------------

    def _apply(
        self,
        target: StockTarget,
        operation: Callable[[StockLevel], object],
        write: bool = True,
    ) -> StockSnapshot:
        def _mutate(product: Product) -> StockSnapshot:
            stock = product.stock_for(target)
            operation(stock)
            return StockSnapshot.of(target, stock)

        if not write:
            product = self._product_repo.get_by_id(target.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{target.product_id}' not found")
            return _mutate(product)
        return self._product_repo.update(target.product_id, _mutate)
