"""Domain service: order status transitions and their stock side effects.

Admin, seller and courier paths all move orders through this one function;
they differ only in which items they select.  Stock effects per line:

* -> cancelled: a reservation is released; a sale already made (paid
  orders) is returned to inventory.
* -> delivered / completed: a reservation is consumed into a sale.
* anything else: status only.

Lines that already reached a terminal status are left alone while any
selected line is still open, so an order can be cancelled after one seller
has completed their part.  Validation is all-or-nothing (an illegal move
for any remaining line rejects the request).  Stock effects are best-effort
per item: a failure on one line is logged and reported in the result, and
the remaining lines still move.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bazaar.domain.exceptions import DomainException, ValidationError
from bazaar.domain.model.order import (
    ItemFilter,
    LineStockState,
    Order,
    OrderLineItem,
    OrderStatus,
    all_items,
)
from bazaar.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFailure:
    product_id: str
    variation_id: str | None
    item_name: str
    error: str


@dataclass
class TransitionResult:
    order: Order
    moved: list[OrderLineItem] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def apply_order_transition(
    order: Order,
    new_status: OrderStatus,
    ledger: StockLedger,
    item_filter: ItemFilter = all_items,
    changed_by: str | None = None,
) -> TransitionResult:
    """Move the selected items of ``order`` to ``new_status``.

    Mutates ``order`` in place; the caller persists it.
    """
    selected = order.select_items(item_filter)
    if not selected:
        raise ValidationError(f"No items of order #{order.id} match this request")

    # Lines that already finished keep their outcome; the rest move.
    still_open = [item for item in selected if not item.status.is_terminal]
    moving = order.plan_transition(still_open or selected, new_status)
    result = TransitionResult(order=order, moved=moving)

    for item in moving:
        try:
            _apply_stock_effect(order, item, new_status, ledger, changed_by)
        except DomainException as exc:
            logger.warning(
                "Stock update for %s in order #%s failed during %s: %s",
                item.display_name, order.id, new_status.value, exc,
            )
            result.failures.append(
                ItemFailure(
                    product_id=item.product_id,
                    variation_id=item.variation_id,
                    item_name=item.display_name,
                    error=str(exc),
                )
            )

    order.mark_items(moving, new_status)
    logger.info(
        "Order #%s: %d item(s) moved to %s (order status now %s)",
        order.id, len(moving), new_status.value, order.status.value,
    )
    return result


def _apply_stock_effect(
    order: Order,
    item: OrderLineItem,
    new_status: OrderStatus,
    ledger: StockLedger,
    changed_by: str | None,
) -> None:
    qty = item.quantity.value
    if new_status == OrderStatus.CANCELLED:
        if item.stock_state == LineStockState.RESERVED:
            ledger.release(item.target, qty, order_id=order.id, changed_by=changed_by)
            item.stock_state = LineStockState.RELEASED
        elif item.stock_state == LineStockState.CONSUMED:
            ledger.restock(item.target, qty, order_id=order.id, changed_by=changed_by)
            item.stock_state = LineStockState.RESTOCKED
    elif new_status.is_fulfilled:
        if item.stock_state == LineStockState.RESERVED:
            ledger.consume(item.target, qty, order_id=order.id, changed_by=changed_by)
            item.stock_state = LineStockState.CONSUMED
