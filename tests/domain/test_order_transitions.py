"""Unit tests for apply_order_transition and its stock side effects."""

import pytest

from bazaar.domain.exceptions import InvalidTransitionError, ValidationError
from bazaar.domain.model.inventory import StockLevel, StockTarget
from bazaar.domain.model.order import (
    LineStockState,
    Order,
    OrderLineItem,
    OrderStatus,
    all_items,
    seller_items,
)
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Money, Quantity
from bazaar.domain.service.order_transitions import apply_order_transition
from bazaar.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeProductRepository


def _setup(stock_state: LineStockState = LineStockState.RESERVED):
    """Two sellers, two products, 3 units of each reserved by order #1."""
    repo = FakeProductRepository([
        Product(id="p1", name="Lamp", price=Money.of("10"), seller_id="s1",
                stock=StockLevel(quantity=10, reserved_stock=3)),
        Product(id="p2", name="Rug", price=Money.of("20"), seller_id="s2",
                stock=StockLevel(quantity=10, reserved_stock=3)),
    ])
    items = [
        OrderLineItem(product_id="p1", product_name="Lamp", quantity=Quantity(3),
                      price=Money.of("10"), seller_id="s1", stock_state=stock_state),
        OrderLineItem(product_id="p2", product_name="Rug", quantity=Quantity(3),
                      price=Money.of("20"), seller_id="s2", stock_state=stock_state),
    ]
    order = Order(
        id="1", customer_id="u1", items=items,
        cart_price=Money.of("90"), taxes=Money.of("0"), shipping=Money.of("0"),
        total_order_price=Money.of("90"),
    )
    return order, StockLedger(repo), repo


def _advance(order: Order, ledger: StockLedger, *statuses: OrderStatus, item_filter=all_items) -> None:
    for status in statuses:
        apply_order_transition(order, status, ledger, item_filter)


class TestSellerScopedTransition:

    def test_seller_completes_only_their_items(self):
        order, ledger, repo = _setup()
        _advance(order, ledger, OrderStatus.APPROVED, OrderStatus.SHIPPING)

        result = apply_order_transition(order, OrderStatus.COMPLETED, ledger, seller_items("s1"))

        assert result.ok
        assert [item.product_id for item in result.moved] == ["p1"]
        lamp = repo.get_by_id("p1").stock
        rug = repo.get_by_id("p2").stock
        assert (lamp.quantity, lamp.reserved_stock, lamp.sold) == (7, 0, 3)
        assert (rug.quantity, rug.reserved_stock, rug.sold) == (10, 3, 0)
        assert order.items[0].status == OrderStatus.COMPLETED
        assert order.items[1].status == OrderStatus.SHIPPING
        assert order.items[1].stock_state == LineStockState.RESERVED
        assert order.status == OrderStatus.SHIPPING

    def test_whole_order_cancel_skips_lines_already_completed(self):
        order, ledger, repo = _setup()
        _advance(order, ledger, OrderStatus.APPROVED, OrderStatus.SHIPPING)
        apply_order_transition(order, OrderStatus.COMPLETED, ledger, seller_items("s1"))

        result = apply_order_transition(order, OrderStatus.CANCELLED, ledger, all_items)

        assert [item.product_id for item in result.moved] == ["p2"]
        lamp = repo.get_by_id("p1").stock
        rug = repo.get_by_id("p2").stock
        assert (lamp.quantity, lamp.reserved_stock, lamp.sold) == (7, 0, 3)
        assert (rug.quantity, rug.reserved_stock, rug.sold) == (10, 0, 0)
        assert [item.status for item in order.items] == [OrderStatus.COMPLETED, OrderStatus.CANCELLED]
        assert order.status == OrderStatus.COMPLETED

    def test_illegal_move_of_open_line_still_rejected(self):
        order, ledger, _ = _setup()
        _advance(order, ledger, OrderStatus.APPROVED, OrderStatus.SHIPPING)
        apply_order_transition(order, OrderStatus.COMPLETED, ledger, seller_items("s1"))
        with pytest.raises(InvalidTransitionError, match="Rug"):
            apply_order_transition(order, OrderStatus.APPROVED, ledger)

    def test_finished_order_cannot_move(self):
        order, ledger, _ = _setup()
        apply_order_transition(order, OrderStatus.CANCELLED, ledger)
        with pytest.raises(InvalidTransitionError):
            apply_order_transition(order, OrderStatus.APPROVED, ledger)

    def test_seller_with_no_items_selects_nothing(self):
        order, ledger, _ = _setup()
        with pytest.raises(ValidationError, match="No items"):
            apply_order_transition(order, OrderStatus.APPROVED, ledger, seller_items("s9"))


class TestStockEffects:

    def test_cancel_releases_reservations(self):
        order, ledger, repo = _setup()
        apply_order_transition(order, OrderStatus.CANCELLED, ledger)
        assert repo.get_by_id("p1").stock.reserved_stock == 0
        assert repo.get_by_id("p2").stock.reserved_stock == 0
        assert all(item.stock_state == LineStockState.RELEASED for item in order.items)
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_of_paid_order_restocks(self):
        order, ledger, repo = _setup(LineStockState.CONSUMED)
        apply_order_transition(order, OrderStatus.CANCELLED, ledger)
        assert repo.get_by_id("p1").stock.quantity == 13
        assert all(item.stock_state == LineStockState.RESTOCKED for item in order.items)

    def test_backordered_lines_have_no_stock_effect(self):
        order, ledger, repo = _setup(LineStockState.BACKORDERED)
        apply_order_transition(order, OrderStatus.CANCELLED, ledger)
        assert repo.get_by_id("p1").stock.quantity == 10
        assert repo.get_by_id("p1").stock.reserved_stock == 3

    def test_approve_and_ship_touch_no_stock(self):
        order, ledger, repo = _setup()
        _advance(order, ledger, OrderStatus.APPROVED, OrderStatus.SHIPPING)
        assert repo.get_by_id("p1").stock.reserved_stock == 3
        assert order.status == OrderStatus.SHIPPING

    def test_illegal_move_rejects_whole_request(self):
        order, ledger, repo = _setup()
        with pytest.raises(InvalidTransitionError):
            apply_order_transition(order, OrderStatus.DELIVERED, ledger)
        assert all(item.status == OrderStatus.PENDING for item in order.items)
        assert repo.get_by_id("p1").stock.reserved_stock == 3

    def test_per_item_failure_is_reported_and_others_still_move(self):
        order, ledger, repo = _setup()
        _advance(order, ledger, OrderStatus.APPROVED, OrderStatus.SHIPPING)
        # Someone released the rug's reservation behind the order's back.
        ledger.release(StockTarget("p2"), 3)

        result = apply_order_transition(order, OrderStatus.DELIVERED, ledger)

        assert not result.ok
        assert [f.product_id for f in result.failures] == ["p2"]
        assert repo.get_by_id("p1").stock.sold == 3
        assert order.items[1].status == OrderStatus.DELIVERED
        assert order.items[1].stock_state == LineStockState.RESERVED
        assert order.status == OrderStatus.DELIVERED
