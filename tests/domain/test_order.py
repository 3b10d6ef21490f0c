"""Unit tests for the Order aggregate: status and delivery state machines."""

import pytest

from bazaar.domain.exceptions import InvalidTransitionError, ValidationError
from bazaar.domain.model.order import (
    DeliveryStatus,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    open_items,
    seller_items,
)
from bazaar.domain.model.value_objects import Money, Quantity


def _make_item(product_id: str = "p1", seller_id: str = "s1", qty: int = 1, price: str = "10") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        price=Money.of(price),
        seller_id=seller_id,
    )


def _make_order(*items: OrderLineItem) -> Order:
    items = list(items) or [_make_item()]
    return Order(
        id="1",
        customer_id="u1",
        items=items,
        cart_price=Money.of("10"),
        taxes=Money.of("0"),
        shipping=Money.of("0"),
        total_order_price=Money.of("10"),
    )


class TestStatusParsing:

    def test_approved_keeps_its_capital_letter(self):
        assert OrderStatus.parse("approved") == OrderStatus.APPROVED
        assert OrderStatus.APPROVED.value == "Approved"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError, match="Invalid order status"):
            OrderStatus.parse("teleported")

    def test_payment_method_parsing(self):
        assert PaymentMethod.parse("paymob") == PaymentMethod.PAYMOB
        with pytest.raises(ValidationError):
            PaymentMethod.parse("barter")


class TestStatusMachine:

    def test_allowed_moves(self):
        assert Order.can_transition(OrderStatus.PENDING, OrderStatus.APPROVED)
        assert Order.can_transition(OrderStatus.APPROVED, OrderStatus.SHIPPING)
        assert Order.can_transition(OrderStatus.SHIPPING, OrderStatus.RETURNED)

    def test_terminal_states_go_nowhere(self):
        for status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.COMPLETED):
            assert not Order.can_transition(status, OrderStatus.PENDING)
            assert not Order.can_transition(status, OrderStatus.SHIPPING)

    def test_cannot_skip_to_shipping(self):
        order = _make_order()
        with pytest.raises(InvalidTransitionError, match="from pending to shipping"):
            order.plan_transition(order.items, OrderStatus.SHIPPING)

    def test_items_already_in_target_are_skipped(self):
        a, b = _make_item("p1"), _make_item("p2")
        a.status = OrderStatus.APPROVED
        order = _make_order(a, b)
        assert order.plan_transition(order.items, OrderStatus.APPROVED) == [b]

    def test_mark_items_summarizes_to_slowest_open_item(self):
        a, b = _make_item("p1", "s1"), _make_item("p2", "s2")
        order = _make_order(a, b)
        order.mark_items([a], OrderStatus.APPROVED)
        assert order.status == OrderStatus.PENDING
        order.mark_items([b], OrderStatus.APPROVED)
        assert order.status == OrderStatus.APPROVED

    def test_mixed_terminal_states_with_a_delivery_complete_the_order(self):
        a, b = _make_item("p1", "s1"), _make_item("p2", "s2")
        order = _make_order(a, b)
        order.mark_items([a], OrderStatus.CANCELLED)
        order.mark_items([b], OrderStatus.DELIVERED)
        assert order.status == OrderStatus.COMPLETED
        assert order.cancelled_at is not None
        assert order.delivered_at is not None

    def test_item_filters(self):
        a, b = _make_item("p1", "s1"), _make_item("p2", "s2")
        b.status = OrderStatus.CANCELLED
        order = _make_order(a, b)
        assert order.select_items(seller_items("s2")) == [b]
        assert order.select_items(open_items) == [a]
        assert order.sellers() == {"s1", "s2"}


class TestDeliveryMachine:

    def test_assign_then_advance(self):
        order = _make_order()
        order.assign_courier("c1")
        assert order.delivery_status == DeliveryStatus.ASSIGNED
        order.advance_delivery(DeliveryStatus.PICKED_UP)
        assert order.picked_up_at is not None
        order.advance_delivery(DeliveryStatus.DELIVERED, notes="Left with neighbour")
        assert order.delivery_status == DeliveryStatus.DELIVERED
        assert order.delivery_notes == "Left with neighbour"

    def test_delivery_cannot_go_backwards(self):
        order = _make_order()
        order.assign_courier("c1")
        order.advance_delivery(DeliveryStatus.IN_TRANSIT)
        with pytest.raises(InvalidTransitionError, match="cannot go from in_transit to picked_up"):
            order.advance_delivery(DeliveryStatus.PICKED_UP)

    def test_unassigned_order_cannot_advance(self):
        with pytest.raises(InvalidTransitionError, match="no courier"):
            _make_order().advance_delivery(DeliveryStatus.PICKED_UP)

    def test_reassign_before_pickup_only(self):
        order = _make_order()
        order.assign_courier("c1")
        order.assign_courier("c2")
        assert order.delivery_guy_id == "c2"
        order.advance_delivery(DeliveryStatus.PICKED_UP)
        with pytest.raises(InvalidTransitionError, match="already picked_up"):
            order.assign_courier("c3")

    def test_cannot_assign_to_cancelled_order(self):
        order = _make_order()
        order.mark_items(order.items, OrderStatus.CANCELLED)
        with pytest.raises(InvalidTransitionError):
            order.assign_courier("c1")

    def test_notes_length_limited(self):
        order = _make_order()
        order.assign_courier("c1")
        with pytest.raises(ValidationError, match="too long"):
            order.advance_delivery(DeliveryStatus.PICKED_UP, notes="x" * 501)

    def test_delivery_status_parsing(self):
        assert DeliveryStatus.parse("IN_TRANSIT") == DeliveryStatus.IN_TRANSIT
        with pytest.raises(ValidationError):
            DeliveryStatus.parse("lost")
