"""Tests for the JSON-file repositories, against a temporary data directory."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bazaar.domain.exceptions import DuplicateRelationshipError, EntityNotFoundError, ValidationError
from bazaar.domain.model.cart import AppliedCoupon, Cart, CartLineItem, Coupon
from bazaar.domain.model.courier import Courier
from bazaar.domain.model.inventory import StockLevel, StockMovement
from bazaar.domain.model.order import (
    DeliveryStatus,
    LineStockState,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
)
from bazaar.domain.model.product import Product
from bazaar.domain.model.user import Role, User
from bazaar.domain.model.value_objects import Money, OptionSet, Quantity
from bazaar.infrastructure.persistence.json_cart_repository import JsonCartRepository
from bazaar.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from bazaar.infrastructure.persistence.json_order_repository import JsonOrderRepository
from bazaar.infrastructure.persistence.json_product_repository import JsonProductRepository
from bazaar.infrastructure.persistence.json_user_repository import (
    JsonCourierRepository,
    JsonUserRepository,
)


def _shirt() -> Product:
    shirt = Product(
        id="1", name="Shirt", price=Money.of("100"), stock=StockLevel(),
        seller_id="s1", sku="TEE", discount_percentage=Decimal("10"),
    )
    shirt.add_variation(OptionSet.of({"Color": "Red", "Size": "M"}), quantity=4)
    shirt.update_price(Money.of("120"), discount_percentage=Decimal("5"), reason="season")
    return shirt


def _order(order_id: str = "1") -> Order:
    return Order(
        id=order_id,
        customer_id="u1",
        items=[
            OrderLineItem(
                product_id="1", product_name="Shirt", quantity=Quantity(2),
                price=Money.of("90"), seller_id="s1", variation_id="v1",
                variation_options=OptionSet.of({"Color": "Red"}),
            ),
        ],
        cart_price=Money.of("180"),
        taxes=Money.of("18"),
        shipping=Money.of("20"),
        total_order_price=Money.of("218"),
        payment_reference="pay-1",
    )


class TestJsonProductRepository:

    def test_round_trip_keeps_variations_and_history(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(_shirt())

        loaded = repo.get_by_id("1")

        assert loaded.sku == "TEE"
        assert loaded.discount_percentage == Decimal("5")
        assert loaded.axes == ["Color", "Size"]
        variation = loaded.variations[0]
        assert variation.options == OptionSet.of({"color": "red", "size": "m"})
        assert variation.stock.quantity == 4
        assert variation.stock.history[0].type == StockMovement.PURCHASE
        assert variation.stock.label == "Shirt (Red - M)"
        assert loaded.price_history[0].reason == "season"
        assert loaded.price_history[0].price_after_discount == Money.of("114")

    def test_update_persists_only_on_success(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(Product(id="1", name="Lamp", price=Money.of("10"), stock=StockLevel(quantity=3)))

        def _reserve_too_much(product: Product) -> None:
            product.stock.add(5)
            product.stock.reserve(100)

        with pytest.raises(ValidationError):
            repo.update("1", _reserve_too_much)
        assert repo.get_by_id("1").stock.quantity == 3

        repo.update("1", lambda product: product.stock.reserve(2))
        assert repo.get_by_id("1").stock.reserved_stock == 2

    def test_update_unknown_product(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        with pytest.raises(EntityNotFoundError):
            repo.update("9", lambda product: None)

    def test_queries(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(_shirt())
        repo.save(Product(id=repo.next_id(), name="Rug", price=Money.of("5"),
                          stock=StockLevel(), seller_id="s2"))
        assert repo.get_by_name("shirt").id == "1"
        assert [p.name for p in repo.list_by_seller("s2")] == ["Rug"]
        assert repo.next_id() == "3"


class TestJsonCartRepository:

    def _cart(self, cart_id: str = "1", user_id: str = "u1") -> Cart:
        return Cart(
            id=cart_id,
            user_id=user_id,
            items=[CartLineItem(product_id="1", product_name="Lamp",
                                quantity=Quantity(3), price=Money.of("12"))],
            coupon=AppliedCoupon(code="SPRING20", discount=Decimal("20")),
        )

    def test_round_trip(self, tmp_path):
        repo = JsonCartRepository(tmp_path / "carts.json")
        cart = self._cart()
        repo.save(cart)

        loaded = repo.get_by_user("u1")

        assert loaded.items[0].id == cart.items[0].id
        assert loaded.total_price == Money.of("40")
        assert loaded.total_price_after_discount == Money.of("35")
        assert loaded.coupon.code == "SPRING20"

    def test_one_cart_per_user(self, tmp_path):
        repo = JsonCartRepository(tmp_path / "carts.json")
        repo.save(self._cart("1"))
        with pytest.raises(DuplicateRelationshipError):
            repo.save(self._cart("2"))

    def test_take_by_payment_reference_claims_once(self, tmp_path):
        repo = JsonCartRepository(tmp_path / "carts.json")
        cart = self._cart()
        cart.payment_reference = "pay-1"
        repo.save(cart)

        assert repo.take_by_payment_reference("pay-1").id == "1"
        assert repo.take_by_payment_reference("pay-1") is None
        assert repo.get_by_id("1") is None

    def test_delete(self, tmp_path):
        repo = JsonCartRepository(tmp_path / "carts.json")
        repo.save(self._cart())
        assert repo.delete("1") is True
        assert repo.delete("1") is False


class TestJsonOrderRepository:

    def test_round_trip(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())

        loaded = repo.get_by_payment_reference("pay-1")

        assert loaded.id == "1"
        assert loaded.status == OrderStatus.PENDING
        assert loaded.delivery_status == DeliveryStatus.UNASSIGNED
        assert loaded.payment_method == PaymentMethod.CASH_ON_DELIVERY
        item = loaded.items[0]
        assert (item.quantity.value, item.price, item.seller_id) == (2, Money.of("90"), "s1")
        assert item.variation_options.label() == "Red"
        assert item.stock_state == LineStockState.RESERVED
        assert loaded.total_order_price == Money.of("218")

    def test_update_and_seller_listing(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        repo.save(_order())

        repo.update("1", lambda order: order.set_paid(True))

        assert repo.get_by_id("1").is_paid
        assert [o.id for o in repo.list_by_seller("s1")] == ["1"]
        assert repo.list_by_seller("s2") == []

    def test_next_id_is_sequential(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        first = repo.next_id()
        repo.save(_order(first))
        assert (first, repo.next_id()) == ("1", "2")


class TestJsonUserAndCourierRepositories:

    def test_users(self, tmp_path):
        repo = JsonUserRepository(tmp_path / "users.json")
        repo.save(User(id=repo.next_id(), name="Karim", email="Karim@Example.com", role=Role.DELIVERY))
        loaded = repo.get_by_email("karim@example.com")
        assert (loaded.id, loaded.role) == ("1", Role.DELIVERY)

    def test_courier_update(self, tmp_path):
        repo = JsonCourierRepository(tmp_path / "couriers.json")
        repo.save(Courier(user_id="d1", name="Karim"))

        repo.update("d1", lambda courier: courier.record_delivery(Money.of("10")))

        courier = repo.get_by_user_id("d1")
        assert (courier.total_deliveries, courier.earnings) == (1, Money.of("10"))
        with pytest.raises(EntityNotFoundError):
            repo.update("d9", lambda courier: None)


def test_coupon_round_trip(tmp_path):
    repo = JsonCouponRepository(tmp_path / "coupons.json")
    expires = datetime(2027, 1, 1, tzinfo=timezone.utc)
    repo.save(Coupon(code="SPRING20", discount=Decimal("20"), expires_at=expires))
    assert repo.get_by_code("SPRING20") == Coupon("SPRING20", Decimal("20"), expires)
    assert repo.get_by_code("NOPE1234") is None
