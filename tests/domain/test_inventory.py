"""Unit tests for StockLevel, the per-product / per-variation stock ledger."""

from contextlib import suppress

import pytest

from bazaar.domain.exceptions import (
    DomainException,
    InsufficientReservedStockError,
    InsufficientStockError,
    OutOfStockError,
    ValidationError,
)
from bazaar.domain.model.inventory import StockLevel, StockMovement


def _stock(quantity: int = 10, reserved: int = 0, threshold: int = 10) -> StockLevel:
    return StockLevel(
        quantity=quantity, reserved_stock=reserved, low_stock_threshold=threshold, label="Widget"
    )


class TestReserve:

    def test_reserve_reduces_available(self):
        stock = _stock(100)
        stock.reserve(30, order_id="7")
        assert stock.available_stock == 70
        assert stock.reserved_stock == 30
        assert stock.quantity == 100

    def test_reserve_then_release_round_trip(self):
        stock = _stock(10, threshold=2)
        stock.reserve(9)
        assert stock.available_stock == 1
        assert stock.is_low_stock is True
        stock.release(9)
        assert stock.available_stock == 10
        assert stock.is_low_stock is False

    def test_reserve_more_than_available_rejected(self):
        stock = _stock(10, reserved=4)
        with pytest.raises(InsufficientStockError, match="only 6 items available") as exc_info:
            stock.reserve(7)
        assert exc_info.value.shortfall == 1
        assert stock.reserved_stock == 4

    def test_reserve_when_nothing_left_is_out_of_stock(self):
        stock = _stock(3, reserved=3)
        with pytest.raises(OutOfStockError, match="out of stock"):
            stock.reserve(1)

    def test_reserve_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _stock().reserve(0)

    def test_reserve_is_recorded(self):
        stock = _stock()
        stock.reserve(2, order_id="9")
        entry = stock.history[-1]
        assert entry.type == StockMovement.RESERVED
        assert entry.quantity == 2
        assert entry.order_id == "9"


class TestRelease:

    def test_release_clamps_at_reserved(self):
        stock = _stock(10, reserved=3)
        released = stock.release(5)
        assert released == 3
        assert stock.reserved_stock == 0
        assert stock.history[-1].quantity == 3


class TestConsume:

    def test_consume_more_than_reserved_fails(self):
        stock = _stock(5, reserved=5)
        with pytest.raises(InsufficientReservedStockError):
            stock.consume(6)
        assert stock.quantity == 5
        assert stock.reserved_stock == 5

    def test_consume_exact_reservation(self):
        stock = _stock(5, reserved=5)
        stock.consume(5)
        assert stock.quantity == 0
        assert stock.reserved_stock == 0
        assert stock.sold == 5
        assert stock.history[-1].type == StockMovement.SALE


class TestSellAndRestock:

    def test_sell_takes_unreserved_stock(self):
        stock = _stock(10, reserved=2)
        stock.sell(8)
        assert stock.quantity == 2
        assert stock.available_stock == 0
        assert stock.sold == 8

    def test_sell_beyond_available_rejected(self):
        with pytest.raises(InsufficientStockError):
            _stock(10, reserved=5).sell(6)

    def test_restock_undoes_a_sale(self):
        stock = _stock(10)
        stock.sell(4)
        stock.restock(4)
        assert stock.quantity == 10
        assert stock.sold == 0
        assert stock.history[-1].type == StockMovement.RETURN


class TestAdjustments:

    def test_add_records_purchase(self):
        stock = _stock(0)
        stock.add(12, reason="Delivery from supplier")
        assert stock.quantity == 12
        assert stock.history[-1].type == StockMovement.PURCHASE
        assert stock.history[-1].notes == "Delivery from supplier"

    def test_subtract_cannot_touch_reserved_units(self):
        stock = _stock(10, reserved=8)
        with pytest.raises(InsufficientStockError, match="Insufficient stock to subtract"):
            stock.subtract(3)

    def test_subtract_records_negative_adjustment(self):
        stock = _stock(10)
        stock.subtract(4)
        assert stock.quantity == 6
        assert stock.history[-1].type == StockMovement.ADJUSTMENT
        assert stock.history[-1].quantity == -4

    def test_adjust_absolute_returns_delta(self):
        stock = _stock(10)
        assert stock.adjust_absolute(4) == -6
        assert stock.quantity == 4

    def test_adjust_absolute_below_reserved_rejected(self):
        stock = _stock(10, reserved=5)
        with pytest.raises(ValidationError, match="reserved by open orders"):
            stock.adjust_absolute(4)

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            _stock().set_low_stock_threshold(-1)

    def test_history_newest_first(self):
        stock = _stock(10)
        stock.reserve(1)
        stock.release(1)
        types = [entry.type for entry in stock.history_newest_first()]
        assert types == [StockMovement.RELEASED, StockMovement.RESERVED]


class TestAvailability:

    def test_available_never_negative(self):
        assert _stock(3, reserved=5).available_stock == 0

    def test_in_stock_flag(self):
        assert _stock(3, reserved=2).in_stock
        assert not _stock(3, reserved=3).in_stock


class TestLedgerSequences:
    """Reserved stock never exceeds the stock on hand, whatever the order of
    operations, including ones the ledger refuses."""

    @pytest.mark.parametrize(
        "steps",
        [
            [("reserve", 4), ("consume", 2), ("release", 5), ("adjust_absolute", 3),
             ("reserve", 3), ("subtract", 1), ("consume", 3)],
            [("reserve", 10), ("subtract", 1), ("adjust_absolute", 5), ("release", 4),
             ("adjust_absolute", 6), ("consume", 6), ("add", 2), ("reserve", 2)],
            [("sell", 3), ("reserve", 7), ("restock", 3), ("release", 2),
             ("consume", 5), ("subtract", 5)],
            [("reserve", 11), ("reserve", 0), ("consume", 1), ("release", 1),
             ("adjust_absolute", -1), ("sell", 10), ("reserve", 1)],
        ],
    )
    def test_reserved_stays_within_quantity(self, steps):
        stock = _stock(10)
        for operation, amount in steps:
            with suppress(DomainException):
                getattr(stock, operation)(amount)
            assert 0 <= stock.reserved_stock <= stock.quantity, (operation, amount)
            assert stock.available_stock >= 0
            assert stock.available_stock == stock.quantity - stock.reserved_stock

    def test_refused_steps_leave_stock_untouched(self):
        stock = _stock(10)
        stock.reserve(6)
        for operation, amount in [("reserve", 5), ("subtract", 5), ("consume", 7),
                                  ("adjust_absolute", 5)]:
            with pytest.raises(DomainException):
                getattr(stock, operation)(amount)
        assert (stock.quantity, stock.reserved_stock, stock.sold) == (10, 6, 0)
