"""Unit tests for the StockLedger domain service.

Uses in-memory fake repositories, no file I/O.
"""

import pytest

from bazaar.domain.exceptions import (
    EntityNotFoundError,
    InsufficientReservedStockError,
    InsufficientStockError,
    OverReleaseError,
    ValidationError,
)
from bazaar.domain.model.inventory import StockLevel, StockMovement, StockTarget
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Money, OptionSet
from bazaar.domain.service.stock_ledger import StockLedger, StockRequest
from tests.fakes import FakeProductRepository


def _setup() -> tuple[StockLedger, FakeProductRepository, str]:
    shirt = Product(id="p2", name="Shirt", price=Money.of("20"), stock=StockLevel())
    variation = shirt.add_variation(OptionSet.of({"Color": "Red"}), quantity=5)
    repo = FakeProductRepository([
        Product(id="p1", name="Mug", price=Money.of("10"), stock=StockLevel(quantity=10)),
        shirt,
    ])
    return StockLedger(repo), repo, variation.id


class TestSingleTarget:

    def test_reserve_persists_and_returns_snapshot(self):
        ledger, repo, _ = _setup()
        snapshot = ledger.reserve(StockTarget("p1"), 4, order_id="1")
        assert snapshot.available_stock == 6
        stored = repo.get_by_id("p1").stock
        assert stored.reserved_stock == 4
        assert stored.history[-1].type == StockMovement.RESERVED

    def test_failed_reserve_writes_nothing(self):
        ledger, repo, _ = _setup()
        with pytest.raises(InsufficientStockError):
            ledger.reserve(StockTarget("p1"), 11)
        stored = repo.get_by_id("p1").stock
        assert stored.reserved_stock == 0
        assert stored.history == []

    def test_variation_stock_is_separate(self):
        ledger, repo, variation_id = _setup()
        ledger.reserve(StockTarget("p2", variation_id), 5)
        shirt = repo.get_by_id("p2")
        assert shirt.get_variation(variation_id).stock.available_stock == 0
        assert shirt.stock.reserved_stock == 0

    def test_unknown_product(self):
        ledger, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ledger.reserve(StockTarget("nope"), 1)

    def test_release_clamps_by_default(self):
        ledger, _, _ = _setup()
        ledger.reserve(StockTarget("p1"), 2)
        snapshot = ledger.release(StockTarget("p1"), 5)
        assert snapshot.reserved_stock == 0

    def test_strict_release_refuses_over_release(self):
        ledger, repo, _ = _setup()
        ledger.reserve(StockTarget("p1"), 2)
        with pytest.raises(OverReleaseError, match="Cannot release more than reserved"):
            ledger.release(StockTarget("p1"), 3, strict=True)
        assert repo.get_by_id("p1").stock.reserved_stock == 2

    def test_consume_without_reservation_fails(self):
        ledger, _, _ = _setup()
        with pytest.raises(InsufficientReservedStockError):
            ledger.consume(StockTarget("p1"), 1)

    def test_adjust_direction_validated(self):
        ledger, _, _ = _setup()
        with pytest.raises(ValidationError, match="'add' or 'subtract'"):
            ledger.adjust(StockTarget("p1"), 1, "multiply")

    def test_adjust_add_and_subtract(self):
        ledger, _, _ = _setup()
        ledger.adjust(StockTarget("p1"), 5, "add", reason="Restock")
        snapshot = ledger.adjust(StockTarget("p1"), 3, "subtract")
        assert snapshot.quantity == 12


class TestReserveAll:

    def test_all_lines_reserved(self):
        ledger, repo, variation_id = _setup()
        ledger.reserve_all(
            [
                StockRequest(StockTarget("p1"), 3, "Mug"),
                StockRequest(StockTarget("p2", variation_id), 2, "Shirt (Red)"),
            ],
            order_id="1",
        )
        assert repo.get_by_id("p1").stock.reserved_stock == 3
        assert repo.get_by_id("p2").get_variation(variation_id).stock.reserved_stock == 2

    def test_failure_releases_earlier_lines(self):
        ledger, repo, variation_id = _setup()
        with pytest.raises(InsufficientStockError, match="Shirt \\(Red\\)"):
            ledger.reserve_all(
                [
                    StockRequest(StockTarget("p1"), 3, "Mug"),
                    StockRequest(StockTarget("p2", variation_id), 6, "Shirt (Red)"),
                ],
                order_id="1",
            )
        mug = repo.get_by_id("p1").stock
        assert mug.reserved_stock == 0
        assert [e.type for e in mug.history] == [StockMovement.RESERVED, StockMovement.RELEASED]
        assert repo.get_by_id("p2").get_variation(variation_id).stock.reserved_stock == 0
