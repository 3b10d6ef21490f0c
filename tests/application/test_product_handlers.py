"""Integration tests for catalog and variation management.

Uses in-memory fake repositories, no file I/O.
"""

from decimal import Decimal

import pytest

from bazaar.application.add_product import AddProductHandler
from bazaar.application.manage_variations import (
    AddVariationHandler,
    AvailableOptionsHandler,
    BulkAddVariationsHandler,
    CheckVariationStockHandler,
    GenerateCombinationsHandler,
    UpdateVariationHandler,
)
from bazaar.application.update_product import UpdateProductPriceHandler
from bazaar.domain.exceptions import (
    DuplicateVariationError,
    EntityNotFoundError,
    ValidationError,
    VariationNotFoundError,
)
from bazaar.domain.model.inventory import StockMovement
from bazaar.domain.model.value_objects import Money
from tests.fakes import FakeProductRepository


def _shirt(product_repo: FakeProductRepository) -> str:
    return AddProductHandler(product_repo).handle(
        "T-Shirt", "100", seller_id="s1", sku="tee"
    ).id


class TestAddProduct:

    def test_add_with_opening_stock(self):
        repo = FakeProductRepository()
        product = AddProductHandler(repo).handle("Lamp", "12.50", quantity=7, seller_id="s1")

        stored = repo.get_by_id(product.id)
        assert stored.price == Money.of("12.50")
        assert stored.stock.quantity == 7
        assert [entry.type for entry in stored.stock.history] == [StockMovement.PURCHASE]
        assert stored.stock.history[0].notes == "Initial stock"

    def test_duplicate_name_rejected(self):
        repo = FakeProductRepository()
        AddProductHandler(repo).handle("Lamp", "10")
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(repo).handle("lamp", "11")

    @pytest.mark.parametrize("price", ["0", "-5"])
    def test_price_must_be_positive(self, price):
        with pytest.raises(ValidationError, match="greater than zero"):
            AddProductHandler(FakeProductRepository()).handle("Lamp", price)

    def test_price_cap(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            AddProductHandler(FakeProductRepository()).handle("Yacht", "250001")

    def test_discount_out_of_range(self):
        with pytest.raises(ValidationError, match="between 0 and 100"):
            AddProductHandler(FakeProductRepository()).handle("Lamp", "10", discount_percentage="120")


class TestUpdatePrice:

    def test_price_change_recorded(self):
        repo = FakeProductRepository()
        product_id = AddProductHandler(repo).handle("Lamp", "100", seller_id="s1").id

        changed = UpdateProductPriceHandler(repo).handle(
            product_id, "80", discount_percentage="25", seller_id="s1", reason="sale"
        )

        assert changed is True
        stored = repo.get_by_id(product_id)
        assert stored.price_after_discount == Money.of("60")
        entry = stored.price_history[-1]
        assert (entry.price, entry.discount_percentage, entry.reason) == (
            Money.of("80"), Decimal("25"), "sale"
        )

    def test_unchanged_price_returns_false(self):
        repo = FakeProductRepository()
        product_id = AddProductHandler(repo).handle("Lamp", "100").id
        assert UpdateProductPriceHandler(repo).handle(product_id, "100") is False
        assert repo.get_by_id(product_id).price_history == []

    def test_other_seller_gets_not_found(self):
        repo = FakeProductRepository()
        product_id = AddProductHandler(repo).handle("Lamp", "100", seller_id="s1").id
        with pytest.raises(EntityNotFoundError):
            UpdateProductPriceHandler(repo).handle(product_id, "90", seller_id="s2")
        assert repo.get_by_id(product_id).price == Money.of("100")


class TestVariations:

    def test_add_variation_with_default_sku(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)

        variation = AddVariationHandler(repo).handle(
            product_id, {"Color": "Navy Blue", "Size": "L"}, quantity=4, seller_id="s1"
        )

        assert variation.sku == "TEE-NAVY-BLUE-L"
        stored = repo.get_by_id(product_id)
        assert stored.axes == ["Color", "Size"]
        assert stored.get_variation(variation.id).stock.quantity == 4

    def test_duplicate_options_rejected_case_insensitively(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        AddVariationHandler(repo).handle(product_id, {"Color": "Red", "Size": "M"})
        with pytest.raises(DuplicateVariationError):
            AddVariationHandler(repo).handle(product_id, {"size": "m", "color": "RED"})
        assert len(repo.get_by_id(product_id).variations) == 1

    def test_bulk_colour_size_grid(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        AddVariationHandler(repo).handle(product_id, {"color": "Red", "size": "S"})

        result = BulkAddVariationsHandler(repo).handle(
            product_id, ["Red", "Blue"], ["S", "M"], quantity=2
        )

        assert result.added == ["Red - M", "Blue - S", "Blue - M"]
        assert result.skipped == ["Red - S"]
        assert len(repo.get_by_id(product_id).variations) == 4

    def test_bulk_needs_values(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        with pytest.raises(ValidationError, match="at least one color or size"):
            BulkAddVariationsHandler(repo).handle(product_id, [], [])

    def test_generate_with_price_override(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)

        result = GenerateCombinationsHandler(repo).handle(
            product_id,
            {"Material": ["Cotton", "Silk"], "Size": ["S", "M"]},
            default_quantity=1,
            price_overrides={"silk": "150"},
        )

        assert result.matrix == {"Cotton": ["S", "M"], "Silk": ["S", "M"]}
        prices = {
            v.options.label(): v.price for v in repo.get_by_id(product_id).variations
        }
        assert prices["Silk - M"] == Money.of("150")
        assert prices["Cotton - S"] == Money.of("100")

    def test_update_quantity_goes_through_history(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        variation = AddVariationHandler(repo).handle(product_id, {"Color": "Red"}, quantity=2)

        updated = UpdateVariationHandler(repo).handle(
            product_id, variation.id, quantity=9, price="120", is_active=False
        )

        assert updated.stock.quantity == 9
        assert updated.stock.history[-1].type == StockMovement.ADJUSTMENT
        assert updated.stock.history[-1].quantity == 7
        assert updated.price == Money.of("120")
        assert not repo.get_by_id(product_id).get_variation(variation.id).is_active

    def test_failed_update_changes_nothing(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        variation = AddVariationHandler(repo).handle(product_id, {"Color": "Red"}, quantity=2)
        with pytest.raises(ValidationError):
            UpdateVariationHandler(repo).handle(
                product_id, variation.id, price="90", quantity=-1
            )
        assert repo.get_by_id(product_id).get_variation(variation.id).price == Money.of("100")


class TestVariationQueries:

    def _catalog(self):
        repo = FakeProductRepository()
        product_id = _shirt(repo)
        add = AddVariationHandler(repo)
        add.handle(product_id, {"Color": "Red", "Size": "S"}, quantity=3)
        add.handle(product_id, {"Color": "Red", "Size": "M"}, quantity=0)
        add.handle(product_id, {"Color": "Blue", "Size": "M"}, quantity=5)
        return repo, product_id

    def test_check_stock_by_options(self):
        repo, product_id = self._catalog()
        dto = CheckVariationStockHandler(repo).handle(
            product_id, {"color": "red", "size": "s"}, quantity=4
        )
        assert dto.available_stock == 3
        assert dto.in_stock is False
        assert dto.price == "100.00 EGP"

    def test_check_unknown_combination(self):
        repo, product_id = self._catalog()
        with pytest.raises(VariationNotFoundError):
            CheckVariationStockHandler(repo).handle(product_id, {"Color": "Green"})

    def test_available_options_narrow_with_selection(self):
        repo, product_id = self._catalog()
        handler = AvailableOptionsHandler(repo)

        everything = handler.handle(product_id)
        assert everything.options == {"Color": ["Red", "Blue"], "Size": ["S", "M"]}

        red = handler.handle(product_id, {"Color": "Red"})
        # Red/M has no stock, so only S is offered.
        assert red.options["Size"] == ["S"]

    def test_available_options_on_plain_product(self):
        repo = FakeProductRepository()
        product_id = AddProductHandler(repo).handle("Lamp", "10").id
        with pytest.raises(ValidationError, match="does not have variations"):
            AvailableOptionsHandler(repo).handle(product_id)
