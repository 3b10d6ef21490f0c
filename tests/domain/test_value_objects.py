"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.value_objects import Money, OptionSet, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "EGP"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition_and_multiplication(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "EGP") + Money(Decimal("5"), "USD")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "15.00 EGP"

    def test_round_up_to_increment(self):
        assert Money.of("38").round_up_to_increment() == Money.of("40")
        assert Money.of("40").round_up_to_increment() == Money.of("40")
        assert Money.of("40.01").round_up_to_increment() == Money.of("45")

    def test_discounted_then_rounded_up(self):
        assert Money.of("99").discounted(Decimal("15")).round_up() == Money.of("85")

    def test_round_whole_is_half_up(self):
        assert Money.of("2.5").round_whole() == Money.of("3")
        assert Money.of("2.49").round_whole() == Money.of("2")

    def test_minor_units(self):
        assert Money.of("12.34").minor_units == 1234
        assert Money.from_minor_units(1234) == Money.of("12.34")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)


# ── OptionSet ────────────────────────────────────────────────────────────────


class TestOptionSet:

    def test_equality_ignores_case_and_axis_order(self):
        a = OptionSet.of({"Color": "Black", "Storage": "128GB"})
        b = OptionSet.of({"storage": "128gb", "color": "BLACK"})
        assert a == b
        assert hash(a) == hash(b)

    def test_different_axis_sets_are_not_equal(self):
        assert OptionSet.of({"Color": "Black"}) != OptionSet.of({"Color": "Black", "Size": "M"})

    def test_matches_partial_selection(self):
        full = OptionSet.of({"Color": "Black", "Size": "M"})
        assert full.matches(OptionSet.of({"color": "black"}))
        assert not full.matches(OptionSet.of({"Color": "White"}))
        assert not full.matches(OptionSet.of({"Material": "Cotton"}))

    def test_label_keeps_display_order(self):
        assert OptionSet.of({"Color": "Black", "Size": "M"}).label() == "Black - M"

    def test_empty_value_rejected(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            OptionSet.of({"Color": " "})

    def test_repeated_axis_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            OptionSet((("Color", "Black"), ("color", "White")))

    def test_empty_set_is_falsy(self):
        assert not OptionSet.of(None)
        assert not OptionSet()
