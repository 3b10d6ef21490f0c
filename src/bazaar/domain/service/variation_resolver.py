"""Domain service: Variation Resolver.

Maps a (possibly partial) selection of named options onto the concrete
variation that carries the stock, narrows the option values a shopper can
still pick, and generates variations from per-axis value lists.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Sequence

from bazaar.domain.exceptions import (
    DuplicateVariationError,
    ValidationError,
    VariationInactiveError,
    VariationNotFoundError,
)
from bazaar.domain.model.product import (
    DEFAULT_VARIATION_LOW_STOCK_THRESHOLD,
    Product,
    Variation,
)
from bazaar.domain.model.value_objects import Money, OptionSet


@dataclass(frozen=True)
class AvailableOptions:
    axes: list[str]
    selected: OptionSet
    options: dict[str, list[str]]
    matching: list[Variation]


@dataclass
class GeneratedCombinations:
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    matrix: dict[str, list[str]] = field(default_factory=dict)


def find_variation(product: Product, options: OptionSet) -> Variation | None:
    return product.find_variation(options)


def resolve_variation(
    product: Product,
    variation_id: str | None = None,
    options: OptionSet | None = None,
) -> Variation | None:
    """Pick the stock-bearing variation a request refers to.

    Returns None for products without variations.  A variation id wins over
    an option selection when both are given.
    """
    if not product.has_variations:
        if variation_id or options:
            raise VariationNotFoundError(f"{product.name} has no variations")
        return None

    if variation_id:
        variation = product.get_variation(variation_id)
    elif options:
        variation = product.find_variation(options)
        if variation is None:
            raise VariationNotFoundError(f"Variation {options.label()} not found")
    else:
        raise ValidationError(f"Please choose options for {product.name}")

    if not variation.is_active:
        raise VariationInactiveError(f"Variation {variation.options.label()} is not available")
    return variation


def available_options_given(product: Product, selected: OptionSet | None = None) -> AvailableOptions:
    """Values per axis still offered by some active, in-stock variation.

    Only variations consistent with ``selected`` are considered, so the
    result never offers a combination that has nothing left to sell.
    """
    if not product.has_variations:
        raise ValidationError(f"{product.name} does not have variations")
    selected = selected or OptionSet()
    axes = list(product.axes)
    values: dict[str, list[str]] = {axis: [] for axis in axes}
    matching: list[Variation] = []

    for variation in product.variations:
        if not variation.is_active or not variation.stock.in_stock:
            continue
        if not variation.options.matches(selected):
            continue
        matching.append(variation)
        for axis, value in variation.options:
            bucket = values.setdefault(axis, [])
            if value not in bucket:
                bucket.append(value)

    return AvailableOptions(axes=axes, selected=selected, options=values, matching=matching)


def option_matrix(product: Product, only_available: bool = True) -> dict[str, list[str]]:
    """First axis value -> values of the other axes that go with it."""
    if not product.axes:
        return {}
    first = product.axes[0]
    matrix: dict[str, list[str]] = {}
    for variation in product.variations:
        if only_available and (not variation.is_active or not variation.stock.in_stock):
            continue
        _add_to_matrix(matrix, first, variation.options)
    return matrix


def generate_combinations(
    product: Product,
    value_lists: Mapping[str, Sequence[str]],
    default_price: Money,
    default_quantity: int = 0,
    price_overrides: Mapping[str, Money] | None = None,
    discount_percentage: Decimal | None = None,
    low_stock_threshold: int = DEFAULT_VARIATION_LOW_STOCK_THRESHOLD,
    changed_by: str | None = None,
) -> GeneratedCombinations:
    """Add one variation per element of the Cartesian product of ``value_lists``.

    Combinations that already exist are skipped.  A price override keyed by
    an option value applies to every combination containing that value; the
    first matching axis wins.
    """
    if not value_lists:
        raise ValidationError("At least one axis with values is required")
    axes = list(value_lists.keys())
    for axis in axes:
        if not value_lists[axis]:
            raise ValidationError(f"Axis '{axis}' needs at least one value")

    overrides = {k.casefold(): v for k, v in (price_overrides or {}).items()}
    result = GeneratedCombinations()

    for combo in itertools.product(*(value_lists[axis] for axis in axes)):
        options = OptionSet(tuple(zip(axes, combo)))
        price = next(
            (overrides[value.casefold()] for value in combo if value.casefold() in overrides),
            default_price,
        )
        try:
            product.add_variation(
                options,
                price=price,
                discount_percentage=discount_percentage,
                quantity=default_quantity,
                low_stock_threshold=low_stock_threshold,
                changed_by=changed_by,
            )
        except DuplicateVariationError:
            result.skipped.append(options.label())
            continue
        result.added.append(options.label())
        _add_to_matrix(result.matrix, axes[0], options)

    for axis in axes:
        if axis.casefold() not in (a.casefold() for a in product.axes):
            product.axes.append(axis)
    return result


def _add_to_matrix(matrix: dict[str, list[str]], first_axis: str, options: OptionSet) -> None:
    head = options.get(first_axis)
    if head is None:
        return
    row = matrix.setdefault(head, [])
    for axis, value in options:
        if axis.casefold() != first_axis.casefold() and value not in row:
            row.append(value)
