"""CLI commands for product variations."""

from __future__ import annotations

import click

from bazaar.application.manage_variations import (
    AddVariationHandler,
    AvailableOptionsHandler,
    BulkAddVariationsHandler,
    CheckVariationStockHandler,
    GenerateCombinationsHandler,
    UpdateVariationHandler,
)
from bazaar.domain.exceptions import DomainException
from bazaar.domain.service.variation_resolver import GeneratedCombinations
from bazaar.infrastructure.bootstrap import product_repository
from bazaar.infrastructure.cli.params import parse_axes, parse_options, split_list


def _display_generated(result: GeneratedCombinations) -> None:
    click.echo(f"Added {len(result.added)} variation(s), skipped {len(result.skipped)} existing")
    for label in result.added:
        click.echo(f"  + {label}")
    for label in result.skipped:
        click.echo(f"  = {label}")
    for head, values in result.matrix.items():
        click.echo(f"  {head}: {', '.join(values)}")


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--option", "options", multiple=True, required=True, help="Axis=Value (repeatable).")
@click.option("--sku", default=None)
@click.option("--price", default=None, help="Defaults to the product price.")
@click.option("--discount", default=None, help="Defaults to the product discount.")
@click.option("--quantity", default=0, type=int, help="Opening stock.")
@click.option("--threshold", default=5, type=int, help="Low-stock threshold.")
@click.option("--seller", default=None, help="Acting seller id.")
def variation_add(
    product_id: str,
    options: tuple[str, ...],
    sku: str | None,
    price: str | None,
    discount: str | None,
    quantity: int,
    threshold: int,
    seller: str | None,
) -> None:
    """Add one variation to a product."""
    handler = AddVariationHandler(product_repo=product_repository())

    try:
        variation = handler.handle(
            product_id,
            parse_options(options),
            sku=sku,
            price=price,
            discount_percentage=discount,
            quantity=quantity,
            low_stock_threshold=threshold,
            seller_id=seller,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variation {variation.id} ({variation.options.label()}) added, sku {variation.sku}")


@click.command("bulk")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--colors", default=None, help="Comma-separated colors.")
@click.option("--sizes", default=None, help="Comma-separated sizes.")
@click.option("--price", default=None)
@click.option("--quantity", default=0, type=int, help="Opening stock per variation.")
@click.option("--seller", default=None, help="Acting seller id.")
def variation_bulk(
    product_id: str,
    colors: str | None,
    sizes: str | None,
    price: str | None,
    quantity: int,
    seller: str | None,
) -> None:
    """Add every color x size variation."""
    handler = BulkAddVariationsHandler(product_repo=product_repository())

    try:
        result = handler.handle(
            product_id,
            split_list(colors),
            split_list(sizes),
            price=price,
            quantity=quantity,
            seller_id=seller,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_generated(result)


@click.command("generate")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--axis", "axes", multiple=True, required=True, help="Axis=V1,V2 (repeatable).")
@click.option("--price", default=None, help="Default price for new variations.")
@click.option("--quantity", default=0, type=int, help="Opening stock per variation.")
@click.option("--override", "overrides", multiple=True, help="Value=Price (repeatable).")
@click.option("--seller", default=None, help="Acting seller id.")
def variation_generate(
    product_id: str,
    axes: tuple[str, ...],
    price: str | None,
    quantity: int,
    overrides: tuple[str, ...],
    seller: str | None,
) -> None:
    """Generate every combination of the given option axes."""
    handler = GenerateCombinationsHandler(product_repo=product_repository())

    try:
        result = handler.handle(
            product_id,
            parse_axes(axes),
            default_price=price,
            default_quantity=quantity,
            price_overrides=parse_options(overrides),
            seller_id=seller,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_generated(result)


@click.command("update")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--id", "variation_id", required=True, help="Variation id.")
@click.option("--price", default=None)
@click.option("--discount", default=None)
@click.option("--quantity", default=None, type=int, help="New quantity on hand.")
@click.option("--threshold", default=None, type=int)
@click.option("--active/--inactive", "is_active", default=None)
@click.option("--seller", default=None, help="Acting seller id.")
def variation_update(
    product_id: str,
    variation_id: str,
    price: str | None,
    discount: str | None,
    quantity: int | None,
    threshold: int | None,
    is_active: bool | None,
    seller: str | None,
) -> None:
    """Update a variation's price, stock, threshold or availability."""
    handler = UpdateVariationHandler(product_repo=product_repository())

    try:
        variation = handler.handle(
            product_id,
            variation_id,
            price=price,
            discount_percentage=discount,
            quantity=quantity,
            low_stock_threshold=threshold,
            is_active=is_active,
            seller_id=seller,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    state = "active" if variation.is_active else "inactive"
    click.echo(
        f"Variation {variation.id} ({variation.options.label()}): "
        f"{variation.price_after_discount}, {variation.stock.available_stock} available, {state}"
    )


@click.command("check")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--option", "options", multiple=True, help="Axis=Value (repeatable).")
@click.option("--id", "variation_id", default=None, help="Variation id.")
@click.option("--quantity", default=1, type=int)
def variation_check(
    product_id: str, options: tuple[str, ...], variation_id: str | None, quantity: int
) -> None:
    """Check whether a variation can supply a quantity."""
    handler = CheckVariationStockHandler(product_repo=product_repository())

    try:
        dto = handler.handle(
            product_id, parse_options(options), variation_id=variation_id, quantity=quantity
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    verdict = "in stock" if dto.in_stock else "NOT available"
    click.echo(
        f"{' - '.join(dto.options.values())} [{dto.sku}]: {dto.available_stock} available, "
        f"requested {dto.requested_quantity} -> {verdict} ({dto.price})"
    )


@click.command("options")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--option", "options", multiple=True, help="Already selected Axis=Value.")
def variation_options(product_id: str, options: tuple[str, ...]) -> None:
    """Show the option values still available for a product."""
    handler = AvailableOptionsHandler(product_repo=product_repository())

    try:
        result = handler.handle(product_id, parse_options(options))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for axis in result.axes:
        click.echo(f"{axis}: {', '.join(result.options.get(axis, [])) or '-'}")
