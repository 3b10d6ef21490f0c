"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from bazaar.application.add_product import AddProductHandler
from bazaar.application.show_inventory import PriceHistoryHandler
from bazaar.application.update_product import UpdateProductPriceHandler
from bazaar.domain.exceptions import DomainException
from bazaar.infrastructure.bootstrap import config, product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. '29.99').")
@click.option("--quantity", default=0, type=int, help="Opening stock.")
@click.option("--discount", default=None, help="Discount percentage.")
@click.option("--seller", default=None, help="Owning seller id.")
@click.option("--sku", default=None, help="Stock keeping unit.")
@click.option("--threshold", default=10, type=int, help="Low-stock threshold.")
def product_add(
    name: str,
    price: str,
    quantity: int,
    discount: str | None,
    seller: str | None,
    sku: str | None,
    threshold: int,
) -> None:
    """Add a product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository(), currency=config().currency)

    try:
        product = handler.handle(
            name=name,
            price=price,
            quantity=quantity,
            discount_percentage=discount,
            seller_id=seller,
            sku=sku,
            low_stock_threshold=threshold,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} '{product.name}' added at {product.price_after_discount}")


@click.command("list")
@click.option("--seller", default=None, help="Only this seller's products.")
def product_list(seller: str | None) -> None:
    """List all products in the catalog."""
    repo = product_repository()
    products = repo.list_by_seller(seller) if seller else repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>14} {'Disc%':>6} {'Variations':>10}")
    click.echo("-" * 64)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<24} {str(p.price_after_discount):>14} "
            f"{p.discount_percentage:>6} {len(p.variations):>10}"
        )


@click.command("price")
@click.option("--id", "product_id", required=True, help="Product id.")
@click.option("--price", required=True, help="New unit price.")
@click.option("--discount", default=None, help="Discount percentage.")
@click.option("--seller", default=None, help="Acting seller id.")
@click.option("--reason", default=None, help="Reason for the change.")
def product_price(
    product_id: str, price: str, discount: str | None, seller: str | None, reason: str | None
) -> None:
    """Change a product's price (recorded in its price history)."""
    handler = UpdateProductPriceHandler(product_repo=product_repository())

    try:
        changed = handler.handle(
            product_id, price, discount_percentage=discount, seller_id=seller, reason=reason
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if changed:
        click.echo(f"Product {product_id} price updated to {price}")
    else:
        click.echo(f"Product {product_id} price unchanged")


@click.command("price-history")
@click.option("--id", "product_id", required=True, help="Product id.")
@click.option("--page", default=1, type=int)
@click.option("--limit", default=10, type=int)
def product_price_history(product_id: str, page: int, limit: int) -> None:
    """Show a product's price changes, newest first."""
    handler = PriceHistoryHandler(product_repo=product_repository())

    try:
        result = handler.handle(product_id, page=page, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No price changes recorded.")
        return

    click.echo(f"{'When':<20} {'Price':>14} {'Disc%':>6} {'Final':>14}  Reason")
    click.echo("-" * 70)
    for entry in result.items:
        click.echo(
            f"{entry.changed_at:%Y-%m-%d %H:%M}     {str(entry.price):>14} "
            f"{entry.discount_percentage:>6} {str(entry.price_after_discount):>14}  "
            f"{entry.reason or ''}"
        )
    click.echo(f"Page {result.page}/{result.total_pages} ({result.total} entries)")
