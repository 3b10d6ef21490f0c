"""CLI commands for stock levels and inventory reports."""

from __future__ import annotations

import click

from bazaar.application.adjust_stock import (
    AdjustStockHandler,
    SetLowStockThresholdHandler,
    SetStockHandler,
)
from bazaar.application.reserve_stock import ReleaseStockHandler, ReserveStockHandler
from bazaar.application.show_inventory import (
    InventoryDashboardHandler,
    InventoryLineDTO,
    LowStockHandler,
    ShowInventoryHandler,
    StockHistoryHandler,
)
from bazaar.domain.exceptions import DomainException
from bazaar.domain.service.stock_ledger import StockSnapshot
from bazaar.infrastructure.bootstrap import product_repository


def _display_snapshot(snapshot: StockSnapshot) -> None:
    flag = "  LOW" if snapshot.is_low_stock else ""
    click.echo(
        f"{snapshot.label}: quantity={snapshot.quantity} reserved={snapshot.reserved_stock} "
        f"available={snapshot.available_stock} sold={snapshot.sold}{flag}"
    )


def _display_lines(lines: list[InventoryLineDTO]) -> None:
    click.echo(f"{'Product':<28} {'Qty':>6} {'Reserved':>9} {'Available':>10} {'Sold':>6}")
    click.echo("-" * 63)
    for line in lines:
        name = line.product_name
        if line.options:
            name = f"{name} ({' - '.join(line.options.values())})"
        flag = " *" if line.is_low_stock else ""
        click.echo(
            f"{name:<28} {line.quantity:>6} {line.reserved:>9} {line.available:>10} {line.sold:>6}{flag}"
        )


@click.command("show")
@click.option("--seller", default=None, help="Only this seller's products.")
def stock_show(seller: str | None) -> None:
    """Show current stock levels (* marks low stock)."""
    lines = ShowInventoryHandler(product_repo=product_repository()).handle(seller)

    if not lines:
        click.echo("No inventory records found.")
        return
    _display_lines(lines)


@click.command("adjust")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--quantity", required=True, type=int)
@click.option("--type", "direction", required=True, type=click.Choice(["add", "subtract"]))
@click.option("--reason", default=None)
@click.option("--seller", default=None, help="Acting seller id.")
def stock_adjust(
    product_id: str,
    variation_id: str | None,
    quantity: int,
    direction: str,
    reason: str | None,
    seller: str | None,
) -> None:
    """Add or subtract stock."""
    handler = AdjustStockHandler(product_repo=product_repository())

    try:
        snapshot = handler.handle(
            product_id, quantity, direction, variation_id=variation_id, reason=reason, seller_id=seller
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_snapshot(snapshot)


@click.command("set")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--quantity", required=True, type=int)
@click.option("--reason", default=None)
@click.option("--seller", default=None, help="Acting seller id.")
def stock_set(
    product_id: str, variation_id: str | None, quantity: int, reason: str | None, seller: str | None
) -> None:
    """Set the quantity on hand to an absolute value."""
    handler = SetStockHandler(product_repo=product_repository())

    try:
        snapshot = handler.handle(
            product_id, quantity, variation_id=variation_id, reason=reason, seller_id=seller
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_snapshot(snapshot)


@click.command("threshold")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--value", required=True, type=int)
@click.option("--seller", default=None, help="Acting seller id.")
def stock_threshold(product_id: str, variation_id: str | None, value: int, seller: str | None) -> None:
    """Set the low-stock threshold."""
    handler = SetLowStockThresholdHandler(product_repo=product_repository())

    try:
        snapshot = handler.handle(product_id, value, variation_id=variation_id, seller_id=seller)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_snapshot(snapshot)


@click.command("reserve")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--quantity", required=True, type=int)
@click.option("--order", "order_id", default=None)
def stock_reserve(product_id: str, variation_id: str | None, quantity: int, order_id: str | None) -> None:
    """Hold stock directly."""
    handler = ReserveStockHandler(product_repo=product_repository())

    try:
        snapshot = handler.handle(product_id, quantity, variation_id=variation_id, order_id=order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_snapshot(snapshot)


@click.command("release")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--quantity", required=True, type=int)
@click.option("--order", "order_id", default=None)
def stock_release(product_id: str, variation_id: str | None, quantity: int, order_id: str | None) -> None:
    """Release held stock (refuses to release more than is held)."""
    handler = ReleaseStockHandler(product_repo=product_repository())

    try:
        snapshot = handler.handle(product_id, quantity, variation_id=variation_id, order_id=order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_snapshot(snapshot)


@click.command("history")
@click.option("--product", "product_id", required=True)
@click.option("--variation", "variation_id", default=None)
@click.option("--page", default=1, type=int)
@click.option("--limit", default=10, type=int)
def stock_history(product_id: str, variation_id: str | None, page: int, limit: int) -> None:
    """Show stock movements, newest first."""
    handler = StockHistoryHandler(product_repo=product_repository())

    try:
        result = handler.handle(product_id, variation_id=variation_id, page=page, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No stock movements recorded.")
        return

    click.echo(f"{'When':<17} {'Type':<11} {'Qty':>6} {'Order':<8} Notes")
    click.echo("-" * 60)
    for entry in result.items:
        click.echo(
            f"{entry.changed_at:%Y-%m-%d %H:%M} {entry.type.value:<11} {entry.quantity:>6} "
            f"{entry.order_id or '':<8} {entry.notes or ''}"
        )
    click.echo(f"Page {result.page}/{result.total_pages} ({result.total} entries)")


@click.command("dashboard")
@click.option("--seller", required=True, help="Seller id.")
def stock_dashboard(seller: str) -> None:
    """Summarise a seller's inventory."""
    dto = InventoryDashboardHandler(product_repo=product_repository()).handle(seller)

    click.echo(f"Products:        {dto.total_products}")
    click.echo(f"Total stock:     {dto.total_stock}  ({dto.total_value})")
    click.echo(f"Reserved:        {dto.reserved_stock}  ({dto.reserved_value})")
    click.echo(f"Available:       {dto.available_stock}  ({dto.available_value})")
    click.echo(f"Low stock:       {dto.low_stock_count}")
    click.echo(f"Out of stock:    {dto.out_of_stock_count}")


@click.command("low")
@click.option("--seller", required=True, help="Seller id.")
def stock_low(seller: str) -> None:
    """List a seller's low-stock products and variations."""
    dto = LowStockHandler(product_repo=product_repository()).handle(seller)

    if not dto.products and not dto.variations:
        click.echo("Nothing is running low.")
        return
    _display_lines(dto.products + dto.variations)
