"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from bazaar.application.create_cash_order import CreateCashOrderHandler
from bazaar.application.dto import OrderDTO, TransitionDTO
from bazaar.application.show_order import (
    ListSellerOrdersHandler,
    ShowOrderHandler,
    ShowSellerOrderHandler,
)
from bazaar.application.start_checkout import StartCheckoutHandler
from bazaar.application.update_order_status import (
    UpdateOrderStatusHandler,
    UpdateSellerOrderHandler,
)
from bazaar.domain.exceptions import DomainException
from bazaar.infrastructure.bootstrap import (
    cart_repository,
    config,
    order_repository,
    payment_gateway,
    product_repository,
    user_repository,
)


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    paid = "paid" if dto.is_paid else "unpaid"
    click.echo(f"Order #{dto.id}  (status={dto.status}, delivery={dto.delivery_status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Payment:  {dto.payment_method}, {paid}")
    if dto.delivery_guy_id:
        click.echo(f"Courier:  {dto.delivery_guy_id}")
    click.echo()

    click.echo(f"  {'Product':<28} {'Qty':>5} {'Price':>14} {'Total':>14} {'Status':<10} {'Stock':<11}")
    click.echo(f"  {'-'*87}")
    for item in dto.items:
        name = item.product_name
        if item.options:
            name = f"{name} ({' - '.join(item.options.values())})"
        click.echo(
            f"  {name:<28} {item.quantity:>5} {item.price:>14} {item.line_total:>14} "
            f"{item.status:<10} {item.stock_state:<11}"
        )
    click.echo(f"  {'-'*87}")
    click.echo(f"  {'Cart':<49} {dto.cart_price:>14}")
    click.echo(f"  {'Taxes':<49} {dto.taxes:>14}")
    click.echo(f"  {'Shipping':<49} {dto.shipping:>14}")
    click.echo(f"  {'Order Total':<49} {dto.total:>14}")


def _display_transition(dto: TransitionDTO) -> None:
    _display_order(dto.order)
    click.echo()
    click.echo(f"{dto.moved_items} item(s) moved.")
    for failure in dto.failures:
        click.echo(f"  ! {failure.item_name}: {failure.error}", err=True)


@click.command("create")
@click.option("--user", "user_id", required=True, help="Customer user id.")
@click.option("--cart", "cart_id", required=True, help="Cart id.")
def order_create(user_id: str, cart_id: str) -> None:
    """Place a cash-on-delivery order for a cart (reserves stock)."""
    handler = CreateCashOrderHandler(
        order_repo=order_repository(),
        cart_repo=cart_repository(),
        product_repo=product_repository(),
        settings=config().checkout_settings(),
    )

    try:
        dto = handler.handle(user_id, cart_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    click.echo()
    _display_order(dto)


@click.command("checkout")
@click.option("--user", "user_id", required=True, help="Customer user id.")
@click.option("--cart", "cart_id", required=True, help="Cart id.")
def order_checkout(user_id: str, cart_id: str) -> None:
    """Open an online payment session for a cart."""
    handler = StartCheckoutHandler(
        cart_repo=cart_repository(),
        product_repo=product_repository(),
        user_repo=user_repository(),
        gateway=payment_gateway(),
        settings=config().checkout_settings(),
    )

    try:
        dto = handler.handle(user_id, cart_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment reference: {dto.payment_reference}")
    click.echo(f"Pay at:            {dto.payment_url}")
    click.echo(f"Cart {dto.cart_price} + taxes {dto.taxes} + shipping {dto.shipping} = {dto.total}")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--seller", default=None, help="Show only this seller's part of the order.")
def order_show(order_id: str, seller: str | None) -> None:
    """Show details of an existing order."""
    try:
        if seller is None:
            dto = ShowOrderHandler(order_repo=order_repository()).handle(order_id)
        else:
            view = ShowSellerOrderHandler(order_repo=order_repository()).handle(seller, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if seller is None:
        _display_order(dto)
        return
    _display_order(view.order)
    click.echo()
    click.echo(f"  {'Seller subtotal':<49} {view.seller_cart_price:>14}")
    click.echo(f"  {'Seller taxes':<49} {view.seller_taxes:>14}")
    click.echo(f"  {'Seller total':<49} {view.seller_total:>14}")


@click.command("update")
@click.option("--id", "order_id", required=True, help="Order ID to update.")
@click.option("--status", default=None, help="New status (e.g. Approved, shipping, cancelled).")
@click.option("--paid/--unpaid", "is_paid", default=None)
@click.option("--method", "payment_method", default=None, help="Payment method.")
@click.option("--seller", default=None, help="Act as this seller (own items only).")
def order_update(
    order_id: str,
    status: str | None,
    is_paid: bool | None,
    payment_method: str | None,
    seller: str | None,
) -> None:
    """Change an order's status, payment flag or payment method."""
    try:
        if seller is None:
            dto = UpdateOrderStatusHandler(
                order_repo=order_repository(), product_repo=product_repository()
            ).handle(order_id, status=status, is_paid=is_paid, payment_method=payment_method)
        else:
            dto = UpdateSellerOrderHandler(
                order_repo=order_repository(), product_repo=product_repository()
            ).handle(seller, order_id, status=status, is_paid=is_paid, payment_method=payment_method)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_transition(dto)


@click.command("seller-list")
@click.option("--seller", required=True, help="Seller id.")
def order_seller_list(seller: str) -> None:
    """List the orders that contain a seller's products."""
    views = ListSellerOrdersHandler(order_repo=order_repository()).handle(seller)

    if not views:
        click.echo("No orders found.")
        return

    click.echo(f"{'Order':<8} {'Status':<10} {'Items':>5} {'Seller total':>16}  Created")
    click.echo("-" * 64)
    for view in views:
        click.echo(
            f"{view.order.id:<8} {view.order.status:<10} {len(view.order.items):>5} "
            f"{view.seller_total:>16}  {view.order.created_at}"
        )
