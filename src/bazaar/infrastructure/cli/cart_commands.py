"""CLI commands for the Cart aggregate and coupons."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from bazaar.application.add_to_cart import AddToCartHandler
from bazaar.application.apply_coupon import ApplyCouponHandler
from bazaar.application.dto import CartDTO, CartItemSpec
from bazaar.application.register_user import CreateCouponHandler
from bazaar.application.show_cart import ShowCartHandler
from bazaar.application.update_cart import (
    ChangeCartVariationHandler,
    ClearCartHandler,
    RemoveCartItemHandler,
    UpdateCartItemHandler,
)
from bazaar.domain.exceptions import DomainException
from bazaar.infrastructure.bootstrap import cart_repository, coupon_repository, product_repository
from bazaar.infrastructure.cli.params import parse_options


def _display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying a cart."""
    click.echo(f"Cart {dto.id}  (user={dto.user_id})")
    click.echo()
    click.echo(f"  {'Line':<32} {'Product':<28} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*97}")
    for item in dto.items:
        name = item.product_name
        if item.options:
            name = f"{name} ({' - '.join(item.options.values())})"
        click.echo(
            f"  {item.id:<32} {name:<28} {item.quantity:>5} {item.price:>14} {item.line_total:>14}"
        )
    click.echo(f"  {'-'*97}")
    click.echo(f"  {'Total':<67} {dto.total_price:>29}")
    if dto.coupon_code:
        click.echo(f"  {'After coupon ' + dto.coupon_code:<67} {dto.total_price_after_discount:>29}")


@click.command("add")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--quantity", default=1, type=int)
@click.option("--option", "options", multiple=True, help="Axis=Value (repeatable).")
@click.option("--variation", "variation_id", default=None, help="Variation id.")
@click.option("--color", default=None)
@click.option("--size", default=None)
def cart_add(
    user_id: str,
    product_id: str,
    quantity: int,
    options: tuple[str, ...],
    variation_id: str | None,
    color: str | None,
    size: str | None,
) -> None:
    """Add a product (or one of its variations) to the cart."""
    spec = CartItemSpec(
        product_id=product_id,
        quantity=quantity,
        variation_options=parse_options(options),
        variation_id=variation_id,
        color=color,
        size=size,
    )
    handler = AddToCartHandler(cart_repo=cart_repository(), product_repo=product_repository())

    try:
        dto = handler.handle(user_id, spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("show")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
def cart_show(user_id: str) -> None:
    """Show the user's cart."""
    handler = ShowCartHandler(cart_repo=cart_repository())

    try:
        dto = handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("update")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
@click.option("--line", "line_id", required=True, help="Cart line id.")
@click.option("--quantity", required=True, type=int)
def cart_update(user_id: str, line_id: str, quantity: int) -> None:
    """Change the quantity of a cart line."""
    handler = UpdateCartItemHandler(cart_repo=cart_repository(), product_repo=product_repository())

    try:
        dto = handler.handle(user_id, line_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("change")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
@click.option("--line", "line_id", required=True, help="Cart line id.")
@click.option("--option", "options", multiple=True, help="Axis=Value (repeatable).")
@click.option("--variation", "variation_id", default=None, help="Variation id.")
def cart_change(
    user_id: str, line_id: str, options: tuple[str, ...], variation_id: str | None
) -> None:
    """Switch a cart line to another variation of the same product."""
    handler = ChangeCartVariationHandler(
        cart_repo=cart_repository(), product_repo=product_repository()
    )

    try:
        dto = handler.handle(user_id, line_id, parse_options(options), variation_id=variation_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
@click.option("--line", "line_id", required=True, help="Cart line id.")
def cart_remove(user_id: str, line_id: str) -> None:
    """Remove a line from the cart."""
    handler = RemoveCartItemHandler(cart_repo=cart_repository())

    try:
        dto = handler.handle(user_id, line_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("clear")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
def cart_clear(user_id: str) -> None:
    """Empty the cart."""
    handler = ClearCartHandler(cart_repo=cart_repository())

    try:
        handler.handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart of user {user_id} cleared.")


@click.command("coupon")
@click.option("--user", "user_id", required=True, help="Shopper user id.")
@click.option("--code", required=True, help="Coupon code.")
def cart_coupon(user_id: str, code: str) -> None:
    """Apply a coupon to the cart."""
    handler = ApplyCouponHandler(cart_repo=cart_repository(), coupon_repo=coupon_repository())

    try:
        dto = handler.handle(user_id, code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("create")
@click.option("--code", required=True, help="Eight-character coupon code.")
@click.option("--discount", required=True, help="Discount percentage.")
@click.option("--expires", required=True, type=click.DateTime(), help="Expiry (UTC).")
def coupon_create(code: str, discount: str, expires: datetime) -> None:
    """Create a discount coupon."""
    handler = CreateCouponHandler(coupon_repo=coupon_repository())

    try:
        coupon = handler.handle(code, discount, expires.replace(tzinfo=timezone.utc))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {coupon.code} created: -{coupon.discount}% until {coupon.expires_at:%Y-%m-%d %H:%M} UTC")
