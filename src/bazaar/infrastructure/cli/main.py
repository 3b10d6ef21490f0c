import click

from bazaar.infrastructure.cli.cart_commands import (
    cart_add,
    cart_change,
    cart_clear,
    cart_coupon,
    cart_remove,
    cart_show,
    cart_update,
    coupon_create,
)
from bazaar.infrastructure.cli.delivery_commands import delivery_assign, delivery_update
from bazaar.infrastructure.cli.order_commands import (
    order_checkout,
    order_create,
    order_seller_list,
    order_show,
    order_update,
)
from bazaar.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_price,
    product_price_history,
)
from bazaar.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_dashboard,
    stock_history,
    stock_low,
    stock_release,
    stock_reserve,
    stock_set,
    stock_show,
    stock_threshold,
)
from bazaar.infrastructure.cli.user_commands import user_add
from bazaar.infrastructure.cli.variation_commands import (
    variation_add,
    variation_bulk,
    variation_check,
    variation_generate,
    variation_options,
    variation_update,
)
from bazaar.infrastructure.cli.webhook_commands import webhook_replay
from bazaar.infrastructure.config import AppConfig
from bazaar.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """Bazaar -- marketplace catalog, carts and orders"""
    configure_logging(AppConfig.from_env().logging)


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def variation() -> None:
    """Manage product variations."""


@cli.group()
def stock() -> None:
    """Manage stock levels."""


@cli.group()
def cart() -> None:
    """Manage shopping carts."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def delivery() -> None:
    """Courier assignment and delivery progress."""


@cli.group()
def user() -> None:
    """Manage users."""


@cli.group()
def webhook() -> None:
    """Payment provider callbacks."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_price)
product.add_command(product_price_history)
variation.add_command(variation_add)
variation.add_command(variation_bulk)
variation.add_command(variation_check)
variation.add_command(variation_generate)
variation.add_command(variation_options)
variation.add_command(variation_update)
stock.add_command(stock_adjust)
stock.add_command(stock_dashboard)
stock.add_command(stock_history)
stock.add_command(stock_low)
stock.add_command(stock_release)
stock.add_command(stock_reserve)
stock.add_command(stock_set)
stock.add_command(stock_show)
stock.add_command(stock_threshold)
cart.add_command(cart_add)
cart.add_command(cart_change)
cart.add_command(cart_clear)
cart.add_command(cart_coupon)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
coupon.add_command(coupon_create)
order.add_command(order_checkout)
order.add_command(order_create)
order.add_command(order_seller_list)
order.add_command(order_show)
order.add_command(order_update)
delivery.add_command(delivery_assign)
delivery.add_command(delivery_update)
user.add_command(user_add)
webhook.add_command(webhook_replay)
