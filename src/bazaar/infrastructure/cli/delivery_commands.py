"""CLI commands for couriers and delivery progress."""

from __future__ import annotations

import click

from bazaar.application.delivery import AssignCourierHandler, UpdateDeliveryStatusHandler
from bazaar.domain.exceptions import DomainException
from bazaar.infrastructure.bootstrap import (
    config,
    courier_repository,
    order_repository,
    product_repository,
    user_repository,
)


@click.command("assign")
@click.option("--order", "order_id", required=True, help="Order id.")
@click.option("--courier", "courier_id", required=True, help="Delivery user id.")
def delivery_assign(order_id: str, courier_id: str) -> None:
    """Assign a courier to an order."""
    handler = AssignCourierHandler(
        order_repo=order_repository(),
        user_repo=user_repository(),
        courier_repo=courier_repository(),
    )

    try:
        dto = handler.handle(order_id, courier_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} assigned to courier {courier_id}.")


@click.command("update")
@click.option("--order", "order_id", required=True, help="Order id.")
@click.option("--courier", "courier_id", required=True, help="Delivery user id.")
@click.option(
    "--status",
    required=True,
    type=click.Choice(["picked_up", "in_transit", "delivered"]),
)
@click.option("--notes", default=None, help="Delivery notes.")
def delivery_update(order_id: str, courier_id: str, status: str, notes: str | None) -> None:
    """Report delivery progress for an assigned order."""
    settings = config()
    handler = UpdateDeliveryStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        user_repo=user_repository(),
        courier_repo=courier_repository(),
        delivery_fee=settings.delivery_fee_money(),
    )

    try:
        dto = handler.handle(courier_id, order_id, status, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}: delivery={dto.delivery_status}, status={dto.status}")
