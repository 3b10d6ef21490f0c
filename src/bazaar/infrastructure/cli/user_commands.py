"""CLI commands for users."""

from __future__ import annotations

import click

from bazaar.application.register_user import RegisterUserHandler
from bazaar.domain.exceptions import DomainException
from bazaar.infrastructure.bootstrap import user_repository


@click.command("add")
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option(
    "--role",
    default="user",
    type=click.Choice(["user", "seller", "delivery", "admin"]),
)
def user_add(name: str, email: str, role: str) -> None:
    """Register a user."""
    handler = RegisterUserHandler(user_repo=user_repository())

    try:
        user = handler.handle(name, email, role=role)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"User {user.id} '{user.name}' <{user.email}> registered as {user.role.value}")
