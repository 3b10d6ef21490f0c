"""CLI command feeding payment-provider webhook payloads into the service."""

from __future__ import annotations

import json
from typing import IO

import click

from bazaar.infrastructure.bootstrap import payment_webhook_handler


@click.command("replay")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.pass_context
def webhook_replay(ctx: click.Context, payload_file: IO[str]) -> None:
    """Process one webhook payload (JSON file, or stdin)."""
    try:
        payload = json.load(payload_file)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON payload: {exc}")
    if not isinstance(payload, dict):
        raise click.ClickException("Webhook payload must be a JSON object")

    ack = payment_webhook_handler().handle(payload)

    click.echo(f"{ack.status_code} {ack.message}")
    if ack.status_code >= 500:
        ctx.exit(1)
