"""Parsing helpers shared by the CLI command modules."""

from __future__ import annotations

import click


def parse_options(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('Color=Black', 'Storage=128GB') into an ordered dict."""
    options: dict[str, str] = {}
    for pair in raw:
        if "=" not in pair:
            raise click.BadParameter(f"Invalid option '{pair}'. Expected 'Axis=Value'.")
        axis, value = pair.split("=", 1)
        options[axis.strip()] = value.strip()
    return options


def parse_axes(raw: tuple[str, ...]) -> dict[str, list[str]]:
    """Parse ('Color=Black,White', 'Size=S,M') into {axis: [values]}."""
    axes: dict[str, list[str]] = {}
    for spec in raw:
        if "=" not in spec:
            raise click.BadParameter(f"Invalid axis '{spec}'. Expected 'Axis=Value,Value'.")
        axis, values = spec.split("=", 1)
        axes[axis.strip()] = split_list(values)
    return axes


def split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]
