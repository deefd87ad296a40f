"""Display of the merged configuration for the ``config`` command.

Purpose
-------
Show the effective configuration, as merged from defaults, app, host and
user configs, .env files and environment variables, either TOML-like for
humans or as JSON.

Contents
--------
* :func:`display_config` – displays configuration in requested format
"""

from __future__ import annotations

import json
from typing import Any, cast

import click

from .config import get_config


def _format_value(value: Any) -> str:
    """Format a configuration value the way it would appear in TOML."""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _echo_section(section_name: str, section_data: Any) -> None:
    click.echo(f"\n[{section_name}]")
    if isinstance(section_data, dict):
        for key, value in cast(dict[str, Any], section_data).items():
            click.echo(f"  {key} = {_format_value(value)}")
    else:
        click.echo(f"  {section_data}")


def _missing_section(section: str) -> None:
    click.echo(f"Section '{section}' not found or empty", err=True)
    raise SystemExit(1)


def display_config(*, format: str = "human", section: str | None = None) -> None:
    """Display the current merged configuration from all sources.

    Args:
        format: "human" for TOML-like display or "json" for JSON.
        section: Only display this section when given.

    Side Effects:
        Writes to stdout via click.echo(). Raises SystemExit(1) if the
        requested section doesn't exist.

    Example:
        >>> display_config(section="outdated")  # doctest: +SKIP
        [outdated]
          index_path = ""
          compiler = "ghc-9.4.8"
          platform = ""
    """
    config = get_config()
    as_json = format.lower() == "json"

    if section:
        section_data = config.get(section, default={})
        if not section_data:
            _missing_section(section)
        if as_json:
            click.echo(json.dumps({section: section_data}, indent=2))
        else:
            _echo_section(section, section_data)
        return

    if as_json:
        click.echo(config.to_json(indent=2))
        return
    data: dict[str, Any] = config.as_dict()
    for section_name, section_data in data.items():
        _echo_section(section_name, section_data)


__all__ = [
    "display_config",
]
