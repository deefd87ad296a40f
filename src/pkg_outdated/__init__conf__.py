"""Distribution metadata and configuration identifiers.

The ``LAYEREDCONF_*`` constants decide where lib_layered_config looks for
application, host and user configuration files.
"""

from __future__ import annotations

import click

name = "pkg-outdated"
title = "Report declared package dependencies that have newer releases"
version = "0.1.0"
author = "pkg-outdated developers"
shell_command = "pkg-outdated"

LAYEREDCONF_VENDOR = "pkg-outdated"
LAYEREDCONF_APP = "pkg-outdated"
LAYEREDCONF_SLUG = "pkg-outdated"


def print_info() -> None:
    """Print the distribution metadata."""
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    )
    width = max(len(key) for key, _ in fields)
    click.echo(f"Info for {name}:\n")
    for key, value in fields:
        click.echo(f"    {key.ljust(width)} = {value}")


__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "print_info",
]
