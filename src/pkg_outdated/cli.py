"""Command line interface built on click.

Commands
--------
* ``outdated`` - list dependencies with newer releases
* ``config`` - show the merged configuration
* ``info`` - show distribution metadata
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __init__conf__
from .config import get_outdated_settings
from .config_show import display_config
from .errors import OutdatedError
from .logging_setup import Verbosity, configure_logging
from .models import CompilerId, OutdatedFlags, Platform
from .outdated import outdated
from .package_index import load_package_index


def _split_names(values: tuple[str, ...]) -> frozenset[str]:
    """Accept ``--ignore a,b --ignore c`` as well as repeated options."""
    return frozenset(name.strip() for value in values for name in value.split(",") if name.strip())


@click.group(help=__init__conf__.title)
@click.version_option(__init__conf__.version, prog_name=__init__conf__.shell_command)
def cli() -> None:
    """Root command group."""


@cli.command("outdated")
@click.option("--freeze-file", is_flag=True, help="Act on the freeze file (cabal.config).")
@click.option("--new-freeze-file", is_flag=True, help="Act on the new-style freeze file (cabal.project.freeze).")
@click.option("--simple-output", is_flag=True, help="Only print names of outdated dependencies.")
@click.option("--json", "json_output", is_flag=True, help="Print findings as a JSON array.")
@click.option("-q", "--quiet", is_flag=True, help="Don't print any output. Implies --exit-code.")
@click.option(
    "--exit-code/--no-exit-code",
    default=None,
    help="Exit with a non-zero status if there are outdated dependencies.",
)
@click.option("--ignore", multiple=True, metavar="PKGS", help="Packages to ignore (comma-separated, repeatable).")
@click.option(
    "--minor",
    multiple=True,
    metavar="PKGS",
    help="Ignore major version bumps for these packages (comma-separated, repeatable).",
)
@click.option(
    "--index",
    "index_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Package index snapshot (JSON). Defaults to outdated.index_path.",
)
@click.option("--compiler", help="Compiler identity such as ghc-9.4.8.")
@click.option("--platform", "platform_text", help="Target platform such as x86_64-linux.")
@click.option(
    "-d",
    "--directory",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    help="Run as if started in this directory.",
)
@click.option("-v", "--verbosity", type=click.IntRange(0, 3), default=1, show_default=True)
@click.pass_context
def outdated_command(
    ctx: click.Context,
    freeze_file: bool,
    new_freeze_file: bool,
    simple_output: bool,
    json_output: bool,
    quiet: bool,
    exit_code: bool | None,
    ignore: tuple[str, ...],
    minor: tuple[str, ...],
    index_path: Path | None,
    compiler: str | None,
    platform_text: str | None,
    directory: Path | None,
    verbosity: int,
) -> None:
    """Check for outdated dependencies in the package description or a freeze file."""
    level = Verbosity.SILENT if quiet else Verbosity.from_int(verbosity)
    configure_logging(level)
    flags = OutdatedFlags(
        freeze_file=freeze_file,
        new_freeze_file=new_freeze_file,
        simple_output=simple_output,
        json_output=json_output,
        quiet=quiet,
        exit_code=exit_code,
        ignore=_split_names(ignore),
        minor=_split_names(minor),
    )

    try:
        settings = get_outdated_settings()
        index_file = index_path or settings.index_path
        if index_file is None:
            raise click.UsageError("No package index given; pass --index or set outdated.index_path.")
        status = outdated(
            level,
            flags,
            load_package_index(index_file),
            CompilerId.from_string(compiler) if compiler else settings.compiler,
            Platform.from_string(platform_text) if platform_text else settings.platform,
            working_dir=directory,
        )
    except OutdatedError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    ctx.exit(status)


@cli.command("config")
@click.option("--format", "format_", type=click.Choice(["human", "json"]), default="human", show_default=True)
@click.option("--section", help="Only show this section.")
def config_command(format_: str, section: str | None) -> None:
    """Show the merged configuration."""
    display_config(format=format_, section=section)


@cli.command("info")
def info_command() -> None:
    """Show distribution metadata."""
    __init__conf__.print_info()


def main() -> None:
    """Console script entry point."""
    cli(prog_name=__init__conf__.shell_command)


__all__ = ["cli", "main"]
