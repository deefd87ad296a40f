"""Render findings and derive the process exit status.

Purpose
-------
Turn the analyzer's findings into text for humans or machines, and decide
whether the command should fail because something is outdated.

Contents
--------
* :func:`render_lines` - verbose or simple text lines
* :func:`render_json` - JSON document of the findings
* :func:`show_result` - print findings unless quiet
* :func:`exit_status` - 0 or 1 from findings and the exit-code flag
"""

from __future__ import annotations

import json

import click

from .logging_setup import Verbosity
from .models import Finding
from .schemas import FindingSchema

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

HEADER = "Outdated dependencies:"
UP_TO_DATE = "All dependencies are up to date."


def render_lines(findings: list[Finding], *, simple_output: bool = False) -> list[str]:
    """Return the lines to print for ``findings``.

    Simple output lists bare package names, one per finding, and prints
    nothing at all when there are none.
    """
    if simple_output:
        # Unlike cabal's showResult, no "up to date" line here: output stays a bare name list.
        return [finding.dependency.name for finding in findings]
    if not findings:
        return [UP_TO_DATE]
    return [HEADER, *(str(finding) for finding in findings)]


def render_json(findings: list[Finding]) -> str:
    """Serialize findings as a JSON array."""
    data = [FindingSchema.from_finding(finding).model_dump() for finding in findings]
    return json.dumps(data, indent=2)


def show_result(
    findings: list[Finding],
    *,
    simple_output: bool = False,
    json_output: bool = False,
    verbosity: Verbosity = Verbosity.NORMAL,
) -> None:
    """Print either the list of all outdated dependencies, or a message that there are none.

    Nothing is printed at :attr:`Verbosity.SILENT`.
    """
    if verbosity < Verbosity.NORMAL:
        return
    if json_output:
        click.echo(render_json(findings))
        return
    for line in render_lines(findings, simple_output=simple_output):
        click.echo(line)


def exit_status(findings: list[Finding], exit_code: bool) -> int:
    """Return failure only when ``exit_code`` is set and something is outdated."""
    return EXIT_FAILURE if exit_code and findings else EXIT_SUCCESS


__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "HEADER",
    "UP_TO_DATE",
    "exit_status",
    "render_json",
    "render_lines",
    "show_result",
]
