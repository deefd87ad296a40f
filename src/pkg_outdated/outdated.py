"""Entry point of the outdated command.

Purpose
-------
Wire the pipeline together: pick the dependency source, load the
dependencies, analyze them against the already loaded package index, print
the result and compute the exit status.

Contents
--------
* :func:`outdated` - run the whole command once
"""

from __future__ import annotations

import logging
from pathlib import Path

from .analyzer import list_outdated
from .dependency_source import SourceContext, resolve_dependencies, select_source
from .logging_setup import Verbosity
from .models import CompilerId, OutdatedFlags, Platform
from .package_description import ComponentPredicate, FlagPredicate, always_true
from .package_index import PackageIndex
from .reporter import exit_status, show_result

logger = logging.getLogger(__name__)


def outdated(
    verbosity: Verbosity,
    flags: OutdatedFlags,
    index: PackageIndex,
    compiler: CompilerId,
    platform: Platform,
    *,
    working_dir: Path | None = None,
    component_predicate: ComponentPredicate = always_true,
    flag_predicate: FlagPredicate = always_true,
) -> int:
    """Check for outdated dependencies and return the process exit status.

    Args:
        verbosity: Output level; forced to silent when ``flags.quiet`` is set.
        flags: Options of the command.
        index: Published package versions, loaded beforehand.
        compiler: Compiler identity used to finalize the package description.
        platform: Platform used to finalize the package description.
        working_dir: Directory to look for sources in; defaults to the
            current working directory.
        component_predicate: Component policy handed to finalization.
        flag_predicate: Flag policy handed to finalization.

    Returns:
        0 on success, 1 when something is outdated and the exit-code flag
        (which defaults to ``flags.quiet``) is set.

    Raises:
        OutdatedError: When the dependency source cannot be read.
    """
    if flags.quiet:
        verbosity = Verbosity.SILENT

    source = select_source(flags)
    logger.info("Using the %s as dependency source", source.value)
    context = SourceContext(
        working_dir=working_dir if working_dir is not None else Path.cwd(),
        compiler=compiler,
        platform=platform,
        component_predicate=component_predicate,
        flag_predicate=flag_predicate,
    )
    deps = resolve_dependencies(source, context)
    findings = list_outdated(deps, index, flags.settings())
    logger.info("%d of %d dependencies are outdated", len(findings), len(deps))

    if not flags.quiet:
        show_result(
            findings,
            simple_output=flags.simple_output,
            json_output=flags.json_output,
            verbosity=verbosity,
        )
    return exit_status(findings, flags.effective_exit_code)


__all__ = ["outdated"]
