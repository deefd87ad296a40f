"""Select where the declared dependencies come from and load them.

Purpose
-------
Produce one uniform list of :class:`~pkg_outdated.models.Dependency` from
exactly one of three inputs: the legacy freeze file, the project-level
freeze file, or the package description.

Contents
--------
* :class:`SourceKind` - the three alternative sources
* :func:`select_source` - pick the source from the command flags
* :class:`SourceContext` - everything a source strategy may need
* :func:`deps_from_freeze_file` / :func:`deps_from_new_freeze_file` /
  :func:`deps_from_package_description` - the strategies
* :func:`resolve_dependencies` - run the strategy for a source

System Role
-----------
The only stage besides index loading that touches the file system. The
analyzer never learns which source produced its input.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .freeze_file import find_project_root, load_legacy_freeze_file, load_project_freeze_file
from .models import CompilerId, Dependency, OutdatedFlags, Platform, UserConstraint
from .package_description import (
    ComponentPredicate,
    FlagPredicate,
    always_true,
    find_package_description,
    finalize,
    read_package_description,
)

logger = logging.getLogger(__name__)


class SourceKind(str, Enum):
    """Where the list of dependencies is read from."""

    LEGACY = "freeze file"
    NEW_STYLE = "new-style freeze file"
    DESCRIPTION = "package description"


def select_source(flags: OutdatedFlags) -> SourceKind:
    """Pick the dependency source; the legacy freeze file wins over the new one."""
    if flags.freeze_file:
        return SourceKind.LEGACY
    if flags.new_freeze_file:
        return SourceKind.NEW_STYLE
    return SourceKind.DESCRIPTION


@dataclass(frozen=True, slots=True)
class SourceContext:
    """Inputs shared by the source strategies.

    Attributes:
        working_dir: Directory the command runs in.
        compiler: Compiler identity used to finalize the description.
        platform: Platform used to finalize the description.
        component_predicate: Which components finalization includes.
        flag_predicate: Value finalization assigns to each flag.
    """

    working_dir: Path
    compiler: CompilerId
    platform: Platform
    component_predicate: ComponentPredicate = always_true
    flag_predicate: FlagPredicate = always_true


def user_constraints_to_dependencies(constraints: list[UserConstraint]) -> list[Dependency]:
    """Keep the version constraints, dropping their qualifiers."""
    return [dep for dep in (c.to_dependency() for c in constraints) if dep is not None]


def deps_from_freeze_file(
    context: SourceContext,
    load: Callable[[Path], list[UserConstraint]] = load_legacy_freeze_file,
) -> list[Dependency]:
    """Read the list of dependencies from the legacy freeze file."""
    logger.debug("Reading the list of dependencies from the freeze file")
    return user_constraints_to_dependencies(load(context.working_dir))


def deps_from_new_freeze_file(
    context: SourceContext,
    find_root: Callable[[Path], Path] = find_project_root,
    load: Callable[[Path], list[UserConstraint]] = load_project_freeze_file,
) -> list[Dependency]:
    """Read the list of dependencies from the new-style freeze file."""
    logger.debug("Reading the list of dependencies from the new-style freeze file")
    return user_constraints_to_dependencies(load(find_root(context.working_dir)))


def deps_from_package_description(context: SourceContext) -> list[Dependency]:
    """Read the list of dependencies from the package description.

    Raises:
        DescriptionError: If the description is absent, ambiguous or malformed.
        FinalizationError: If the description cannot be finalized.
    """
    path = find_package_description(context.working_dir)
    generic = read_package_description(path)
    description = finalize(
        generic,
        context.compiler,
        context.platform,
        context.component_predicate,
        context.flag_predicate,
    )
    logger.debug("Reading the list of dependencies from the package description")
    return description.build_depends


_STRATEGIES: dict[SourceKind, Callable[[SourceContext], list[Dependency]]] = {
    SourceKind.LEGACY: deps_from_freeze_file,
    SourceKind.NEW_STYLE: deps_from_new_freeze_file,
    SourceKind.DESCRIPTION: deps_from_package_description,
}


def resolve_dependencies(source: SourceKind, context: SourceContext) -> list[Dependency]:
    """Load the dependencies of ``source``; only that source is touched."""
    deps = _STRATEGIES[source](context)
    logger.debug("Dependencies loaded: %s", ", ".join(str(d) for d in deps))
    return deps


__all__ = [
    "SourceContext",
    "SourceKind",
    "deps_from_freeze_file",
    "deps_from_new_freeze_file",
    "deps_from_package_description",
    "resolve_dependencies",
    "select_source",
    "user_constraints_to_dependencies",
]
