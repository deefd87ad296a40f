"""Core analyzer that decides which dependencies are outdated.

Purpose
-------
Compare each declared dependency against the package index and report the
ones for which a newer version is available, honouring the ignore and
minor-relax policies.

Contents
--------
* :class:`Policy` - what the settings say about one package name
* :func:`dependency_policy` - the per-name ignore/relax rule
* :func:`is_outdated` - judge a single dependency
* :func:`list_outdated` - judge a whole dependency list

System Role
-----------
The central component of the pipeline. It is a pure function of its inputs:
no I/O, no hidden state, so identical inputs always give identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from .models import Dependency, Finding, ListOutdatedSettings
from .package_index import PackageIndex
from .version import Version
from .version_range import relax_minor

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    """How a dependency is treated, decided from its name alone.

    Attributes:
        IGNORE: Never reported.
        MINOR: Latest is looked up within the current major line only.
        LATEST: Latest is any published version.
    """

    IGNORE = "ignore"
    MINOR = "minor"
    LATEST = "latest"


def dependency_policy(name: str, settings: ListOutdatedSettings) -> Policy:
    """Return the policy for ``name``; ignoring wins over relaxing."""
    if name in settings.ignore:
        return Policy.IGNORE
    if name in settings.minor:
        return Policy.MINOR
    return Policy.LATEST


def _latest_candidates(dep: Dependency, index: PackageIndex, policy: Policy) -> frozenset[Version]:
    if policy is Policy.MINOR:
        return index.versions_matching(dep.name, relax_minor(dep.version_range))
    return index.versions_of(dep.name)


def is_outdated(dep: Dependency, index: PackageIndex, policy: Policy) -> Version | None:
    """Return the newer version ``dep`` could move to, or None.

    None also covers dependencies without data: no published version
    matching the declared range, or no candidate for the latest version.
    """
    current = index.versions_matching(dep.name, dep.version_range)
    latest = _latest_candidates(dep, index, policy)
    if not current or not latest:
        logger.debug("No version data for %s; skipping", dep)
        return None
    current_max, latest_max = max(current), max(latest)
    return latest_max if current_max < latest_max else None


def list_outdated(
    dependencies: Iterable[Dependency],
    index: PackageIndex,
    settings: ListOutdatedSettings,
) -> list[Finding]:
    """Find all outdated dependencies.

    Args:
        dependencies: Declared dependencies; duplicates are judged separately.
        index: Published versions to compare against.
        settings: Ignore and minor-relax sets.

    Returns:
        Findings in input order, ignored dependencies left out.

    Example:
        >>> from pkg_outdated.package_index import InMemoryPackageIndex
        >>> index = InMemoryPackageIndex.from_strings({"foo": ["1.0", "2.0"]})
        >>> [str(f) for f in list_outdated([Dependency.from_string("foo ==1.0")], index, ListOutdatedSettings())]
        ['foo ==1.0 (latest: 2.0)']
    """
    findings: list[Finding] = []
    for dep in dependencies:
        simplified = dep.simplify()
        policy = dependency_policy(simplified.name, settings)
        if policy is Policy.IGNORE:
            continue
        latest = is_outdated(simplified, index, policy)
        if latest is not None:
            findings.append(Finding(simplified, latest))
    return findings


__all__ = [
    "Policy",
    "dependency_policy",
    "is_outdated",
    "list_outdated",
]
