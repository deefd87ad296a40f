"""Public package surface for outdated-dependency analysis.

This package compares the dependencies a project declares, in its package
description or in a freeze file, against a package index and reports those
with newer releases.

Main API
--------
* :func:`outdated` - run the outdated command end to end
* :func:`list_outdated` - pure analysis of a dependency list
* :class:`Dependency`, :class:`Finding`, :class:`ListOutdatedSettings`
* :func:`parse_version_range`, :func:`relax_minor` - version range model
"""

from __future__ import annotations

from .__init__conf__ import print_info
from .analyzer import Policy, dependency_policy, list_outdated
from .config import get_config
from .errors import OutdatedError
from .models import (
    CompilerId,
    Dependency,
    Finding,
    ListOutdatedSettings,
    OutdatedFlags,
    Platform,
)
from .outdated import outdated
from .package_index import InMemoryPackageIndex, PackageIndex, load_package_index
from .version import Version
from .version_range import VersionRange, parse_version_range, relax_minor

__all__ = [
    "CompilerId",
    "Dependency",
    "Finding",
    "InMemoryPackageIndex",
    "ListOutdatedSettings",
    "OutdatedError",
    "OutdatedFlags",
    "PackageIndex",
    "Platform",
    "Policy",
    "Version",
    "VersionRange",
    "dependency_policy",
    "get_config",
    "list_outdated",
    "load_package_index",
    "outdated",
    "parse_version_range",
    "print_info",
    "relax_minor",
]
