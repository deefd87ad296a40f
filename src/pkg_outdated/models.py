"""Domain models for outdated-dependency analysis (dataclasses).

Purpose
-------
Define the core data structures that flow through the analysis pipeline.
These are pure, immutable dataclasses used for internal business logic.

For external data serialization, use the Pydantic schemas in schemas.py.

Contents
--------
* :class:`Dependency` - package name with a version range
* :class:`UserConstraint` - a constraint as recorded in a freeze file
* :class:`Finding` - an outdated dependency and its latest version
* :class:`ListOutdatedSettings` - ignore and minor-relax policy sets
* :class:`OutdatedFlags` - options recognized by the outdated command
* :class:`CompilerId` - compiler flavour and version
* :class:`Platform` - architecture and operating system

Data Flow Pattern
-----------------
Source files → Dependency list → analyzer → Finding list → reporter
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .errors import VersionParseError
from .version import Version
from .version_range import AnyVersion, VersionRange, parse_version_range, simplify_version_range

_RE_DEPENDENCY = re.compile(r"^([A-Za-z0-9][A-Za-z0-9_.-]*)\s*(.*)$", re.ASCII | re.DOTALL)


@dataclass(frozen=True, slots=True)
class Dependency:
    """A declared dependency on a package.

    Attributes:
        name: The package name. Not unique within a dependency list.
        version_range: Versions the dependency accepts.
    """

    name: str
    version_range: VersionRange = field(default_factory=AnyVersion)

    def simplify(self) -> Dependency:
        """Return the same dependency with redundant range clauses removed."""
        return Dependency(self.name, simplify_version_range(self.version_range))

    def __str__(self) -> str:
        """Return dependency as text like 'foo >=1.2 && <1.3'."""
        return f"{self.name} {self.version_range}"

    @classmethod
    def from_string(cls, text: str) -> Dependency:
        """Parse a dependency like 'foo >=1.2 && <1.3' or a bare 'foo'.

        Raises:
            VersionParseError: If the name or the range is malformed.
        """
        match = _RE_DEPENDENCY.match(text.strip())
        if not match:
            msg = f"Invalid dependency: {text!r}"
            raise VersionParseError(msg)
        return cls(match.group(1), parse_version_range(match.group(2)))


@dataclass(frozen=True, slots=True)
class UserConstraint:
    """A constraint recorded in a freeze file.

    Only constraints carrying a version range describe a dependency;
    property constraints (``installed``, ``source``, flag settings) leave
    ``version_range`` as None.

    Attributes:
        name: The constrained package name.
        version_range: The version range, when this is a version constraint.
        qualifier: Scope qualifier such as ``any`` or ``setup``, if given.
        properties: Raw non-version properties, in file order.
    """

    name: str
    version_range: VersionRange | None = None
    qualifier: str | None = None
    properties: tuple[str, ...] = ()

    def to_dependency(self) -> Dependency | None:
        """Drop the qualifier; return None for non-version constraints."""
        if self.version_range is None:
            return None
        return Dependency(self.name, self.version_range)


@dataclass(frozen=True, slots=True)
class Finding:
    """An outdated dependency.

    Attributes:
        dependency: The (simplified) dependency that is behind.
        latest: The newest version the policy allows.
    """

    dependency: Dependency
    latest: Version

    def __str__(self) -> str:
        return f"{self.dependency} (latest: {self.latest})"


@dataclass(frozen=True, slots=True)
class ListOutdatedSettings:
    """Various knobs for customising the behaviour of the analyzer.

    Attributes:
        ignore: Package names never reported.
        minor: Package names for which major version bumps are ignored.
    """

    ignore: frozenset[str] = frozenset()
    minor: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class OutdatedFlags:
    """Options of the outdated command.

    ``exit_code`` left as None follows ``quiet``.
    """

    freeze_file: bool = False
    new_freeze_file: bool = False
    simple_output: bool = False
    json_output: bool = False
    quiet: bool = False
    exit_code: bool | None = None
    ignore: frozenset[str] = frozenset()
    minor: frozenset[str] = frozenset()

    @property
    def effective_exit_code(self) -> bool:
        return self.quiet if self.exit_code is None else self.exit_code

    def settings(self) -> ListOutdatedSettings:
        return ListOutdatedSettings(ignore=self.ignore, minor=self.minor)


@dataclass(frozen=True, slots=True)
class CompilerId:
    """Compiler flavour and version, e.g. ``ghc-9.4.8``."""

    flavour: str
    version: Version

    def __str__(self) -> str:
        return f"{self.flavour}-{self.version}"

    @classmethod
    def from_string(cls, text: str) -> CompilerId:
        """Parse 'ghc-9.4.8'; the version is everything after the last dash.

        Raises:
            VersionParseError: If the text has no flavour or no version.
        """
        flavour, sep, version = text.strip().rpartition("-")
        if not sep or not flavour:
            msg = f"Invalid compiler id: {text!r}"
            raise VersionParseError(msg)
        return cls(flavour.lower(), Version.parse(version))


@dataclass(frozen=True, slots=True)
class Platform:
    """Target architecture and operating system, e.g. ``x86_64-linux``."""

    arch: str
    os: str

    def __str__(self) -> str:
        return f"{self.arch}-{self.os}"

    @classmethod
    def from_string(cls, text: str) -> Platform:
        """Parse 'x86_64-linux'; the os is everything after the first dash.

        Raises:
            VersionParseError: If either part is missing.
        """
        arch, sep, os_name = text.strip().partition("-")
        if not sep or not arch or not os_name:
            msg = f"Invalid platform: {text!r}"
            raise VersionParseError(msg)
        return cls(arch.lower(), os_name.lower())


__all__ = [
    "CompilerId",
    "Dependency",
    "Finding",
    "ListOutdatedSettings",
    "OutdatedFlags",
    "Platform",
    "UserConstraint",
]
